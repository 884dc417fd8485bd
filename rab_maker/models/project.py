"""Project model."""
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from rab_maker.database import Base, IdType


class Project(Base):
    """Construction project owned by one user."""

    __tablename__ = 'projects'

    id = Column(IdType, primary_key=True, autoincrement=True)
    user_id = Column(IdType, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    location = Column(String(100), nullable=False)
    client_name = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    # Cascade delete-orphan: deleting the project removes its work items (and their costs)
    work_items = relationship(
        'WorkItem',
        back_populates='project',
        cascade='all, delete-orphan',
        passive_deletes=True,
        order_by='WorkItem.id',
    )

    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'location': self.location,
            'client_name': self.client_name,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Project(id={self.id}, name='{self.name}')>"

"""Work category model."""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.sql import func
from rab_maker.database import Base, IdType


class WorkCategory(Base):
    """Grouping for work items (e.g. Pekerjaan Persiapan, Pekerjaan Tanah)."""

    __tablename__ = 'work_categories'

    id = Column(IdType, primary_key=True, autoincrement=True)
    user_id = Column(IdType, ForeignKey('users.id', ondelete='CASCADE'), nullable=True, index=True)
    name = Column(String(100), nullable=False)
    display_order = Column(Integer, nullable=False, default=0, server_default='0')
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'display_order': self.display_order,
        }

    def __repr__(self):
        return f"<WorkCategory(id={self.id}, name='{self.name}')>"

"""Project work item model."""
from sqlalchemy import Column, String, Float, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from rab_maker.database import Base, IdType


class WorkItem(Base):
    """A line in the project's bill of quantities, optionally priced by a template."""

    __tablename__ = 'work_items'
    __table_args__ = (
        CheckConstraint('volume > 0', name='ck_work_items_volume'),
    )

    id = Column(IdType, primary_key=True, autoincrement=True)
    project_id = Column(IdType, ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True)
    category_id = Column(IdType, ForeignKey('work_categories.id'), nullable=False, index=True)
    description = Column(String(255), nullable=False)
    volume = Column(Float, nullable=False)
    unit = Column(String(50), nullable=False)
    template_id = Column(IdType, ForeignKey('ahsp_templates.id'), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    project = relationship('Project', back_populates='work_items')
    category = relationship('WorkCategory')
    template = relationship('AHSPTemplate')
    costs = relationship(
        'ProjectItemCost',
        back_populates='work_item',
        cascade='all, delete-orphan',
        passive_deletes=True,
    )

    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'project_id': self.project_id,
            'category_id': self.category_id,
            'description': self.description,
            'volume': self.volume,
            'unit': self.unit,
            'template_id': self.template_id,
        }

    def __repr__(self):
        return f"<WorkItem(id={self.id}, description='{self.description}', volume={self.volume})>"

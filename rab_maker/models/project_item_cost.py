"""Project item cost model (frozen cost snapshot rows)."""
from sqlalchemy import Column, String, Float, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from rab_maker.database import Base, IdType
from rab_maker.models.template_component import ItemType


class ProjectItemCost(Base):
    """
    Calculated material or labor cost of one work item.

    item_name, coefficient and unit_price_at_creation are copied at
    calculation time. Catalog price changes never touch these rows; only a
    recalculation of the work item replaces them.
    """

    __tablename__ = 'project_item_costs'

    id = Column(IdType, primary_key=True, autoincrement=True)
    work_item_id = Column(IdType, ForeignKey('work_items.id', ondelete='CASCADE'), nullable=False, index=True)
    item_type = Column(Enum(ItemType, name='item_type', native_enum=False, length=10), nullable=False)
    master_item_id = Column(IdType, nullable=False, index=True)
    item_name = Column(String(100), nullable=False, default='')
    coefficient = Column(Float, nullable=False, default=0)
    quantity_needed = Column(Float, nullable=False)
    unit_price_at_creation = Column(Float, nullable=False)
    total_cost = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    work_item = relationship('WorkItem', back_populates='costs')

    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'work_item_id': self.work_item_id,
            'item_type': self.item_type.value,
            'item_id': self.master_item_id,
            'item_name': self.item_name,
            'coefficient': self.coefficient,
            'quantity_needed': self.quantity_needed,
            'unit_price_at_creation': self.unit_price_at_creation,
            'total_cost': self.total_cost,
        }

    def __repr__(self):
        return (
            f"<ProjectItemCost(id={self.id}, work_item_id={self.work_item_id}, "
            f"item_type={self.item_type.value}, total_cost={self.total_cost})>"
        )

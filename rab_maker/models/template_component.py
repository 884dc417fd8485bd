"""Template component models (material and labor coefficients)."""
import enum

from sqlalchemy import Column, Float, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from rab_maker.database import Base, IdType


class ItemType(str, enum.Enum):
    """Kind of catalog item a component or cost line refers to."""
    MATERIAL = 'MATERIAL'
    LABOR = 'LABOR'


class TemplateMaterialComponent(Base):
    """Quantity of a material needed per one unit of the template's work."""

    __tablename__ = 'template_material_components'
    __table_args__ = (
        CheckConstraint('coefficient > 0', name='ck_template_material_coefficient'),
    )

    item_type = ItemType.MATERIAL

    id = Column(IdType, primary_key=True, autoincrement=True)
    template_id = Column(IdType, ForeignKey('ahsp_templates.id', ondelete='CASCADE'), nullable=False, index=True)
    # Not a foreign key: catalog deletions purge components at application level
    material_id = Column(IdType, nullable=False, index=True)
    coefficient = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    template = relationship('AHSPTemplate', back_populates='material_components')

    @property
    def item_id(self):
        return self.material_id

    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'template_id': self.template_id,
            'item_type': self.item_type.value,
            'item_id': self.material_id,
            'coefficient': self.coefficient,
        }

    def __repr__(self):
        return f"<TemplateMaterialComponent(id={self.id}, material_id={self.material_id}, coefficient={self.coefficient})>"


class TemplateLaborComponent(Base):
    """Man-days of a labor type needed per one unit of the template's work."""

    __tablename__ = 'template_labor_components'
    __table_args__ = (
        CheckConstraint('coefficient > 0', name='ck_template_labor_coefficient'),
    )

    item_type = ItemType.LABOR

    id = Column(IdType, primary_key=True, autoincrement=True)
    template_id = Column(IdType, ForeignKey('ahsp_templates.id', ondelete='CASCADE'), nullable=False, index=True)
    labor_type_id = Column(IdType, nullable=False, index=True)
    coefficient = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    template = relationship('AHSPTemplate', back_populates='labor_components')

    @property
    def item_id(self):
        return self.labor_type_id

    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'template_id': self.template_id,
            'item_type': self.item_type.value,
            'item_id': self.labor_type_id,
            'coefficient': self.coefficient,
        }

    def __repr__(self):
        return f"<TemplateLaborComponent(id={self.id}, labor_type_id={self.labor_type_id}, coefficient={self.coefficient})>"

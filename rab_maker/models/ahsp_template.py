"""AHSP template model (unit-price analysis)."""
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from rab_maker.database import Base, IdType


class AHSPTemplate(Base):
    """
    Analisa Harga Satuan Pekerjaan: a named bundle of material and labor
    coefficients that yields the cost of one unit of work.
    """

    __tablename__ = 'ahsp_templates'

    id = Column(IdType, primary_key=True, autoincrement=True)
    user_id = Column(IdType, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    unit = Column(String(20), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    material_components = relationship(
        'TemplateMaterialComponent',
        back_populates='template',
        cascade='all, delete-orphan',
        passive_deletes=True,
        order_by='TemplateMaterialComponent.id',
    )
    labor_components = relationship(
        'TemplateLaborComponent',
        back_populates='template',
        cascade='all, delete-orphan',
        passive_deletes=True,
        order_by='TemplateLaborComponent.id',
    )

    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'unit': self.unit,
        }

    def __repr__(self):
        return f"<AHSPTemplate(id={self.id}, name='{self.name}', unit='{self.unit}')>"

"""Master material model."""
from sqlalchemy import Column, String, Float, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from rab_maker.database import Base, IdType


class Material(Base):
    """
    Priced material catalog entry.

    Rows without user_id belong to the shared default catalog and are
    visible to every user.
    """

    __tablename__ = 'materials'
    __table_args__ = (
        CheckConstraint('unit_price >= 0', name='ck_materials_unit_price'),
    )

    id = Column(IdType, primary_key=True, autoincrement=True)
    user_id = Column(IdType, ForeignKey('users.id', ondelete='CASCADE'), nullable=True, index=True)
    name = Column(String(100), nullable=False)
    unit = Column(String(20), nullable=False)
    unit_price = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    @property
    def is_system(self):
        return self.user_id is None

    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'unit': self.unit,
            'unit_price': self.unit_price,
            'is_system': self.is_system,
        }

    def __repr__(self):
        return f"<Material(id={self.id}, name='{self.name}', unit_price={self.unit_price})>"

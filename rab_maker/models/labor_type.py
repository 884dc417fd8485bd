"""Master labor type model."""
from sqlalchemy import Column, String, Float, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from rab_maker.database import Base, IdType


class LaborType(Base):
    """Labor role with its daily wage. user_id NULL = shared default catalog."""

    __tablename__ = 'labor_types'
    __table_args__ = (
        CheckConstraint('daily_wage >= 0', name='ck_labor_types_daily_wage'),
    )

    id = Column(IdType, primary_key=True, autoincrement=True)
    user_id = Column(IdType, ForeignKey('users.id', ondelete='CASCADE'), nullable=True, index=True)
    name = Column(String(100), nullable=False)
    unit = Column(String(20), nullable=False)
    daily_wage = Column(Float, nullable=False, default=0)
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
            'daily_wage': self.daily_wage,
            'is_system': self.is_system,
        }

    def __repr__(self):
        return f"<LaborType(id={self.id}, name='{self.name}', daily_wage={self.daily_wage})>"

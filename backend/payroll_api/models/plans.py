import enum
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, Numeric, String

from payroll_api.db.session import Base


class HealthType(str, enum.Enum):
    FONASA = "FONASA"
    ISAPRE = "ISAPRE"


class PensionPlan(Base):
    """An AFP. ``discount_rate`` is a percentage of gross salary."""

    __tablename__ = "pension_plans"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(100), nullable=False, unique=True)
    discount_rate = Column(Numeric(5, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class HealthPlan(Base):
    __tablename__ = "health_plans"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    type = Column(String(20), nullable=False, default=HealthType.FONASA.value)
    name = Column(String(100), nullable=False, unique=True)
    discount_rate = Column(Numeric(5, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

import enum
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from payroll_api.db.session import Base


class PayrollStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"


AMOUNT_FIELDS = (
    "gross_salary",
    "net_salary",
    "pension_deduction",
    "health_deduction",
    "unemployment_deduction",
    "total_deduction",
)


class Payroll(Base):
    __tablename__ = "payrolls"
    __table_args__ = (
        UniqueConstraint("employee_id", "month", "year", name="uq_payroll_employee_period"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    employee_id = Column(String(36), ForeignKey("employees.id"), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    gross_salary = Column(Integer, nullable=False)
    net_salary = Column(Integer, nullable=False)
    pension_deduction = Column(Integer, nullable=False, default=0)
    health_deduction = Column(Integer, nullable=False, default=0)
    unemployment_deduction = Column(Integer, nullable=False, default=0)
    total_deduction = Column(Integer, nullable=False, default=0)

    status = Column(String(20), nullable=False, default=PayrollStatus.PENDING.value)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    employee = relationship("Employee", back_populates="payrolls")

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from payroll_api.db.session import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    job_title = Column(String(200), nullable=True)
    hire_date = Column(Date, nullable=True)

    # Whole pesos; CLP has no minor unit
    base_salary = Column(Integer, nullable=False, default=0)

    # Unassigned plans deduct nothing
    pension_plan_id = Column(String(36), ForeignKey("pension_plans.id"), nullable=True)
    health_plan_id = Column(String(36), ForeignKey("health_plans.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    company = relationship("Company", back_populates="employees")
    pension_plan = relationship("PensionPlan")
    health_plan = relationship("HealthPlan")
    payrolls = relationship("Payroll", back_populates="employee")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

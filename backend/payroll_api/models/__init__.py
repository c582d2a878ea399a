from .company import Company
from .employee import Employee
from .payroll import Payroll, PayrollStatus
from .plans import HealthPlan, HealthType, PensionPlan

__all__ = ["Company", "Employee", "HealthPlan", "HealthType", "PensionPlan", "Payroll", "PayrollStatus"]

from payroll_api.core.errors import ConflictError
from payroll_api.domains.payroll.repository import PayrollRepository


class PayrollUniquenessGuard:
    """At most one payroll per (employee, month, year).

    The check is advisory: two concurrent callers can both pass it, and the
    store's unique constraint decides which insert wins.
    """

    def __init__(self, repository: PayrollRepository):
        self.repository = repository

    def exists(self, employee_id: str, month: int, year: int) -> bool:
        return self.repository.payroll_exists(employee_id, month, year)

    def ensure_available(self, employee_id: str, month: int, year: int) -> None:
        if self.exists(employee_id, month, year):
            raise ConflictError(f"Payroll already exists for {month}/{year}")

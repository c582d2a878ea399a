from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from payroll_api.core.errors import ConflictError, PersistenceError
from payroll_api.core.logging import get_logger
from payroll_api.models import Employee, Payroll

logger = get_logger(__name__)


@dataclass(frozen=True)
class PayrollFilter:
    employee_id: Optional[str] = None
    month: Optional[int] = None
    year: Optional[int] = None
    status: Optional[str] = None


class PayrollRepository(Protocol):
    """Storage the lifecycle and batch generator depend on.

    ``add_payroll`` must raise ``ConflictError`` when the store already holds a
    payroll for the same (employee, month, year); that constraint is what makes
    check-then-create safe under concurrent requests.
    """

    def get_employee(self, employee_id: str) -> Optional[Employee]: ...

    def list_company_employees(self, company_id: str) -> List[Employee]: ...

    def payroll_exists(self, employee_id: str, month: int, year: int) -> bool: ...

    def get_payroll(self, payroll_id: str) -> Optional[Payroll]: ...

    def list_payrolls(self, criteria: PayrollFilter) -> List[Payroll]: ...

    def add_payroll(self, payroll: Payroll) -> Payroll: ...

    def save_payroll(self, payroll: Payroll) -> Payroll: ...

    def delete_payroll(self, payroll: Payroll) -> None: ...


class SqlAlchemyPayrollRepository:
    def __init__(self, db: Session):
        self.db = db

    def _employee_query(self):
        return self.db.query(Employee).options(
            selectinload(Employee.pension_plan),
            selectinload(Employee.health_plan),
        )

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        return self._employee_query().filter(Employee.id == employee_id).one_or_none()

    def list_company_employees(self, company_id: str) -> List[Employee]:
        return (
            self._employee_query()
            .filter(Employee.company_id == company_id)
            .order_by(Employee.last_name.asc(), Employee.first_name.asc(), Employee.id.asc())
            .all()
        )

    def payroll_exists(self, employee_id: str, month: int, year: int) -> bool:
        row = (
            self.db.query(Payroll.id)
            .filter(Payroll.employee_id == employee_id, Payroll.month == month, Payroll.year == year)
            .first()
        )
        return row is not None

    def get_payroll(self, payroll_id: str) -> Optional[Payroll]:
        return (
            self.db.query(Payroll)
            .options(selectinload(Payroll.employee))
            .filter(Payroll.id == payroll_id)
            .one_or_none()
        )

    def list_payrolls(self, criteria: PayrollFilter) -> List[Payroll]:
        query = self.db.query(Payroll).options(selectinload(Payroll.employee))
        if criteria.employee_id:
            query = query.filter(Payroll.employee_id == criteria.employee_id)
        if criteria.month is not None:
            query = query.filter(Payroll.month == criteria.month)
        if criteria.year is not None:
            query = query.filter(Payroll.year == criteria.year)
        if criteria.status:
            query = query.filter(Payroll.status == criteria.status)
        return query.order_by(Payroll.year.desc(), Payroll.month.desc(), Payroll.created_at.desc()).all()

    def add_payroll(self, payroll: Payroll) -> Payroll:
        self.db.add(payroll)
        self._commit(conflict_message=f"Payroll already exists for {payroll.month}/{payroll.year}")
        self.db.refresh(payroll)
        return payroll

    def save_payroll(self, payroll: Payroll) -> Payroll:
        self._commit(conflict_message="Payroll update violates a uniqueness constraint")
        self.db.refresh(payroll)
        return payroll

    def delete_payroll(self, payroll: Payroll) -> None:
        self.db.delete(payroll)
        self._commit(conflict_message="Payroll is still referenced and cannot be deleted")

    def _commit(self, conflict_message: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info("payroll_integrity_conflict", error=str(exc.orig))
            raise ConflictError(conflict_message) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("payroll_persistence_failed", error=str(exc))
            raise PersistenceError(f"Database error: {exc.__class__.__name__}") from exc

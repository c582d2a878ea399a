from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from itertools import count

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from payroll_api.core.errors import ConflictError, PersistenceError
from payroll_api.db.session import Base
from payroll_api.models import Company, Employee, HealthPlan, Payroll, PensionPlan

FIXED_NOW = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)


class InMemoryPayrollRepository:
    """Dict-backed stand-in for the SQLAlchemy repository.

    ``fail_inserts_for`` makes ``add_payroll`` raise ``PersistenceError`` for
    the listed employee ids, like a store that is down mid batch.
    """

    def __init__(self):
        self.employees: dict[str, Employee] = {}
        self.payrolls: dict[str, Payroll] = {}
        self.fail_inserts_for: set[str] = set()

    def add_employee(self, employee: Employee) -> Employee:
        self.employees[employee.id] = employee
        return employee

    def get_employee(self, employee_id):
        return self.employees.get(employee_id)

    def list_company_employees(self, company_id):
        return [e for e in self.employees.values() if e.company_id == company_id]

    def payroll_exists(self, employee_id, month, year):
        return self._holds_period(employee_id, month, year)

    def _holds_period(self, employee_id, month, year):
        return any(
            p.employee_id == employee_id and p.month == month and p.year == year
            for p in self.payrolls.values()
        )

    def get_payroll(self, payroll_id):
        return self.payrolls.get(payroll_id)

    def list_payrolls(self, criteria):
        rows = [
            p
            for p in self.payrolls.values()
            if (criteria.employee_id is None or p.employee_id == criteria.employee_id)
            and (criteria.month is None or p.month == criteria.month)
            and (criteria.year is None or p.year == criteria.year)
            and (criteria.status is None or p.status == criteria.status)
        ]
        return sorted(rows, key=lambda p: (-p.year, -p.month))

    def add_payroll(self, payroll):
        if payroll.employee_id in self.fail_inserts_for:
            raise PersistenceError("Database error: OperationalError")
        # Stands in for the unique constraint
        if self._holds_period(payroll.employee_id, payroll.month, payroll.year):
            raise ConflictError(f"Payroll already exists for {payroll.month}/{payroll.year}")
        self.payrolls[payroll.id] = payroll
        return payroll

    def save_payroll(self, payroll):
        self.payrolls[payroll.id] = payroll
        return payroll

    def delete_payroll(self, payroll):
        del self.payrolls[payroll.id]


@pytest.fixture
def repository() -> InMemoryPayrollRepository:
    return InMemoryPayrollRepository()


@pytest.fixture
def make_employee(repository):
    ids = count(1)

    def _make(
        base_salary: int = 1_500_000,
        pension_rate: str | None = "10.58",
        health_rate: str | None = "0",
        company_id: str = "company-1",
        first_name: str = "Juan",
        last_name: str = "Perez",
    ) -> Employee:
        employee_id = f"emp-{next(ids)}"
        employee = Employee(
            id=employee_id,
            company_id=company_id,
            first_name=first_name,
            last_name=last_name,
            base_salary=base_salary,
        )
        if pension_rate is not None:
            employee.pension_plan = PensionPlan(id=f"afp-{employee_id}", name="AFP Provida", discount_rate=Decimal(pension_rate))
        if health_rate is not None:
            employee.health_plan = HealthPlan(id=f"hp-{employee_id}", name="FONASA Tramo A", discount_rate=Decimal(health_rate))
        return repository.add_employee(employee)

    return _make


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def company(db_session) -> Company:
    afp = PensionPlan(name="AFP Provida", discount_rate=Decimal("10.58"))
    fonasa = HealthPlan(type="FONASA", name="FONASA Tramo A", discount_rate=Decimal("0"))
    company = Company(name="Servicios Tecnologicos SpA", rut="76.123.456-7")
    db_session.add_all([afp, fonasa, company])
    db_session.flush()
    db_session.add_all(
        [
            Employee(
                company_id=company.id,
                first_name="Juan",
                last_name="Perez",
                base_salary=1_500_000,
                pension_plan_id=afp.id,
                health_plan_id=fonasa.id,
            ),
            Employee(company_id=company.id, first_name="Maria", last_name="Gonzalez", base_salary=1_300_000),
        ]
    )
    db_session.commit()
    return company

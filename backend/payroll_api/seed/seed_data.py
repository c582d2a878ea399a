from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from payroll_api.domains.payroll.calculator import calculate_for_employee
from payroll_api.domains.payroll.lifecycle import build_pending_payroll
from payroll_api.models import Company, Employee, HealthPlan, HealthType, PayrollStatus, PensionPlan

PENSION_PLANS = [
    ("AFP Provida", "10.58"),
    ("AFP Habitat", "10.27"),
    ("AFP Capital", "10.44"),
    ("AFP Modelo", "9.77"),
    ("AFP Cuprum", "10.48"),
]

HEALTH_PLANS = [
    (HealthType.FONASA, "FONASA Tramo A", "0"),
    (HealthType.FONASA, "FONASA Tramo B", "7"),
    (HealthType.FONASA, "FONASA Tramo C", "7"),
    (HealthType.FONASA, "FONASA Tramo D", "7"),
    (HealthType.ISAPRE, "Colmena Plan Basico", "8.5"),
    (HealthType.ISAPRE, "Cruz Blanca Esencial", "9.2"),
    (HealthType.ISAPRE, "Banmedica Premium", "10.8"),
]

# first, last, title, salary, pension plan index, health plan index
EMPLOYEES = [
    ("Juan", "Perez", "Desarrollador Senior", 1_500_000, 0, 6),
    ("Maria", "Gonzalez", "Analista de RRHH", 1_300_000, 1, 3),
    ("Pedro", "Soto", "Jefe de Finanzas", 1_800_000, 2, 5),
    ("Carla", "Morales", "Disenadora", 1_100_000, 3, 2),
    ("Roberto", "Fuentes", "Gerente de Operaciones", 2_200_000, 4, 6),
    ("Ana", "Valdes", "Ejecutiva de Marketing", 1_400_000, 0, 4),
]

HISTORY_MONTHS = 6
PAID_MONTHS = 3


def _history_periods(today: date) -> list[tuple[int, int]]:
    periods = []
    for offset in range(HISTORY_MONTHS):
        month = today.month - offset
        year = today.year
        if month <= 0:
            month += 12
            year -= 1
        periods.append((month, year))
    return periods


def seed(session: Session, today: date | None = None) -> Company:
    """Load reference plans, one company and six months of payroll history.

    The current month and the two before it are marked PAID on the 5th; older
    months stay PENDING.
    """
    today = today or date.today()
    now = datetime.now(timezone.utc)

    pension_plans = [PensionPlan(name=name, discount_rate=Decimal(rate)) for name, rate in PENSION_PLANS]
    health_plans = [
        HealthPlan(type=kind.value, name=name, discount_rate=Decimal(rate)) for kind, name, rate in HEALTH_PLANS
    ]
    session.add_all(pension_plans + health_plans)

    company = Company(name="Servicios Tecnologicos SpA", rut="76.123.456-7")
    session.add(company)
    session.flush()

    for first_name, last_name, title, salary, afp_index, health_index in EMPLOYEES:
        employee = Employee(
            company_id=company.id,
            first_name=first_name,
            last_name=last_name,
            job_title=title,
            hire_date=date(2020, 1, 1),
            base_salary=salary,
            pension_plan=pension_plans[afp_index],
            health_plan=health_plans[health_index],
        )
        session.add(employee)
        session.flush()

        amounts = calculate_for_employee(employee).as_dict()
        for offset, (month, year) in enumerate(_history_periods(today)):
            payroll = build_pending_payroll(employee.id, month, year, amounts, now)
            if offset < PAID_MONTHS:
                payroll.status = PayrollStatus.PAID.value
                payroll.paid_at = datetime(year, month, 5, tzinfo=timezone.utc)
            session.add(payroll)

    session.commit()
    return company

from datetime import date

from payroll_api.models import Employee, HealthPlan, Payroll, PayrollStatus, PensionPlan
from payroll_api.seed.seed_data import seed


def test_seed_loads_plans_company_and_history(db_session):
    company = seed(db_session, today=date(2024, 2, 10))

    assert db_session.query(PensionPlan).count() == 5
    assert db_session.query(HealthPlan).count() == 7
    assert db_session.query(Employee).filter(Employee.company_id == company.id).count() == 6
    assert db_session.query(Payroll).count() == 6 * 6


def test_seed_marks_recent_months_paid(db_session):
    seed(db_session, today=date(2024, 2, 10))

    juan = db_session.query(Employee).filter(Employee.first_name == "Juan").one()
    periods = {
        (p.year, p.month): p
        for p in db_session.query(Payroll).filter(Payroll.employee_id == juan.id)
    }

    # history wraps into the previous year
    assert set(periods) == {(2024, 2), (2024, 1), (2023, 12), (2023, 11), (2023, 10), (2023, 9)}
    for key in [(2024, 2), (2024, 1), (2023, 12)]:
        assert periods[key].status == PayrollStatus.PAID.value
        assert periods[key].paid_at.day == 5
    for key in [(2023, 11), (2023, 10), (2023, 9)]:
        assert periods[key].status == PayrollStatus.PENDING.value
        assert periods[key].paid_at is None


def test_seed_uses_round_half_up_deductions(db_session):
    seed(db_session, today=date(2024, 2, 10))

    # Juan: 1,500,000 with Provida 10.58% and Banmedica 10.8%
    juan = db_session.query(Employee).filter(Employee.first_name == "Juan").one()
    payroll = db_session.query(Payroll).filter(Payroll.employee_id == juan.id).first()

    assert payroll.pension_deduction == 158_700
    assert payroll.health_deduction == 162_000
    assert payroll.unemployment_deduction == 45_000
    assert payroll.net_salary == 1_500_000 - 365_700

from __future__ import annotations

import argparse
import sys

from payroll_api.core.config import settings
from payroll_api.core.errors import PayrollError
from payroll_api.core.logging import configure_logging
from payroll_api.db.session import init_db, session_scope
from payroll_api.domains.payroll.batch import PayrollBatchGenerator
from payroll_api.domains.payroll.lifecycle import PayrollLifecycle
from payroll_api.domains.payroll.repository import PayrollFilter, SqlAlchemyPayrollRepository
from payroll_api.seed.seed_data import seed


def format_amount(value: int) -> str:
    return f"${value:,}".replace(",", ".")


def cmd_init_db(args: argparse.Namespace) -> None:
    init_db()
    print(f"Created tables on {settings.database_url}")


def cmd_seed(args: argparse.Namespace) -> None:
    init_db()
    with session_scope() as db:
        company = seed(db)
        print(f"Seeded company {company.id} ({company.name})")


def cmd_generate(args: argparse.Namespace) -> None:
    with session_scope() as db:
        report = PayrollBatchGenerator(SqlAlchemyPayrollRepository(db)).generate(args.company, args.month, args.year)
    print(f"Processed {report.processed}: {report.successful} created, {report.failed} failed")
    for success in report.results:
        print(f"  ok   {success.employee_id} {success.name} -> {success.payroll_id}")
    for failure in report.errors:
        print(f"  fail {failure.employee_id} {failure.name}: {failure.message}")


def cmd_list(args: argparse.Namespace) -> None:
    criteria = PayrollFilter(employee_id=args.employee, month=args.month, year=args.year, status=args.status)
    with session_scope() as db:
        for payroll in PayrollLifecycle(SqlAlchemyPayrollRepository(db)).list_payrolls(criteria):
            print(
                f"{payroll.id} {payroll.employee_id} {payroll.month:02d}/{payroll.year} "
                f"gross={format_amount(payroll.gross_salary)} net={format_amount(payroll.net_salary)} "
                f"status={payroll.status}"
            )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Payroll lifecycle CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init-db", help="Create database tables")
    init.set_defaults(func=cmd_init_db)

    seed_cmd = sub.add_parser("seed", help="Load reference plans and demo payroll history")
    seed_cmd.set_defaults(func=cmd_seed)

    generate = sub.add_parser("generate", help="Generate payrolls for every employee of a company")
    generate.add_argument("company")
    generate.add_argument("month", type=int)
    generate.add_argument("year", type=int)
    generate.set_defaults(func=cmd_generate)

    listing = sub.add_parser("list", help="List payrolls, newest period first")
    listing.add_argument("--employee")
    listing.add_argument("--month", type=int)
    listing.add_argument("--year", type=int)
    listing.add_argument("--status", choices=["PENDING", "PAID"])
    listing.set_defaults(func=cmd_list)

    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging(settings.log_level, json_logs=settings.log_json)
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except PayrollError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

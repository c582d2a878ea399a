from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

from payroll_api.core.errors import ConflictError, NotFoundError, PayrollError
from payroll_api.core.logging import get_logger
from payroll_api.core.monitoring import record_batch_failure
from payroll_api.core.observability import get_meter, get_tracer
from payroll_api.domains.payroll.calculator import calculate_for_employee
from payroll_api.domains.payroll.lifecycle import Clock, build_pending_payroll, utcnow, validate_period
from payroll_api.domains.payroll.repository import PayrollRepository
from payroll_api.domains.payroll.uniqueness import PayrollUniquenessGuard
from payroll_api.models import Employee

logger = get_logger(__name__)
tracer = get_tracer()
meter = get_meter()
generated_counter = meter.create_counter(
    "payroll.generated", unit="1", description="Payrolls created by batch generation"
)
failed_counter = meter.create_counter(
    "payroll.generation_failed", unit="1", description="Employees skipped or failed during batch generation"
)


@dataclass
class BatchSuccess:
    employee_id: str
    name: str
    payroll_id: str


@dataclass
class BatchFailure:
    employee_id: str
    name: str
    message: str


@dataclass
class BatchReport:
    processed: int = 0
    results: List[BatchSuccess] = field(default_factory=list)
    errors: List[BatchFailure] = field(default_factory=list)

    @property
    def successful(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.errors)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "processed": self.processed,
            "successful": self.successful,
            "failed": self.failed,
            "results": [asdict(item) for item in self.results],
            "errors": [asdict(item) for item in self.errors],
        }


class PayrollBatchGenerator:
    """Generate one PENDING payroll per employee of a company for a period.

    Best effort: every employee is attempted, failures are reported in the
    returned ``BatchReport`` and never retried. Only the period check and an
    empty company abort the whole batch.
    """

    def __init__(self, repository: PayrollRepository, clock: Clock = utcnow):
        self.repository = repository
        self.guard = PayrollUniquenessGuard(repository)
        self.clock = clock

    def generate(self, company_id: str, month: int, year: int) -> BatchReport:
        validate_period(month, year)

        employees = self.repository.list_company_employees(company_id)
        if not employees:
            raise NotFoundError("No employees found in this company")

        with tracer.start_as_current_span("payroll.generate") as span:
            span.set_attribute("payroll.company_id", company_id)
            span.set_attribute("payroll.period", f"{month}/{year}")

            report = BatchReport(processed=len(employees))
            for employee in employees:
                self._process_employee(report, employee, company_id, month, year)

            span.set_attribute("payroll.successful", report.successful)
            span.set_attribute("payroll.failed", report.failed)

        logger.info(
            "payroll_batch_completed",
            company_id=company_id,
            period=f"{month}/{year}",
            processed=report.processed,
            successful=report.successful,
            failed=report.failed,
        )
        return report

    def _process_employee(self, report: BatchReport, employee: Employee, company_id: str, month: int, year: int) -> None:
        employee_id, name = employee.id, employee.full_name
        attributes = {"company_id": company_id}
        try:
            if self.guard.exists(employee_id, month, year):
                raise ConflictError(f"Payroll already exists for {month}/{year}")
            amounts = calculate_for_employee(employee).as_dict()
            payroll = self.repository.add_payroll(
                build_pending_payroll(employee_id, month, year, amounts, self.clock())
            )
        except Exception as exc:  # one employee never aborts the batch
            message = str(exc)
            report.errors.append(BatchFailure(employee_id=employee_id, name=name, message=message))
            failed_counter.add(1, attributes)
            record_batch_failure(company_id, employee_id, message)
            logger.warning(
                "payroll_batch_employee_failed",
                company_id=company_id,
                employee_id=employee_id,
                error=message,
                exc_info=not isinstance(exc, PayrollError),
            )
            return

        report.results.append(BatchSuccess(employee_id=employee_id, name=name, payroll_id=payroll.id))
        generated_counter.add(1, attributes)

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from uuid import uuid4

from payroll_api.core.errors import ConflictError, NotFoundError, ValidationError
from payroll_api.core.logging import get_logger
from payroll_api.domains.payroll.calculator import calculate_for_employee
from payroll_api.domains.payroll.repository import PayrollFilter, PayrollRepository
from payroll_api.domains.payroll.uniqueness import PayrollUniquenessGuard
from payroll_api.models.payroll import AMOUNT_FIELDS, Payroll, PayrollStatus

logger = get_logger(__name__)

Clock = Callable[[], datetime]
TransitionEffect = Callable[[Payroll, datetime], None]

DEDUCTION_COMPONENTS = ("pension_deduction", "health_deduction", "unemployment_deduction")
UPDATABLE_FIELDS = frozenset(AMOUNT_FIELDS) | {"status", "paid_at"}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_period(month: Any, year: Any) -> None:
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise ValidationError("Invalid month, must be between 1 and 12")
    if isinstance(year, bool) or not isinstance(year, int) or year < 1:
        raise ValidationError("Invalid year, must be a positive integer")


def _validate_amounts(values: Mapping[str, Any]) -> None:
    for field in AMOUNT_FIELDS:
        if field not in values:
            continue
        value = values[field]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{field} must be a whole amount")
        if value < 0:
            raise ValidationError(f"{field} cannot be negative")


def _stamp_paid_at(payroll: Payroll, now: datetime) -> None:
    payroll.paid_at = now


# Allowed status edges and the side effect each one carries. A missing pair
# is an unsupported transition.
TRANSITIONS: Dict[Tuple[PayrollStatus, PayrollStatus], Optional[TransitionEffect]] = {
    (PayrollStatus.PENDING, PayrollStatus.PENDING): None,
    (PayrollStatus.PENDING, PayrollStatus.PAID): _stamp_paid_at,
    (PayrollStatus.PAID, PayrollStatus.PAID): None,
}


def _parse_status(value: Any) -> PayrollStatus:
    try:
        return PayrollStatus(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown payroll status: {value}") from exc


def resolve_transition(current: PayrollStatus, target: PayrollStatus) -> Optional[TransitionEffect]:
    if (current, target) not in TRANSITIONS:
        raise ConflictError(f"Unsupported status transition {current.value} -> {target.value}")
    return TRANSITIONS[(current, target)]


def build_pending_payroll(employee_id: str, month: int, year: int, amounts: Mapping[str, int], now: datetime) -> Payroll:
    return Payroll(
        id=str(uuid4()),
        employee_id=employee_id,
        month=month,
        year=year,
        status=PayrollStatus.PENDING.value,
        paid_at=None,
        created_at=now,
        updated_at=now,
        **amounts,
    )


def merge_overrides(computed: Mapping[str, int], overrides: Mapping[str, Any]) -> Dict[str, int]:
    """Lay caller-supplied amounts over the computed ones.

    Derived totals are re-derived from the merged components unless the caller
    supplied them too, in which case they are taken as given.
    """
    unknown = set(overrides) - set(AMOUNT_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown payroll fields: {', '.join(sorted(unknown))}")
    _validate_amounts(overrides)

    merged = {**computed, **overrides}
    if "total_deduction" not in overrides:
        merged["total_deduction"] = sum(merged[field] for field in DEDUCTION_COMPONENTS)
    if "net_salary" not in overrides:
        merged["net_salary"] = merged["gross_salary"] - merged["total_deduction"]
    return merged


class PayrollLifecycle:
    """Create, read, update and delete a single payroll record."""

    def __init__(self, repository: PayrollRepository, clock: Clock = utcnow):
        self.repository = repository
        self.guard = PayrollUniquenessGuard(repository)
        self.clock = clock

    def get_payroll(self, payroll_id: str) -> Payroll:
        payroll = self.repository.get_payroll(payroll_id)
        if payroll is None:
            raise NotFoundError("Payroll not found")
        return payroll

    def list_payrolls(self, criteria: Optional[PayrollFilter] = None) -> List[Payroll]:
        criteria = criteria or PayrollFilter()
        if criteria.status is not None:
            _parse_status(criteria.status)
        return self.repository.list_payrolls(criteria)

    def create_payroll(
        self,
        employee_id: str,
        month: int,
        year: int,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> Payroll:
        validate_period(month, year)

        employee = self.repository.get_employee(employee_id)
        if employee is None:
            raise NotFoundError("Employee not found")

        self.guard.ensure_available(employee.id, month, year)

        amounts = calculate_for_employee(employee).as_dict()
        if overrides:
            amounts = merge_overrides(amounts, overrides)

        payroll = self.repository.add_payroll(
            build_pending_payroll(employee.id, month, year, amounts, self.clock())
        )
        logger.info(
            "payroll_created",
            payroll_id=payroll.id,
            employee_id=employee.id,
            period=f"{month}/{year}",
            overridden=sorted(overrides) if overrides else [],
        )
        return payroll

    def compute_payroll(self, employee_id: str, month: int, year: int) -> Payroll:
        return self.create_payroll(employee_id, month, year)

    def update_payroll(self, payroll_id: str, changes: Mapping[str, Any]) -> Payroll:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown payroll fields: {', '.join(sorted(unknown))}")
        _validate_amounts(changes)

        payroll = self.get_payroll(payroll_id)
        current = _parse_status(payroll.status)
        target = _parse_status(changes["status"]) if changes.get("status") is not None else current
        effect = resolve_transition(current, target)

        # paid_at is set iff the payroll is PAID
        explicit_paid_at = "paid_at" in changes and effect is None
        if explicit_paid_at and (changes["paid_at"] is None) == (target is PayrollStatus.PAID):
            raise ValidationError("paid_at must be set when, and only when, the payroll is PAID")

        now = self.clock()
        for field in AMOUNT_FIELDS:
            if field in changes:
                setattr(payroll, field, changes[field])
        payroll.status = target.value
        if effect is not None:
            effect(payroll, now)
        elif explicit_paid_at:
            payroll.paid_at = changes["paid_at"]
        payroll.updated_at = now

        payroll = self.repository.save_payroll(payroll)
        logger.info(
            "payroll_updated",
            payroll_id=payroll.id,
            status=payroll.status,
            transition=f"{current.value}->{target.value}",
            fields=sorted(changes),
        )
        return payroll

    def delete_payroll(self, payroll_id: str) -> None:
        payroll = self.get_payroll(payroll_id)
        if payroll.status == PayrollStatus.PAID.value:
            raise ConflictError("Can't delete a paid payroll")
        self.repository.delete_payroll(payroll)
        logger.info("payroll_deleted", payroll_id=payroll_id)

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Optional, Union

from payroll_api.core.errors import ValidationError

Rate = Union[Decimal, float, int, str, None]

# Seguro de cesantia, statutory and never configured per employee.
UNEMPLOYMENT_RATE = Decimal("3")
WHOLE_UNIT = Decimal("1")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class DeductionBreakdown:
    gross_salary: int
    pension_deduction: int
    health_deduction: int
    unemployment_deduction: int
    total_deduction: int
    net_salary: int

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def _to_decimal(value: Rate, label: str) -> Decimal:
    if value is None:
        return Decimal(0)
    try:
        # str() first so floats like 10.58 are not carried with binary noise
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(f"{label} must be a number") from exc
    if not amount.is_finite():
        raise ValidationError(f"{label} must be a finite number")
    return amount


def percentage_of(base_salary: Decimal, rate: Decimal) -> int:
    """``base * rate / 100`` rounded half-up to a whole currency unit."""
    return int((base_salary * rate / HUNDRED).quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP))


def calculate_deductions(base_salary: Rate, pension_rate: Rate = 0, health_rate: Rate = 0) -> DeductionBreakdown:
    base = _to_decimal(base_salary, "base_salary")
    if base < 0:
        raise ValidationError("base_salary cannot be negative")
    if base != base.to_integral_value():
        raise ValidationError("base_salary must be a whole amount")

    pension = _to_decimal(pension_rate, "pension_rate")
    health = _to_decimal(health_rate, "health_rate")
    if pension < 0 or health < 0:
        raise ValidationError("discount rates cannot be negative")

    # Each component is rounded on its own before summing, never the total.
    pension_deduction = percentage_of(base, pension)
    health_deduction = percentage_of(base, health)
    unemployment_deduction = percentage_of(base, UNEMPLOYMENT_RATE)
    total_deduction = pension_deduction + health_deduction + unemployment_deduction

    return DeductionBreakdown(
        gross_salary=int(base),
        pension_deduction=pension_deduction,
        health_deduction=health_deduction,
        unemployment_deduction=unemployment_deduction,
        total_deduction=total_deduction,
        net_salary=int(base) - total_deduction,
    )


def _plan_rate(plan) -> Optional[Decimal]:
    return plan.discount_rate if plan is not None else None


def calculate_for_employee(employee) -> DeductionBreakdown:
    return calculate_deductions(
        employee.base_salary,
        pension_rate=_plan_rate(employee.pension_plan),
        health_rate=_plan_rate(employee.health_plan),
    )

from __future__ import annotations

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from payroll_api.db.session import get_session
from payroll_api.domains.payroll.batch import PayrollBatchGenerator
from payroll_api.domains.payroll.lifecycle import PayrollLifecycle
from payroll_api.domains.payroll.repository import PayrollFilter, SqlAlchemyPayrollRepository
from payroll_api.models.payroll import AMOUNT_FIELDS, Payroll

router = APIRouter(prefix="/payrolls", tags=["payrolls"])

Status = Literal["PENDING", "PAID"]


class PayrollOut(BaseModel):
    id: str
    employee_id: str
    employee_name: str | None = None
    month: int
    year: int
    gross_salary: int
    net_salary: int
    pension_deduction: int
    health_deduction: int
    unemployment_deduction: int
    total_deduction: int
    status: Status
    paid_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class PayrollCreate(BaseModel):
    employee_id: str
    month: int
    year: int
    # Optional caller-supplied amounts; anything omitted is computed.
    gross_salary: int | None = None
    net_salary: int | None = None
    pension_deduction: int | None = None
    health_deduction: int | None = None
    unemployment_deduction: int | None = None
    total_deduction: int | None = None


class PayrollUpdate(BaseModel):
    gross_salary: int | None = None
    net_salary: int | None = None
    pension_deduction: int | None = None
    health_deduction: int | None = None
    unemployment_deduction: int | None = None
    total_deduction: int | None = None
    status: Status | None = None
    paid_at: datetime | None = None


class GenerateRequest(BaseModel):
    company_id: str
    month: int
    year: int


class BatchSuccessOut(BaseModel):
    employee_id: str
    name: str
    payroll_id: str


class BatchFailureOut(BaseModel):
    employee_id: str
    name: str
    message: str


class BatchReportOut(BaseModel):
    processed: int
    successful: int
    failed: int
    results: list[BatchSuccessOut]
    errors: list[BatchFailureOut]


def get_repository(db: Session = Depends(get_session)) -> SqlAlchemyPayrollRepository:
    return SqlAlchemyPayrollRepository(db)


def get_lifecycle(repository: SqlAlchemyPayrollRepository = Depends(get_repository)) -> PayrollLifecycle:
    return PayrollLifecycle(repository)


def get_batch_generator(
    repository: SqlAlchemyPayrollRepository = Depends(get_repository),
) -> PayrollBatchGenerator:
    return PayrollBatchGenerator(repository)


def _serialize(payroll: Payroll) -> PayrollOut:
    return PayrollOut(
        id=payroll.id,
        employee_id=payroll.employee_id,
        employee_name=payroll.employee.full_name if payroll.employee else None,
        month=payroll.month,
        year=payroll.year,
        gross_salary=payroll.gross_salary,
        net_salary=payroll.net_salary,
        pension_deduction=payroll.pension_deduction,
        health_deduction=payroll.health_deduction,
        unemployment_deduction=payroll.unemployment_deduction,
        total_deduction=payroll.total_deduction,
        status=payroll.status,
        paid_at=payroll.paid_at,
        created_at=payroll.created_at,
        updated_at=payroll.updated_at,
    )


@router.get("", response_model=list[PayrollOut])
def list_payrolls(
    employee_id: str | None = None,
    month: int | None = None,
    year: int | None = None,
    status: Status | None = None,
    lifecycle: PayrollLifecycle = Depends(get_lifecycle),
) -> list[PayrollOut]:
    criteria = PayrollFilter(employee_id=employee_id, month=month, year=year, status=status)
    return [_serialize(row) for row in lifecycle.list_payrolls(criteria)]


@router.post("/generate", response_model=BatchReportOut)
def generate_payrolls(
    payload: GenerateRequest,
    generator: PayrollBatchGenerator = Depends(get_batch_generator),
) -> BatchReportOut:
    report = generator.generate(payload.company_id, payload.month, payload.year)
    return BatchReportOut(**report.as_dict())


@router.get("/{payroll_id}", response_model=PayrollOut)
def get_payroll(payroll_id: str, lifecycle: PayrollLifecycle = Depends(get_lifecycle)) -> PayrollOut:
    return _serialize(lifecycle.get_payroll(payroll_id))


@router.post("", response_model=PayrollOut, status_code=201)
def create_payroll(payload: PayrollCreate, lifecycle: PayrollLifecycle = Depends(get_lifecycle)) -> PayrollOut:
    overrides = payload.model_dump(include=set(AMOUNT_FIELDS), exclude_none=True)
    payroll = lifecycle.create_payroll(payload.employee_id, payload.month, payload.year, overrides=overrides)
    return _serialize(payroll)


@router.patch("/{payroll_id}", response_model=PayrollOut)
def update_payroll(
    payroll_id: str,
    payload: PayrollUpdate,
    lifecycle: PayrollLifecycle = Depends(get_lifecycle),
) -> PayrollOut:
    payroll = lifecycle.update_payroll(payroll_id, payload.model_dump(exclude_unset=True))
    return _serialize(payroll)


@router.delete("/{payroll_id}", status_code=204)
def delete_payroll(payroll_id: str, lifecycle: PayrollLifecycle = Depends(get_lifecycle)) -> None:
    lifecycle.delete_payroll(payroll_id)
    return None

"""Payroll router — generate, list, status, payslips.

Routes:
    /payroll                       — List, generate
    /payroll/{id}                  — Get, delete (Generated only)
    /payroll/{id}/status           — Generated -> Paid
    /payroll/{id}/payslip-fields   — Flat field map for payslip rendering
    /payroll/{id}/payslip          — Re-render the payslip document
"""


import uuid
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from hrcore.common.constants import PayrollStatus
from hrcore.common.pagination import PaginationParams
from hrcore.common.rate_limit import limiter
from hrcore.database import get_db
from hrcore.payroll.schemas import PayrollGenerate, PayrollOut, PayrollStatusUpdate
from hrcore.payroll.service import PayrollService

router = APIRouter(prefix="", tags=["payroll"])


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", status_code=201, response_model=PayrollOut)
@limiter.limit("30/minute")
async def generate_payroll(
    request: Request,
    body: PayrollGenerate,
    db: AsyncSession = Depends(get_db),
):
    """Compute and store payroll for one employee-month (409 if it exists)."""
    return await PayrollService.generate_payroll(db, body)


# ── GET / ───────────────────────────────────────────────────────────

@router.get("")
async def list_payrolls(
    employee_id: Optional[uuid.UUID] = Query(None),
    month: Optional[str] = Query(None, description="Month name or 1-12"),
    year: Optional[int] = Query(None),
    status: Optional[PayrollStatus] = Query(None),
    params: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await PayrollService.list_payrolls(
        db, params, employee_id=employee_id, month=month, year=year, status=status,
    )


# ── GET /{id} ───────────────────────────────────────────────────────

@router.get("/{payroll_id}", response_model=PayrollOut)
async def get_payroll(
    payroll_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await PayrollService.get_payroll(db, payroll_id)


# ── PUT /{id}/status ────────────────────────────────────────────────

@router.put("/{payroll_id}/status", response_model=PayrollOut)
async def set_payroll_status(
    payroll_id: uuid.UUID,
    body: PayrollStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await PayrollService.set_status(db, payroll_id, body.status, actor=body.actor)


# ── GET /{id}/payslip-fields ────────────────────────────────────────

@router.get("/{payroll_id}/payslip-fields")
async def payslip_fields(
    payroll_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    return await PayrollService.get_payslip_fields(db, payroll_id)


# ── POST /{id}/payslip ──────────────────────────────────────────────

@router.post("/{payroll_id}/payslip", response_model=PayrollOut)
async def regenerate_payslip(
    payroll_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await PayrollService.regenerate_payslip(db, payroll_id)


# ── DELETE /{id} ────────────────────────────────────────────────────

@router.delete("/{payroll_id}", status_code=204)
async def delete_payroll(
    payroll_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await PayrollService.delete_payroll(db, payroll_id)
    return Response(status_code=204)

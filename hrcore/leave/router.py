"""Leave router — apply, status changes, calendar, balance reset.

Routes:
    /leaves                        — List, apply
    /leaves/calendar               — Approved leaves per day for a month
    /leaves/{id}                   — Get, delete (non-approved only)
    /leaves/{id}/status            — Pending / Approved / Rejected
    /leaves/balances/{employee_id}/reset — Restore policy defaults
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from hrcore.common.constants import LeaveStatus, LeaveType
from hrcore.common.pagination import PaginationParams
from hrcore.common.rate_limit import limiter
from hrcore.database import get_db
from hrcore.leave.schemas import (
    BalanceResetOut,
    LeaveApply,
    LeaveCalendarOut,
    LeaveOut,
    LeaveStatusUpdate,
    LeaveTransitionOut,
)
from hrcore.leave.service import LeaveService

router = APIRouter(prefix="", tags=["leave"])


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", status_code=201, response_model=LeaveOut)
@limiter.limit("20/minute")
async def apply_leave(
    request: Request,
    body: LeaveApply,
    db: AsyncSession = Depends(get_db),
):
    """Apply for leave. Checks the balance; nothing is debited until approval."""
    return await LeaveService.apply_leave(db, body)


# ── GET / ───────────────────────────────────────────────────────────

@router.get("")
async def list_leaves(
    employee_id: Optional[uuid.UUID] = Query(None),
    status: Optional[LeaveStatus] = Query(None),
    leave_type: Optional[LeaveType] = Query(None),
    params: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.list_leaves(
        db, params, employee_id=employee_id, status=status, leave_type=leave_type,
    )


# ── GET /calendar ───────────────────────────────────────────────────

@router.get("/calendar", response_model=LeaveCalendarOut)
async def leave_calendar(
    month: str = Query(..., description="Month name or 1-12"),
    year: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.leave_calendar(db, month, year)


# ── POST /balances/{employee_id}/reset ──────────────────────────────

@router.post("/balances/{employee_id}/reset", response_model=BalanceResetOut)
async def reset_balances(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.reset_balances(db, employee_id)


# ── GET /{id} ───────────────────────────────────────────────────────

@router.get("/{leave_id}", response_model=LeaveOut)
async def get_leave(
    leave_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.get_leave(db, leave_id)


# ── PUT /{id}/status ────────────────────────────────────────────────

@router.put("/{leave_id}/status", response_model=LeaveTransitionOut)
async def set_leave_status(
    leave_id: uuid.UUID,
    body: LeaveStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Approve debits the balance; rejecting an approved leave credits it back."""
    return await LeaveService.set_status(db, leave_id, body.status, actor=body.actor)


# ── DELETE /{id} ────────────────────────────────────────────────────

@router.delete("/{leave_id}", status_code=204)
async def delete_leave(
    leave_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await LeaveService.delete_leave(db, leave_id)
    return Response(status_code=204)

"""Attendance router — daily marking, corrections, monthly report.

Routes:
    /attendance                 — List, mark
    /attendance/monthly-report  — Per-employee counts and percentages
    /attendance/{id}            — Correct status / times
"""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrcore.attendance.schemas import (
    AttendanceCreate,
    AttendanceOut,
    AttendanceUpdate,
    MonthlyReportOut,
)
from hrcore.attendance.service import AttendanceService
from hrcore.common.pagination import PaginationParams
from hrcore.database import get_db

router = APIRouter(prefix="", tags=["attendance"])


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", status_code=201, response_model=AttendanceOut)
async def mark_attendance(
    body: AttendanceCreate,
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.mark_attendance(db, body)


# ── GET / ───────────────────────────────────────────────────────────

@router.get("")
async def list_attendance(
    employee_code: Optional[str] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    params: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.list_attendance(
        db, params, employee_code=employee_code, from_date=from_date, to_date=to_date,
    )


# ── GET /monthly-report ─────────────────────────────────────────────

@router.get("/monthly-report", response_model=MonthlyReportOut)
async def monthly_report(
    month: str = Query(..., description="Month name or 1-12"),
    year: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.monthly_report(db, month, year)


# ── PUT /{id} ───────────────────────────────────────────────────────

@router.put("/{record_id}", response_model=AttendanceOut)
async def update_attendance(
    record_id: uuid.UUID,
    body: AttendanceUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.update_attendance(db, record_id, body)

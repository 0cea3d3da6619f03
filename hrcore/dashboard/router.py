"""Dashboard router — read-only aggregates for the HR dashboard widgets.

Routes:
    /dashboard/summary  — Totals, joins per month, payroll per period
"""


from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrcore.dashboard.schemas import DashboardSummaryResponse
from hrcore.dashboard.service import DashboardService
from hrcore.database import get_db

router = APIRouter(prefix="", tags=["dashboard"])


# ── GET /summary ────────────────────────────────────────────────────

@router.get("/summary", response_model=DashboardSummaryResponse)
async def dashboard_summary(
    on: Optional[date] = Query(None, description="Day for the on-leave count (default today)"),
    db: AsyncSession = Depends(get_db),
):
    """Headcount totals, joins per calendar month and payroll per pay period."""
    return await DashboardService.get_summary(db, today=on)

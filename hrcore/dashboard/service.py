"""Dashboard service — read-only aggregation queries across HR modules.

COUNT/GROUP BY happens in the database; nothing here writes.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy import extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrcore.attendance.models import AttendanceRecord
from hrcore.common.constants import (
    MONTH_NAMES,
    AttendanceStatus,
    EmploymentStatus,
    month_number,
)
from hrcore.config import settings
from hrcore.dashboard.schemas import (
    DashboardSummaryResponse,
    DashboardTotals,
    JoinsPerMonth,
    PayrollPerMonth,
)
from hrcore.employees.models import Employee
from hrcore.payroll.models import Payroll

logger = logging.getLogger(__name__)


def _today() -> date:
    """Current date in the configured business timezone."""
    from zoneinfo import ZoneInfo

    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()


class DashboardService:
    """Async dashboard aggregation queries."""

    @staticmethod
    async def get_summary(
        db: AsyncSession,
        today: Optional[date] = None,
    ) -> DashboardSummaryResponse:
        """Totals, joins per calendar month and payroll per pay period."""
        today = today or _today()

        total, active, on_leave, payrolls = await _multi_scalar(
            db,
            select(func.count(Employee.id)),
            select(func.count(Employee.id)).where(
                Employee.status == EmploymentStatus.active,
            ),
            select(func.count(AttendanceRecord.id)).where(
                AttendanceRecord.date == today,
                AttendanceRecord.status == AttendanceStatus.leave,
            ),
            select(func.count(Payroll.id)),
        )

        join_month = extract("month", Employee.joining_date)
        joins = (
            await db.execute(
                select(join_month, func.count(Employee.id))
                .group_by(join_month)
                .order_by(join_month)
            )
        ).all()

        periods = (
            await db.execute(
                select(
                    Payroll.year,
                    Payroll.month,
                    func.count(Payroll.id),
                    func.coalesce(func.sum(Payroll.net_salary), 0),
                ).group_by(Payroll.year, Payroll.month)
            )
        ).all()
        # Months are stored by name; order them by calendar position.
        periods = sorted(periods, key=lambda row: (row[0], month_number(row[1])))

        logger.debug(
            "Dashboard summary for %s: %d employees, %d payroll periods",
            today, total, len(periods),
        )
        return DashboardSummaryResponse(
            totals=DashboardTotals(
                total_employees=total,
                active_employees=active,
                on_leave=on_leave,
                payrolls_generated=payrolls,
            ),
            employee_stats=[
                JoinsPerMonth(month=MONTH_NAMES[int(month) - 1][:3], count=count)
                for month, count in joins
            ],
            payroll_stats=[
                PayrollPerMonth(month=month, year=year, count=count, amount=int(amount))
                for year, month, count, amount in periods
            ],
        )


# ── Helpers ─────────────────────────────────────────────────────────

async def _multi_scalar(db: AsyncSession, *stmts) -> list:
    """Execute multiple scalar queries and return their results in order."""
    results = []
    for stmt in stmts:
        result = await db.execute(stmt)
        results.append(result.scalar())
    return results

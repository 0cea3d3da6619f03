"""Dashboard Pydantic v2 schemas — response model for the summary endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field


# ═════════════════════════════════════════════════════════════════════
# GET /summary
# ═════════════════════════════════════════════════════════════════════


class DashboardTotals(BaseModel):
    """Top-level KPI cards."""

    total_employees: int = Field(..., description="Every employee record, any status")
    active_employees: int = Field(..., description="Employees with status Active")
    on_leave: int = Field(..., description="Attendance rows marked Leave for today")
    payrolls_generated: int = Field(..., description="Payroll records of any status")


class JoinsPerMonth(BaseModel):
    """Employees who joined in a calendar month, across all years."""

    month: str
    count: int = 0


class PayrollPerMonth(BaseModel):
    """Payroll processed for one pay period."""

    month: str
    year: int
    count: int = 0
    amount: int = Field(0, description="Sum of net salary")


class DashboardSummaryResponse(BaseModel):
    totals: DashboardTotals
    employee_stats: list[JoinsPerMonth] = Field(default_factory=list)
    payroll_stats: list[PayrollPerMonth] = Field(default_factory=list)

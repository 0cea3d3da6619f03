"""Salary breakup from annual CTC.

Pure and deterministic: the same inputs always give the same breakup.
Every labelled amount is rounded half away from zero as soon as it is
computed, and later steps use the rounded value.

    monthly_basic      = round(ctc * basic_ratio / 12)
    basic              = round(monthly_basic * working_days / days_in_month)
    hra, da, pf        = round(basic * ratio)
    special_allowance  = round((ctc - (basic + hra + da + pf)) / 12)
    daily_rate         = monthly_basic / working_days          (not rounded)
    absence_deductions = round((absent_days + leave_days) * daily_rate)
    tds                = round(ctc * tds_ratio / 12)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional, Protocol, Union

from hrcore.common.constants import AttendanceStatus, month_bounds, month_name
from hrcore.config import settings
from hrcore.leave.calendar import overlap_days

Number = Union[int, float, str, Decimal]


class DateRange(Protocol):
    from_date: Any
    to_date: Any


@dataclass(frozen=True)
class PayrollPolicy:
    basic_ratio: Decimal = Decimal("0.40")
    hra_ratio: Decimal = Decimal("0.50")
    da_ratio: Decimal = Decimal("0.035")
    pf_ratio: Decimal = Decimal("0.12")
    tds_ratio: Decimal = Decimal("0.04")
    working_days: int = 22
    # Approved leave inside the month is deducted like an absence.
    deduct_approved_leave: bool = True

    @classmethod
    def from_settings(cls) -> "PayrollPolicy":
        return cls(
            basic_ratio=Decimal(str(settings.PAYROLL_BASIC_RATIO)),
            hra_ratio=Decimal(str(settings.PAYROLL_HRA_RATIO)),
            da_ratio=Decimal(str(settings.PAYROLL_DA_RATIO)),
            pf_ratio=Decimal(str(settings.PAYROLL_PF_RATIO)),
            tds_ratio=Decimal(str(settings.PAYROLL_TDS_RATIO)),
            working_days=settings.PAYROLL_WORKING_DAYS,
            deduct_approved_leave=settings.PAYROLL_DEDUCT_APPROVED_LEAVE,
        )


@dataclass(frozen=True)
class PayrollBreakup:
    ctc: int
    month: str
    year: int
    days_in_month: int
    working_days: int
    monthly_basic: int
    basic: int
    hra: int
    da: int
    employer_pf: int
    special_allowance: int
    daily_rate: Decimal
    absent_days: int
    leave_days: int
    absence_deductions: int
    tds: int
    total_earnings: int
    total_deductions: int
    gross_salary: int
    net_salary: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def round_half_up(value: Decimal) -> int:
    """0.5 rounds away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(value.to_integral_value(rounding=ROUND_HALF_UP))


def format_employee_id(role: str, year: int, employee_number: int, prefix: Optional[str] = None) -> str:
    """Payslip identifier, e.g. ``VT/DEV/2024/0108``."""
    prefix = prefix or settings.EMPLOYEE_ID_PREFIX
    return f"{prefix}/{role}/{year}/{employee_number:04d}"


def calculate_payroll(
    ctc: Number,
    month: Union[int, str],
    year: int,
    attendance_statuses: Iterable[Union[AttendanceStatus, str]] = (),
    approved_leaves: Iterable[DateRange] = (),
    policy: Optional[PayrollPolicy] = None,
) -> PayrollBreakup:
    """Compute the breakup for one employee-month.

    Args:
        ctc: Annual cost to company.
        month: Month name or number.
        year: Calendar year.
        attendance_statuses: Status of each attendance row in the month;
            only Absent rows count.
        approved_leaves: Approved leaves overlapping the month; the part
            inside the month is counted.
        policy: Ratios and flags; defaults to the configured policy.
    """
    policy = policy or PayrollPolicy.from_settings()
    ctc = Decimal(str(ctc))
    year = int(year)
    month_start, month_end = month_bounds(month, year)
    days_in_month = month_end.day
    working_days = policy.working_days

    monthly_basic = round_half_up(ctc * policy.basic_ratio / 12)
    basic = round_half_up(Decimal(monthly_basic * working_days) / days_in_month)
    hra = round_half_up(basic * policy.hra_ratio)
    da = round_half_up(basic * policy.da_ratio)
    employer_pf = round_half_up(basic * policy.pf_ratio)
    special_allowance = round_half_up((ctc - (basic + hra + da + employer_pf)) / 12)

    daily_rate = Decimal(monthly_basic) / working_days

    absent_days = sum(1 for s in attendance_statuses if s == AttendanceStatus.absent)
    leave_days = sum(
        overlap_days(leave.from_date, leave.to_date, month_start, month_end)
        for leave in approved_leaves
    )
    deductible_days = absent_days + (leave_days if policy.deduct_approved_leave else 0)
    absence_deductions = round_half_up(deductible_days * daily_rate)

    tds = round_half_up(ctc * policy.tds_ratio / 12)

    total_earnings = basic + hra + da + special_allowance
    total_deductions = tds + employer_pf + absence_deductions

    return PayrollBreakup(
        ctc=round_half_up(ctc),
        month=month_name(month),
        year=year,
        days_in_month=days_in_month,
        working_days=working_days,
        monthly_basic=monthly_basic,
        basic=basic,
        hra=hra,
        da=da,
        employer_pf=employer_pf,
        special_allowance=special_allowance,
        daily_rate=daily_rate,
        absent_days=absent_days,
        leave_days=leave_days,
        absence_deductions=absence_deductions,
        tds=tds,
        total_earnings=total_earnings,
        total_deductions=total_deductions,
        gross_salary=total_earnings,
        net_salary=total_earnings - total_deductions,
    )

"""Monthly attendance aggregation.

Pure functions over already-loaded rows; the service does the querying.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from hrcore.attendance.models import AttendanceRecord
from hrcore.common.constants import AttendanceStatus
from hrcore.employees.models import Employee
from hrcore.leave.calendar import overlap_days
from hrcore.leave.models import Leave

_CENT = Decimal("0.01")


def _round2(value: Decimal) -> float:
    return float(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def attendance_percentage(present: int, total: int) -> float:
    """Present share of recorded days, 0 when nothing was recorded."""
    if total == 0:
        return 0.0
    return _round2(Decimal(present) * 100 / Decimal(total))


@dataclass
class EmployeeAttendance:
    employee_id: str
    employee_code: str
    name: str
    designation: str | None
    present: int
    absent: int
    leave: int
    total_working_days: int
    attendance_percentage: float
    approved_leave_days: int = 0


@dataclass
class MonthlyReport:
    month: str
    year: int
    rows: list[EmployeeAttendance] = field(default_factory=list)

    @property
    def total_employees(self) -> int:
        return len(self.rows)

    @property
    def average_attendance(self) -> float:
        if not self.rows:
            return 0.0
        total = sum(Decimal(str(r.attendance_percentage)) for r in self.rows)
        return _round2(total / len(self.rows))


def build_monthly_report(
    employees: Sequence[Employee],
    records: Iterable[AttendanceRecord],
    approved_leaves: Iterable[Leave],
    month: str,
    year: int,
    month_start: date,
    month_end: date,
) -> MonthlyReport:
    """One row per employee in the order given.

    *records* and *approved_leaves* may contain rows for employees outside
    *employees* or dates outside the month; those are ignored.
    """
    counts: dict[str, Counter] = {}
    for record in records:
        if month_start <= record.date <= month_end:
            counts.setdefault(record.employee_code, Counter())[record.status] += 1

    leave_days: Counter = Counter()
    for leave in approved_leaves:
        leave_days[leave.employee_id] += overlap_days(
            leave.from_date, leave.to_date, month_start, month_end,
        )

    report = MonthlyReport(month=month, year=year)
    for employee in employees:
        tally = counts.get(employee.employee_code, Counter())
        present = tally[AttendanceStatus.present]
        absent = tally[AttendanceStatus.absent]
        on_leave = tally[AttendanceStatus.leave]
        total = present + absent + on_leave
        report.rows.append(
            EmployeeAttendance(
                employee_id=str(employee.id),
                employee_code=employee.employee_code,
                name=employee.name,
                designation=employee.designation,
                present=present,
                absent=absent,
                leave=on_leave,
                total_working_days=total,
                attendance_percentage=attendance_percentage(present, total),
                approved_leave_days=leave_days[employee.id],
            )
        )
    return report

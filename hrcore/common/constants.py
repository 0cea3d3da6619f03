"""Enums and constants for HR Core — persisted values match the stored documents."""

from __future__ import annotations

import calendar
import enum
from datetime import date


# ── Employee ────────────────────────────────────────────────────────

class EmploymentStatus(str, enum.Enum):
    active = "Active"
    left = "Left"


# ── Attendance ──────────────────────────────────────────────────────

class AttendanceStatus(str, enum.Enum):
    present = "Present"
    absent = "Absent"
    leave = "Leave"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveType(str, enum.Enum):
    """Leave category as stored on a Leave record (capitalised)."""

    casual = "Casual"
    sick = "Sick"
    earned = "Earned"

    @property
    def balance_key(self) -> str:
        """Lower-case key used on the employee's leave balance."""
        return self.value.lower()

    @classmethod
    def parse(cls, raw: str) -> "LeaveType":
        """Case-insensitive lookup: ``"casual"``, ``"Casual"`` → ``LeaveType.casual``."""
        if isinstance(raw, cls):
            return raw
        folded = str(raw).strip().lower()
        for member in cls:
            if member.balance_key == folded:
                return member
        raise ValueError(f"Unknown leave type: {raw!r}")


class LeaveStatus(str, enum.Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


# ── Payroll ─────────────────────────────────────────────────────────

class PayrollStatus(str, enum.Enum):
    generated = "Generated"
    paid = "Paid"


# ── Misc constants ──────────────────────────────────────────────────

MONTH_NAMES: tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

TIME_FORMAT = "%H:%M"
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50


def month_number(month: int | str) -> int:
    """Resolve ``11``, ``"11"``, ``"November"`` or ``"nov"`` to 1–12."""
    if isinstance(month, int):
        number = month
    else:
        text = str(month).strip()
        if text.isdigit():
            number = int(text)
        else:
            folded = text.lower()
            matches = [
                i for i, name in enumerate(MONTH_NAMES, start=1)
                if name.lower() == folded or name[:3].lower() == folded
            ]
            if not matches:
                raise ValueError(f"Unknown month: {month!r}")
            number = matches[0]
    if not 1 <= number <= 12:
        raise ValueError(f"Month out of range: {month!r}")
    return number


def month_name(month: int | str) -> str:
    """Canonical month name stored on payroll records (e.g. ``"November"``)."""
    return MONTH_NAMES[month_number(month) - 1]


def month_bounds(month: int | str, year: int) -> tuple[date, date]:
    """First and last calendar day of the month (inclusive)."""
    number = month_number(month)
    last_day = calendar.monthrange(int(year), number)[1]
    return date(int(year), number, 1), date(int(year), number, last_day)

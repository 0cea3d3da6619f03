"""Field and record validators.

Every single-field check returns a :class:`ValidationResult` instead of
raising; the ``validate_*_data`` aggregates collect the reason of every
failed rule, in order, so callers can report all problems at once.
An empty list means the record is valid.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, NamedTuple, Optional

from hrcore.common.constants import (
    AttendanceStatus,
    EmploymentStatus,
    LeaveStatus,
    LeaveType,
    PayrollStatus,
    month_number,
)
from hrcore.config import settings

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?[0-9]\d{7,15}$")
EMPLOYEE_ID_RE = re.compile(r"^VT\d{6}$")
TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


class ValidationResult(NamedTuple):
    ok: bool
    reason: Optional[str] = None


PASS = ValidationResult(True)


def _fail(reason: str) -> ValidationResult:
    return ValidationResult(False, reason)


# ── Parsing helpers ─────────────────────────────────────────────────

def parse_date(value: Any) -> Optional[date]:
    """Return a ``date`` for date/datetime/ISO-string input, else None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def _as_number(value: Any) -> Optional[Decimal]:
    """Finite Decimal for numeric input, else None (NaN and Infinity included)."""
    if isinstance(value, bool) or value is None:
        return None
    number: Optional[Decimal] = None
    if isinstance(value, (int, float, Decimal)):
        number = Decimal(str(value))
    elif isinstance(value, str) and value.strip():
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return None
    if number is None or not number.is_finite():
        return None
    return number


def _member_of(value: Any, enum_cls, label: str) -> ValidationResult:
    allowed = [m.value for m in enum_cls]
    raw = value.value if isinstance(value, enum_cls) else value
    if raw in allowed:
        return PASS
    return _fail(f"{label} must be one of {', '.join(allowed)}")


# ── Single-field validators ─────────────────────────────────────────

def check_email(value: Any) -> ValidationResult:
    if isinstance(value, str) and EMAIL_RE.match(value):
        return PASS
    return _fail("Invalid email format")


def check_date(value: Any, label: str = "date") -> ValidationResult:
    if parse_date(value) is not None:
        return PASS
    return _fail(f"Valid {label} is required")


def check_employee_id(value: Any) -> ValidationResult:
    if isinstance(value, str) and EMPLOYEE_ID_RE.match(value):
        return PASS
    return _fail("Employee ID must be in format VT000001")


def check_phone(value: Any) -> ValidationResult:
    if isinstance(value, str) and PHONE_RE.match(value):
        return PASS
    return _fail("Invalid phone number format")


def check_time(value: Any, label: str = "time") -> ValidationResult:
    if isinstance(value, str) and TIME_RE.match(value):
        return PASS
    return _fail(f"Invalid {label} format (HH:MM)")


def check_ctc(value: Any) -> ValidationResult:
    number = _as_number(value)
    if number is not None and settings.CTC_MIN <= number <= settings.CTC_MAX:
        return PASS
    return _fail(
        f"CTC must be between {settings.CTC_MIN:,} and {settings.CTC_MAX:,}"
    )


def check_name(value: Any) -> ValidationResult:
    if isinstance(value, str) and len(value.strip()) >= 2:
        return PASS
    return _fail("Name must be at least 2 characters long")


def check_leave_type(value: Any) -> ValidationResult:
    try:
        LeaveType.parse(value)
    except ValueError:
        return _fail("Invalid leave type")
    return PASS


def check_leave_status(value: Any) -> ValidationResult:
    return _member_of(value, LeaveStatus, "Leave status")


def check_attendance_status(value: Any) -> ValidationResult:
    return _member_of(value, AttendanceStatus, "Attendance status")


def check_employee_status(value: Any) -> ValidationResult:
    return _member_of(value, EmploymentStatus, "Employee status")


def check_payroll_status(value: Any) -> ValidationResult:
    return _member_of(value, PayrollStatus, "Payroll status")


def check_date_range(from_value: Any, to_value: Any) -> ValidationResult:
    start, end = parse_date(from_value), parse_date(to_value)
    if start is None or end is None or start <= end:
        # Unparseable dates are reported by check_date.
        return PASS
    return _fail("From date cannot be after to date")


def check_month(value: Any) -> ValidationResult:
    try:
        month_number(value)
    except (TypeError, ValueError):
        return _fail("Month must be a month name or a number between 1 and 12")
    return PASS


def check_year(value: Any) -> ValidationResult:
    number = _as_number(value)
    if number is not None and number == number.to_integral_value() and 1900 <= number <= 9999:
        return PASS
    return _fail("Year must be a four-digit number")


def _collect(results: Iterable[ValidationResult]) -> list[str]:
    return [r.reason for r in results if not r.ok]


# ── Aggregate validators ────────────────────────────────────────────

def validate_employee_data(data: Mapping[str, Any], *, partial: bool = False) -> list[str]:
    """Validate an employee payload; ``partial`` skips absent fields (updates)."""

    def present(key: str) -> bool:
        return data.get(key) not in (None, "")

    checks: list[ValidationResult] = []
    if not partial or "name" in data:
        checks.append(check_name(data.get("name")))
    if not partial or "email" in data:
        checks.append(check_email(data.get("email")))
    if present("phone"):
        checks.append(check_phone(data.get("phone")))
    if not partial or "current_ctc" in data:
        checks.append(check_ctc(data.get("current_ctc")))
    if not partial or "joining_date" in data:
        checks.append(check_date(data.get("joining_date"), "joining date"))
    if present("leaving_date"):
        checks.append(check_date(data.get("leaving_date"), "leaving date"))
        checks.append(_ordered(data.get("joining_date"), data.get("leaving_date")))
    if present("status"):
        checks.append(check_employee_status(data.get("status")))
    if present("employee_code"):
        checks.append(check_employee_id(data.get("employee_code")))
    return _collect(checks)


def _ordered(joining: Any, leaving: Any) -> ValidationResult:
    start, end = parse_date(joining), parse_date(leaving)
    if start is None or end is None or start <= end:
        return PASS
    return _fail("Leaving date cannot be before joining date")


def validate_attendance_data(data: Mapping[str, Any]) -> list[str]:
    checks = [
        check_employee_id(data.get("employee_code")),
        check_date(data.get("date")),
        check_attendance_status(data.get("status")),
    ]
    if data.get("in_time"):
        checks.append(check_time(data["in_time"], "in-time"))
    if data.get("out_time"):
        checks.append(check_time(data["out_time"], "out-time"))
    return _collect(checks)


def validate_leave_data(data: Mapping[str, Any]) -> list[str]:
    checks = []
    if "employee_code" in data:
        checks.append(check_employee_id(data.get("employee_code")))
    elif not data.get("employee_id"):
        checks.append(_fail("Employee reference is required"))
    checks += [
        check_leave_type(data.get("leave_type")),
        check_date(data.get("from_date"), "from date"),
        check_date(data.get("to_date"), "to date"),
        check_date_range(data.get("from_date"), data.get("to_date")),
    ]
    return _collect(checks)


def validate_payroll_data(data: Mapping[str, Any]) -> list[str]:
    checks = []
    if not data.get("employee_id"):
        checks.append(_fail("Employee ID is required"))
    if data.get("month") in (None, "") or data.get("year") in (None, ""):
        checks.append(_fail("Month and year are required"))
    else:
        checks += [check_month(data.get("month")), check_year(data.get("year"))]
    checks.append(check_ctc(data.get("ctc")))
    return _collect(checks)

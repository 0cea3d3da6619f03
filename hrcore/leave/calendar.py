"""Day-indexed projection of approved leaves for calendar rendering."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Iterable

from hrcore.common.constants import LeaveStatus
from hrcore.leave.models import Leave


def clip_to_window(
    from_date: date, to_date: date, window_start: date, window_end: date,
) -> tuple[date, date] | None:
    """Intersection of two inclusive date ranges, or None when disjoint."""
    start = max(from_date, window_start)
    end = min(to_date, window_end)
    if start > end:
        return None
    return start, end


def overlap_days(from_date: date, to_date: date, window_start: date, window_end: date) -> int:
    clipped = clip_to_window(from_date, to_date, window_start, window_end)
    if clipped is None:
        return 0
    return (clipped[1] - clipped[0]).days + 1


def project_leave_calendar(
    leaves: Iterable[Leave],
    month_start: date,
    month_end: date,
) -> dict[str, list[dict[str, Any]]]:
    """Expand approved leaves into ``{"YYYY-MM-DD": [entry, ...]}``.

    Non-approved leaves are skipped. Two leaves on the same day both appear
    under that day's key; keys are in date order.
    """
    calendar: dict[str, list[dict[str, Any]]] = {}
    for leave in leaves:
        if leave.status != LeaveStatus.approved:
            continue
        clipped = clip_to_window(leave.from_date, leave.to_date, month_start, month_end)
        if clipped is None:
            continue

        employee = leave.employee
        entry = {
            "leave_id": str(leave.id),
            "employee_id": str(employee.id),
            "employee_code": employee.employee_code,
            "employee_name": employee.name,
            "designation": employee.designation,
            "leave_type": leave.leave_type.value,
            "leave_sub_type": leave.leave_sub_type,
        }
        day = clipped[0]
        while day <= clipped[1]:
            calendar.setdefault(day.isoformat(), []).append(dict(entry))
            day += timedelta(days=1)

    return dict(sorted(calendar.items()))

"""Attendance module — daily records and the monthly aggregation."""

from hrcore.attendance.models import AttendanceRecord

__all__ = ["AttendanceRecord"]

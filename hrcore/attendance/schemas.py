"""Attendance Pydantic v2 schemas."""

from __future__ import annotations

import datetime as dt
import uuid
from datetime import datetime, time
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from hrcore.common.constants import AttendanceStatus


class AttendanceCreate(BaseModel):
    employee_code: Optional[str] = None
    date: Optional[Union[dt.date, str]] = None
    status: Optional[str] = None
    in_time: Optional[str] = None
    out_time: Optional[str] = None


class AttendanceUpdate(BaseModel):
    status: Optional[str] = None
    in_time: Optional[str] = None
    out_time: Optional[str] = None


class AttendanceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    date: dt.date
    status: AttendanceStatus
    in_time: Optional[time] = None
    out_time: Optional[time] = None
    created_at: Optional[datetime] = None


class EmployeeAttendanceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: str
    employee_code: str
    name: str
    designation: Optional[str] = None
    present: int
    absent: int
    leave: int
    total_working_days: int
    attendance_percentage: float
    approved_leave_days: int


class MonthlyReportSummary(BaseModel):
    total_employees: int
    average_attendance: float


class MonthlyReportOut(BaseModel):
    month: str
    year: int
    report: list[EmployeeAttendanceOut]
    summary: MonthlyReportSummary

"""Leave Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from hrcore.common.constants import LeaveStatus, LeaveType
from hrcore.employees.schemas import LeaveBalanceOut


class LeaveApply(BaseModel):
    """Leave application. Identify the employee by UUID or by employee code."""

    employee_id: Optional[uuid.UUID] = None
    employee_code: Optional[str] = None
    leave_type: Optional[str] = None
    leave_sub_type: str = Field("Full Day", max_length=50)
    from_date: Optional[Union[date, str]] = None
    to_date: Optional[Union[date, str]] = None
    reason: Optional[str] = Field(None, max_length=2000)


class LeaveStatusUpdate(BaseModel):
    status: str = Field(..., description="Pending, Approved or Rejected")
    actor: Optional[str] = Field(None, max_length=100)


class LeaveOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type: LeaveType
    leave_sub_type: str
    from_date: date
    to_date: date
    days: int
    debited_days: int = 0
    reason: Optional[str] = None
    status: LeaveStatus
    applied_on: date
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LeaveTransitionOut(BaseModel):
    """Result of a status change: the leave plus what happened to the balance."""

    leave: LeaveOut
    effect: str
    clamped: bool = False
    balance: LeaveBalanceOut


class CalendarEntry(BaseModel):
    leave_id: str
    employee_id: str
    employee_code: str
    employee_name: str
    designation: Optional[str] = None
    leave_type: str
    leave_sub_type: str


class LeaveCalendarOut(BaseModel):
    month: str
    year: int
    days: dict[str, list[CalendarEntry]]


class BalanceResetOut(BaseModel):
    employee_id: uuid.UUID
    before: LeaveBalanceOut
    after: LeaveBalanceOut

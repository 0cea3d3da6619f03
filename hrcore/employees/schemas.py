"""Employee Pydantic v2 schemas — request / response validation.

Request bodies are deliberately loose (strings, optional fields): the
business rules live in :mod:`hrcore.common.validators` so that every
violated rule is reported together.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from hrcore.common.constants import EmploymentStatus


class EmployeeCreate(BaseModel):
    """Payload for onboarding an employee."""

    employee_code: Optional[str] = Field(
        None, description="Manual VT000000-style ID; auto-issued when omitted",
    )
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    designation: Optional[str] = None
    department: Optional[str] = None
    role: Optional[str] = Field(None, max_length=20)
    joining_date: Optional[Union[date, str]] = None
    leaving_date: Optional[Union[date, str]] = None
    current_ctc: Optional[Union[int, float, str]] = None
    status: Optional[str] = None


class EmployeeUpdate(BaseModel):
    """Partial update; leave balances are not updatable here."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    designation: Optional[str] = None
    department: Optional[str] = None
    role: Optional[str] = Field(None, max_length=20)
    joining_date: Optional[Union[date, str]] = None
    leaving_date: Optional[Union[date, str]] = None
    current_ctc: Optional[Union[int, float, str]] = None
    status: Optional[str] = None


class LeaveBalanceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    casual: int
    sick: int
    earned: int


class EmployeeBrief(BaseModel):
    """Minimal employee info embedded in leave / payroll responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    name: str
    designation: Optional[str] = None


class EmployeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    name: str
    email: str
    phone: Optional[str] = None
    designation: Optional[str] = None
    department: Optional[str] = None
    role: str
    joining_date: date
    leaving_date: Optional[date] = None
    current_ctc: int
    status: EmploymentStatus
    leave_balance: LeaveBalanceOut
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

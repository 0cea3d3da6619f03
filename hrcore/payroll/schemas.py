"""Payroll Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from hrcore.common.constants import PayrollStatus


class PayrollGenerate(BaseModel):
    """Generate payroll for one employee-month. ``ctc`` defaults to the
    employee's current CTC."""

    employee_id: Optional[uuid.UUID] = None
    month: Optional[Union[int, str]] = Field(None, description="Month name or 1-12")
    year: Optional[int] = None
    ctc: Optional[Union[int, float, str]] = None
    actor: Optional[str] = Field(None, max_length=100)


class PayrollStatusUpdate(BaseModel):
    status: str = Field(..., description="Generated or Paid")
    actor: Optional[str] = Field(None, max_length=100)


class PayrollOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    formatted_employee_id: str
    month: str
    year: int
    ctc: int
    days_in_month: int
    working_days: int
    absent_days: int
    leave_days: int
    monthly_basic: int
    basic: int
    hra: int
    da: int
    special_allowance: int
    employer_pf: int
    tds: int
    daily_rate: Decimal
    absence_deductions: int
    total_earnings: int
    total_deductions: int
    gross_salary: int
    net_salary: int
    status: PayrollStatus
    payslip_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

"""Employee directory router.

Routes:
    /employees              — List, create employees
    /employees/lookup       — Find by email or employee code
    /employees/{id}         — Get, update employee
    /employees/{id}/balance — Remaining leave days per category
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrcore.common.constants import EmploymentStatus
from hrcore.common.pagination import PaginationParams
from hrcore.database import get_db
from hrcore.employees.schemas import (
    EmployeeCreate,
    EmployeeOut,
    EmployeeUpdate,
    LeaveBalanceOut,
)
from hrcore.employees.service import EmployeeService

router = APIRouter(prefix="", tags=["employees"])


# ── GET / ───────────────────────────────────────────────────────────

@router.get("")
async def list_employees(
    status: Optional[EmploymentStatus] = Query(None),
    params: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.list_employees(db, params, status=status)


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", status_code=201, response_model=EmployeeOut)
async def create_employee(
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
):
    """Onboard an employee. Leave balances start at the policy defaults."""
    return await EmployeeService.create_employee(db, body)


# ── GET /lookup ─────────────────────────────────────────────────────

@router.get("/lookup", response_model=EmployeeOut)
async def lookup_employee(
    email: Optional[str] = Query(None),
    employee_code: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.lookup(db, email=email, employee_code=employee_code)


# ── GET /{id} ───────────────────────────────────────────────────────

@router.get("/{employee_id}", response_model=EmployeeOut)
async def get_employee(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.get_employee(db, employee_id)
    return EmployeeService.to_out(employee)


# ── PUT /{id} ───────────────────────────────────────────────────────

@router.put("/{employee_id}", response_model=EmployeeOut)
async def update_employee(
    employee_id: uuid.UUID,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await EmployeeService.update_employee(db, employee_id, body)


# ── GET /{id}/balance ───────────────────────────────────────────────

@router.get("/{employee_id}/balance", response_model=LeaveBalanceOut)
async def get_leave_balance(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.get_employee(db, employee_id)
    return employee.leave_balance

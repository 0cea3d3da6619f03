"""Employee directory service — onboarding, lookup, profile updates.

Leave balances are set to policy defaults at onboarding and afterwards are
written only by :mod:`hrcore.leave.ledger`.
"""

from __future__ import annotations

import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hrcore.common.audit import create_audit_entry
from hrcore.common.constants import EmploymentStatus
from hrcore.common.exceptions import (
    DuplicateEntryException,
    NotFoundException,
    SequenceExhaustedException,
    ValidationException,
)
from hrcore.common.pagination import PaginatedResponse, PaginationParams, paginate
from hrcore.common.validators import parse_date, validate_employee_data
from hrcore.config import settings
from hrcore.employees.models import Employee, LeaveBalance
from hrcore.employees.schemas import EmployeeCreate, EmployeeOut, EmployeeUpdate

logger = logging.getLogger(__name__)

# Codes carry six digits after the prefix.
EMPLOYEE_NUMBER_MAX = 999_999


def _to_ctc(value: Any) -> int:
    return int(Decimal(str(value)).to_integral_value(rounding=ROUND_HALF_UP))


class EmployeeService:
    """Async employee operations."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    def to_out(employee: Employee) -> EmployeeOut:
        return EmployeeOut.model_validate(employee)

    @staticmethod
    async def _next_employee_code(db: AsyncSession) -> str:
        """Issue the next sequential code (VT000101, VT000102, ...).

        Codes are fixed-width, so the lexical maximum is the numeric maximum.
        """
        prefix = settings.EMPLOYEE_ID_PREFIX
        result = await db.execute(
            select(func.max(Employee.employee_code)).where(
                Employee.employee_code.like(f"{prefix}%")
            )
        )
        last_code = result.scalar()
        next_number = settings.EMPLOYEE_ID_START
        if last_code:
            next_number = max(next_number, int(last_code[len(prefix):]) + 1)
        if next_number > EMPLOYEE_NUMBER_MAX:
            logger.error("Employee code sequence exhausted after %s", last_code)
            raise SequenceExhaustedException("employee code", last_code)
        return f"{prefix}{next_number:06d}"

    @staticmethod
    async def get_employee(db: AsyncSession, employee_id: uuid.UUID) -> Employee:
        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    @staticmethod
    async def get_by_code(db: AsyncSession, employee_code: str) -> Employee:
        result = await db.execute(
            select(Employee).where(Employee.employee_code == employee_code)
        )
        employee = result.scalars().first()
        if employee is None:
            raise NotFoundException("Employee", employee_code)
        return employee

    # ── Create ──────────────────────────────────────────────────────

    @staticmethod
    async def create_employee(db: AsyncSession, data: EmployeeCreate) -> EmployeeOut:
        """Onboard an employee with an auto-issued or manual VT code."""

        payload = data.model_dump(exclude_none=True)
        violations = validate_employee_data(payload)
        if violations:
            raise ValidationException(violations)

        email = payload["email"].strip().lower()
        existing = await db.execute(select(Employee.id).where(Employee.email == email))
        if existing.scalar() is not None:
            raise DuplicateEntryException("email", email)

        code = payload.get("employee_code")
        if code:
            taken = await db.execute(
                select(Employee.id).where(Employee.employee_code == code)
            )
            if taken.scalar() is not None:
                raise DuplicateEntryException("employee_code", code)
        else:
            code = await EmployeeService._next_employee_code(db)

        balance = LeaveBalance.policy_default()
        employee = Employee(
            employee_code=code,
            name=payload["name"].strip(),
            email=email,
            phone=payload.get("phone"),
            designation=payload.get("designation"),
            department=payload.get("department"),
            role=payload.get("role") or settings.PAYROLL_DEFAULT_ROLE,
            joining_date=parse_date(payload["joining_date"]),
            leaving_date=parse_date(payload.get("leaving_date")),
            current_ctc=_to_ctc(payload["current_ctc"]),
            status=EmploymentStatus(payload.get("status", EmploymentStatus.active.value)),
            casual_leave=balance.casual,
            sick_leave=balance.sick,
            earned_leave=balance.earned,
        )
        db.add(employee)
        try:
            await db.flush()
        except IntegrityError:
            # Two onboardings raced for the same code or email.
            await db.rollback()
            logger.warning("Employee insert collided on code=%s email=%s", code, email)
            raise DuplicateEntryException("employee_code", code)

        await create_audit_entry(
            db,
            action="create",
            entity_type="employee",
            entity_id=employee.id,
            new_values={"employee_code": code, "email": email},
        )
        logger.info("Employee %s onboarded (%s)", code, employee.id)
        return EmployeeService.to_out(employee)

    # ── Read ────────────────────────────────────────────────────────

    @staticmethod
    async def lookup(
        db: AsyncSession,
        *,
        email: Optional[str] = None,
        employee_code: Optional[str] = None,
    ) -> EmployeeOut:
        """Find one employee by email and/or business code."""

        if not email and not employee_code:
            raise ValidationException(["Email or employee code is required"])

        query = select(Employee)
        if email:
            query = query.where(Employee.email == email.strip().lower())
        if employee_code:
            query = query.where(Employee.employee_code == employee_code)
        employee = (await db.execute(query)).scalars().first()
        if employee is None:
            raise NotFoundException("Employee", email or employee_code)
        return EmployeeService.to_out(employee)

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        params: PaginationParams,
        *,
        status: Optional[EmploymentStatus] = None,
    ) -> PaginatedResponse:
        query = select(Employee).order_by(Employee.created_at, Employee.employee_code)
        if status is not None:
            query = query.where(Employee.status == status)
        return await paginate(
            db, query, params, model=Employee, transform=EmployeeService.to_out,
        )

    # ── Update ──────────────────────────────────────────────────────

    @staticmethod
    async def update_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
        data: EmployeeUpdate,
    ) -> EmployeeOut:
        """Update profile fields. Balance columns are not reachable from here."""

        employee = await EmployeeService.get_employee(db, employee_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return EmployeeService.to_out(employee)

        merged = {"joining_date": employee.joining_date, **changes}
        violations = validate_employee_data(merged, partial=True)
        if violations:
            raise ValidationException(violations)

        if "email" in changes:
            email = changes["email"].strip().lower()
            clash = await db.execute(
                select(Employee.id).where(Employee.email == email, Employee.id != employee_id)
            )
            if clash.scalar() is not None:
                raise DuplicateEntryException("email", email)
            changes["email"] = email
        if "name" in changes:
            changes["name"] = changes["name"].strip()
        if "joining_date" in changes:
            changes["joining_date"] = parse_date(changes["joining_date"])
        if "leaving_date" in changes:
            changes["leaving_date"] = parse_date(changes["leaving_date"])
        if "current_ctc" in changes:
            changes["current_ctc"] = _to_ctc(changes["current_ctc"])
        if "status" in changes:
            changes["status"] = EmploymentStatus(changes["status"])

        old_values = {k: str(getattr(employee, k)) for k in changes}
        for field, value in changes.items():
            setattr(employee, field, value)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="employee",
            entity_id=employee.id,
            old_values=old_values,
            new_values={k: str(v) for k, v in changes.items()},
        )
        return EmployeeService.to_out(employee)

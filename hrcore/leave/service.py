"""Leave service — applications, status changes, calendar, balance reset.

Balance arithmetic is delegated to :class:`~hrcore.leave.ledger.LeaveBalanceLedger`;
this module handles validation, lookups, audit and logging around it.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hrcore.common.audit import create_audit_entry
from hrcore.common.constants import LeaveStatus, LeaveType, month_bounds, month_name
from hrcore.common.exceptions import (
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from hrcore.common.pagination import PaginatedResponse, PaginationParams, paginate
from hrcore.common.validators import check_month, check_year, parse_date, validate_leave_data
from hrcore.employees.models import Employee
from hrcore.employees.schemas import LeaveBalanceOut
from hrcore.leave.calendar import project_leave_calendar
from hrcore.leave.ledger import LeaveBalanceLedger, count_leave_days
from hrcore.leave.models import Leave
from hrcore.leave.schemas import (
    BalanceResetOut,
    LeaveApply,
    LeaveCalendarOut,
    LeaveOut,
    LeaveTransitionOut,
)
from hrcore.leave.transitions import LedgerEffect, as_leave_status

logger = logging.getLogger(__name__)


class LeaveService:
    """Async leave operations."""

    # ── Lookups ─────────────────────────────────────────────────────

    @staticmethod
    async def _resolve_employee(
        db: AsyncSession,
        employee_id: Optional[uuid.UUID],
        employee_code: Optional[str],
    ) -> Employee:
        if employee_id is not None:
            employee = await db.get(Employee, employee_id)
        else:
            result = await db.execute(
                select(Employee).where(Employee.employee_code == employee_code)
            )
            employee = result.scalars().first()
        if employee is None or not employee.is_active:
            raise NotFoundException("Employee", employee_id or employee_code)
        return employee

    @staticmethod
    async def get_leave(db: AsyncSession, leave_id: uuid.UUID) -> Leave:
        leave = await db.get(Leave, leave_id)
        if leave is None:
            raise NotFoundException("Leave", str(leave_id))
        return leave

    # ── Apply ───────────────────────────────────────────────────────

    @staticmethod
    async def apply_leave(db: AsyncSession, data: LeaveApply) -> LeaveOut:
        """Create a Pending leave after checking the balance.

        The balance is only read here; it is debited on approval.
        """
        payload = data.model_dump(exclude_none=True)
        violations = validate_leave_data(payload)
        if violations:
            raise ValidationException(violations)

        employee = await LeaveService._resolve_employee(
            db, data.employee_id, data.employee_code,
        )
        leave_type = LeaveType.parse(data.leave_type)
        from_date, to_date = parse_date(data.from_date), parse_date(data.to_date)
        days = count_leave_days(from_date, to_date)

        LeaveBalanceLedger.ensure_available(employee, leave_type, days)

        leave = Leave(
            employee_id=employee.id,
            leave_type=leave_type,
            leave_sub_type=data.leave_sub_type or "Full Day",
            from_date=from_date,
            to_date=to_date,
            days=days,
            reason=data.reason,
            status=LeaveStatus.pending,
        )
        db.add(leave)
        await db.flush()

        await create_audit_entry(
            db,
            action="apply",
            entity_type="leave",
            entity_id=leave.id,
            new_values={
                "employee_code": employee.employee_code,
                "leave_type": leave_type.value,
                "from_date": from_date.isoformat(),
                "to_date": to_date.isoformat(),
                "days": days,
            },
        )
        logger.info(
            "Leave %s applied: %s %s %d day(s)",
            leave.id, employee.employee_code, leave_type.value, days,
        )
        return LeaveOut.model_validate(leave)

    # ── Status change ───────────────────────────────────────────────

    @staticmethod
    async def set_status(
        db: AsyncSession,
        leave_id: uuid.UUID,
        status: Union[LeaveStatus, str],
        actor: Optional[str] = None,
    ) -> LeaveTransitionOut:
        """Move a leave to *status*, debiting or crediting the balance as the
        transition table dictates. Same-status requests change nothing."""

        target = as_leave_status(status)
        leave = await LeaveService.get_leave(db, leave_id)
        previous = leave.status

        entry = await LeaveBalanceLedger.transition(db, leave, target)

        employee = await db.get(Employee, leave.employee_id)
        balance = LeaveBalanceOut.model_validate(employee.leave_balance)

        if entry is None:
            return LeaveTransitionOut(
                leave=LeaveOut.model_validate(leave),
                effect=LedgerEffect.none.value,
                balance=balance,
            )

        await create_audit_entry(
            db,
            action="status_change",
            entity_type="leave",
            entity_id=leave.id,
            actor=actor,
            old_values={"status": previous.value, "balance": entry.balance_before},
            new_values={
                "status": leave.status.value,
                "effect": entry.effect.value,
                "leave_type": entry.leave_type.value,
                "days": entry.days,
                "balance": entry.balance_after,
            },
        )
        logger.info(
            "Leave %s %s -> %s (%s %d, %s balance %d -> %d)",
            leave.id, previous.value, leave.status.value, entry.effect.value,
            entry.days, entry.leave_type.value, entry.balance_before, entry.balance_after,
        )
        return LeaveTransitionOut(
            leave=LeaveOut.model_validate(leave),
            effect=entry.effect.value,
            clamped=entry.clamped,
            balance=balance,
        )

    # ── List / delete ───────────────────────────────────────────────

    @staticmethod
    async def list_leaves(
        db: AsyncSession,
        params: PaginationParams,
        *,
        employee_id: Optional[uuid.UUID] = None,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
    ) -> PaginatedResponse:
        query = select(Leave).order_by(Leave.from_date.desc(), Leave.created_at.desc())
        if employee_id is not None:
            query = query.where(Leave.employee_id == employee_id)
        if status is not None:
            query = query.where(Leave.status == status)
        if leave_type is not None:
            query = query.where(Leave.leave_type == leave_type)
        return await paginate(
            db, query, params, model=Leave, transform=LeaveOut.model_validate,
        )

    @staticmethod
    async def delete_leave(db: AsyncSession, leave_id: uuid.UUID) -> None:
        """Delete a Pending or Rejected leave. Approved leaves hold a debit and
        must be rejected first."""
        leave = await LeaveService.get_leave(db, leave_id)
        if leave.status == LeaveStatus.approved:
            raise InvalidTransitionException("Leave", leave.status.value, "Deleted")

        await create_audit_entry(
            db,
            action="delete",
            entity_type="leave",
            entity_id=leave.id,
            old_values={"status": leave.status.value, "days": leave.days},
        )
        await db.delete(leave)
        await db.flush()
        logger.info("Leave %s deleted", leave_id)

    # ── Calendar ────────────────────────────────────────────────────

    @staticmethod
    async def leave_calendar(
        db: AsyncSession,
        month: Union[int, str],
        year: int,
    ) -> LeaveCalendarOut:
        """Approved leaves overlapping the month, expanded per day."""
        violations = [r.reason for r in (check_month(month), check_year(year)) if not r.ok]
        if violations:
            raise ValidationException(violations)

        start, end = month_bounds(month, year)
        result = await db.execute(
            select(Leave)
            .options(selectinload(Leave.employee))
            .where(
                Leave.status == LeaveStatus.approved,
                Leave.from_date <= end,
                Leave.to_date >= start,
            )
            .order_by(Leave.from_date, Leave.created_at)
        )
        days = project_leave_calendar(result.scalars().all(), start, end)
        return LeaveCalendarOut(month=month_name(month), year=int(year), days=days)

    # ── Balance reset ───────────────────────────────────────────────

    @staticmethod
    async def reset_balances(
        db: AsyncSession,
        employee_id: uuid.UUID,
        actor: Optional[str] = None,
    ) -> BalanceResetOut:
        before, after = await LeaveBalanceLedger.reset_balances(db, employee_id)
        await create_audit_entry(
            db,
            action="balance_reset",
            entity_type="employee",
            entity_id=employee_id,
            actor=actor,
            old_values=before.as_dict(),
            new_values=after.as_dict(),
        )
        logger.info("Leave balances reset for %s: %s -> %s", employee_id, before, after)
        return BalanceResetOut(
            employee_id=employee_id,
            before=LeaveBalanceOut.model_validate(before),
            after=LeaveBalanceOut.model_validate(after),
        )

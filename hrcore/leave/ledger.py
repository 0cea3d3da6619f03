"""Leave balance ledger — the single writer of employee leave balances.

Every balance change goes through :class:`LeaveBalanceLedger`:

* the employee row is locked (``SELECT ... FOR UPDATE``) so debits and
  credits for one employee serialize;
* the leave's status moves by compare-and-set
  (``UPDATE leaves ... WHERE status = :expected``);
* the arithmetic happens inside one ``UPDATE employees`` statement.

All of it runs in the caller's transaction: the status change and the
balance change commit together or not at all.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import NamedTuple, Optional, Union

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hrcore.common.constants import LeaveStatus, LeaveType
from hrcore.common.exceptions import (
    ConcurrentModificationException,
    InsufficientBalanceException,
    NotFoundException,
)
from hrcore.employees.models import Employee, LeaveBalance
from hrcore.leave.models import Leave
from hrcore.leave.transitions import LedgerEffect, as_leave_status, leave_effect

logger = logging.getLogger(__name__)


def count_leave_days(from_date: date, to_date: date) -> int:
    """Inclusive day count: a leave from the 3rd to the 3rd is one day."""
    return (to_date - from_date).days + 1


class LedgerEntry(NamedTuple):
    """What a status transition did to the balance."""

    effect: LedgerEffect
    leave_type: LeaveType
    days: int
    balance_before: int
    balance_after: int

    @property
    def clamped(self) -> bool:
        return self.effect == LedgerEffect.debit and self.balance_before < self.days


class LeaveBalanceLedger:
    """Atomic debit / credit / reset over an employee's leave balance."""

    # ── Locking ─────────────────────────────────────────────────────

    @staticmethod
    async def lock_employee(db: AsyncSession, employee_id: uuid.UUID) -> Employee:
        """Load the employee row ``FOR UPDATE`` with fresh column values."""
        result = await db.execute(
            select(Employee)
            .where(Employee.id == employee_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        employee = result.scalars().first()
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    # ── Balance checks ──────────────────────────────────────────────

    @staticmethod
    def ensure_available(
        employee: Employee,
        leave_type: Union[LeaveType, str],
        days: int,
    ) -> int:
        """Return the available balance, or raise when it cannot cover *days*."""
        leave_type = LeaveType.parse(leave_type)
        available = employee.leave_balance[leave_type]
        if available < days:
            logger.warning(
                "Insufficient %s balance for %s: available=%d requested=%d",
                leave_type.value, employee.employee_code, available, days,
            )
            raise InsufficientBalanceException(leave_type.value, available, days)
        return available

    # ── Debit / credit ──────────────────────────────────────────────

    @staticmethod
    async def _write(
        db: AsyncSession,
        employee: Employee,
        leave_type: LeaveType,
        days: int,
        effect: LedgerEffect,
    ) -> LedgerEntry:
        column = Employee.balance_column(leave_type)
        before = employee.leave_balance[leave_type]

        if effect == LedgerEffect.debit:
            new_value = case((column - days < 0, 0), else_=column - days)
        else:
            new_value = column + days

        await db.execute(
            update(Employee)
            .where(Employee.id == employee.id)
            .values({column: new_value})
            .execution_options(synchronize_session=False)
        )
        await db.refresh(employee)

        entry = LedgerEntry(effect, leave_type, days, before, employee.leave_balance[leave_type])
        if entry.clamped:
            logger.warning(
                "Clamped %s debit for %s at 0: balance=%d days=%d",
                leave_type.value, employee.employee_code, before, days,
            )
        return entry

    @staticmethod
    async def debit(
        db: AsyncSession,
        employee: Employee,
        leave_type: Union[LeaveType, str],
        days: int,
    ) -> LedgerEntry:
        """Subtract *days*, flooring the balance at 0."""
        return await LeaveBalanceLedger._write(
            db, employee, LeaveType.parse(leave_type), days, LedgerEffect.debit,
        )

    @staticmethod
    async def credit(
        db: AsyncSession,
        employee: Employee,
        leave_type: Union[LeaveType, str],
        days: int,
    ) -> LedgerEntry:
        """Give back *days* previously debited."""
        return await LeaveBalanceLedger._write(
            db, employee, LeaveType.parse(leave_type), days, LedgerEffect.credit,
        )

    # ── Status transition ───────────────────────────────────────────

    @staticmethod
    async def compare_and_set_status(
        db: AsyncSession,
        leave: Leave,
        expected: LeaveStatus,
        target: LeaveStatus,
    ) -> bool:
        """``UPDATE leaves SET status = :target WHERE status = :expected``.

        Returns False when the row no longer holds *expected*.
        """
        result = await db.execute(
            update(Leave)
            .where(Leave.id == leave.id, Leave.status == expected)
            .values(status=target, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    async def _track_debited(db: AsyncSession, leave: Leave, delta: int) -> None:
        await db.execute(
            update(Leave)
            .where(Leave.id == leave.id)
            .values(debited_days=Leave.debited_days + delta)
            .execution_options(synchronize_session=False)
        )
        await db.refresh(leave)

    @staticmethod
    async def transition(
        db: AsyncSession,
        leave: Leave,
        target: Union[LeaveStatus, str],
    ) -> Optional[LedgerEntry]:
        """Move *leave* to *target* and apply the balance effect of that move.

        Returns ``None`` for a same-status no-op. A credit gives back what the
        approval actually took (``leave.debited_days``), so a clamped debit
        is never over-credited.

        Raises:
            ConcurrentModificationException: another request changed the
                leave's status between our read and our write.
        """
        target = as_leave_status(target)
        employee = await LeaveBalanceLedger.lock_employee(db, leave.employee_id)
        await db.refresh(leave)

        current = leave.status
        effect = leave_effect(current, target)
        if current == target:
            return None

        if not await LeaveBalanceLedger.compare_and_set_status(db, leave, current, target):
            raise ConcurrentModificationException("Leave", leave.id)
        await db.refresh(leave)

        if effect == LedgerEffect.none:
            if current == LeaveStatus.approved:
                logger.warning(
                    "Leave %s moved from Approved back to Pending; %d %s day(s) stay debited",
                    leave.id, leave.debited_days, leave.leave_type.value,
                )
            balance = employee.leave_balance[leave.leave_type]
            return LedgerEntry(effect, leave.leave_type, leave.days, balance, balance)

        if effect == LedgerEffect.debit:
            entry = await LeaveBalanceLedger.debit(db, employee, leave.leave_type, leave.days)
            await LeaveBalanceLedger._track_debited(
                db, leave, entry.balance_before - entry.balance_after,
            )
            return entry

        refund = min(leave.days, leave.debited_days)
        if refund < leave.days:
            logger.warning(
                "Leave %s credits %d of %d %s day(s); the approval debit was clamped",
                leave.id, refund, leave.days, leave.leave_type.value,
            )
        entry = await LeaveBalanceLedger.credit(db, employee, leave.leave_type, refund)
        await LeaveBalanceLedger._track_debited(db, leave, -refund)
        return entry

    # ── Policy reset ────────────────────────────────────────────────

    @staticmethod
    async def reset_balances(
        db: AsyncSession,
        employee_id: uuid.UUID,
        balance: Optional[LeaveBalance] = None,
    ) -> tuple[LeaveBalance, LeaveBalance]:
        """Restore the policy default balance. Returns ``(before, after)``."""
        employee = await LeaveBalanceLedger.lock_employee(db, employee_id)
        before = employee.leave_balance
        target = balance or LeaveBalance.policy_default()

        await db.execute(
            update(Employee)
            .where(Employee.id == employee.id)
            .values(
                casual_leave=target.casual,
                sick_leave=target.sick,
                earned_leave=target.earned,
            )
            .execution_options(synchronize_session=False)
        )
        await db.refresh(employee)
        return before, employee.leave_balance

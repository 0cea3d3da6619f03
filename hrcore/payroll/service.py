"""Payroll service — generation, status, payslip documents.

A payroll run reads the employee (CTC, role, number), the month's
attendance and the approved leaves overlapping the month, computes the
breakup with :func:`~hrcore.payroll.calculator.calculate_payroll`, stores
it and hands the payslip fields to the document generator.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Any, Optional, Union

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hrcore.attendance.models import AttendanceRecord
from hrcore.common.audit import create_audit_entry
from hrcore.common.constants import LeaveStatus, PayrollStatus, month_bounds, month_name
from hrcore.common.exceptions import (
    ConcurrentModificationException,
    DuplicateEntryException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from hrcore.common.pagination import PaginatedResponse, PaginationParams, paginate
from hrcore.common.validators import check_payroll_status, validate_payroll_data
from hrcore.employees.models import Employee
from hrcore.leave.models import Leave
from hrcore.payroll.calculator import PayrollPolicy, calculate_payroll, format_employee_id
from hrcore.payroll.documents import DocumentGenerator, get_document_generator
from hrcore.payroll.models import Payroll
from hrcore.payroll.schemas import PayrollGenerate, PayrollOut

logger = logging.getLogger(__name__)

# Generated -> Paid is one-way; same-status requests are no-ops.
PAYROLL_TRANSITIONS: frozenset[tuple[PayrollStatus, PayrollStatus]] = frozenset({
    (PayrollStatus.generated, PayrollStatus.generated),
    (PayrollStatus.generated, PayrollStatus.paid),
    (PayrollStatus.paid, PayrollStatus.paid),
})


def _duplicate(employee_code: str, month: str, year: int) -> DuplicateEntryException:
    return DuplicateEntryException(
        "period",
        f"{month} {year}",
        detail=f"Payroll for {employee_code} for {month} {year} already exists.",
    )


class PayrollService:
    """Async payroll operations."""

    # ── Lookups ─────────────────────────────────────────────────────

    @staticmethod
    async def get_payroll(db: AsyncSession, payroll_id: uuid.UUID) -> Payroll:
        payroll = await db.get(Payroll, payroll_id)
        if payroll is None:
            raise NotFoundException("Payroll", str(payroll_id))
        return payroll

    @staticmethod
    async def _find_existing(
        db: AsyncSession, employee_id: uuid.UUID, month: str, year: int,
    ) -> Optional[Payroll]:
        result = await db.execute(
            select(Payroll).where(
                Payroll.employee_id == employee_id,
                Payroll.month == month,
                Payroll.year == year,
            )
        )
        return result.scalars().first()

    # ── Payslip fields ──────────────────────────────────────────────

    @staticmethod
    def payslip_fields(employee: Employee, payroll: Payroll) -> dict[str, Any]:
        """Flat field map handed to the document generator."""
        return {
            "employee_name": employee.name,
            "employee_code": employee.employee_code,
            "formatted_employee_id": payroll.formatted_employee_id,
            "designation": employee.designation,
            "department": employee.department,
            "month": payroll.month,
            "year": payroll.year,
            "ctc": payroll.ctc,
            "days_in_month": payroll.days_in_month,
            "working_days": payroll.working_days,
            "absent_days": payroll.absent_days,
            "leave_days": payroll.leave_days,
            "basic": payroll.basic,
            "hra": payroll.hra,
            "da": payroll.da,
            "special_allowance": payroll.special_allowance,
            "employer_pf": payroll.employer_pf,
            "tds": payroll.tds,
            "absence_deductions": payroll.absence_deductions,
            "total_earnings": payroll.total_earnings,
            "total_deductions": payroll.total_deductions,
            "gross_salary": payroll.gross_salary,
            "net_salary": payroll.net_salary,
            "status": payroll.status.value,
        }

    # ── Generate ────────────────────────────────────────────────────

    @staticmethod
    async def generate_payroll(
        db: AsyncSession,
        data: PayrollGenerate,
        *,
        policy: Optional[PayrollPolicy] = None,
        generator: Optional[DocumentGenerator] = None,
    ) -> PayrollOut:
        """Compute and store payroll for one employee-month.

        Raises:
            ValidationException: bad month/year/CTC or missing employee reference.
            NotFoundException: employee does not exist.
            DuplicateEntryException: payroll for the period already exists.
        """
        employee = None
        if data.employee_id is not None:
            employee = await db.get(Employee, data.employee_id)

        ctc = data.ctc
        if ctc is None and employee is not None:
            ctc = employee.current_ctc
        violations = validate_payroll_data({
            "employee_id": data.employee_id,
            "month": data.month,
            "year": data.year,
            "ctc": ctc,
        })
        if violations:
            raise ValidationException(violations)
        if employee is None:
            raise NotFoundException("Employee", str(data.employee_id))

        month, year = month_name(data.month), int(data.year)
        code = employee.employee_code
        if await PayrollService._find_existing(db, employee.id, month, year) is not None:
            logger.warning("Duplicate payroll for %s %s %d", code, month, year)
            raise _duplicate(code, month, year)

        start, end = month_bounds(month, year)
        statuses = (
            await db.execute(
                select(AttendanceRecord.status).where(
                    AttendanceRecord.employee_code == employee.employee_code,
                    AttendanceRecord.date >= start,
                    AttendanceRecord.date <= end,
                )
            )
        ).scalars().all()
        leaves = (
            await db.execute(
                select(Leave).where(
                    Leave.employee_id == employee.id,
                    Leave.status == LeaveStatus.approved,
                    Leave.from_date <= end,
                    Leave.to_date >= start,
                )
            )
        ).scalars().all()

        breakup = calculate_payroll(ctc, month, year, statuses, leaves, policy)
        values = breakup.as_dict()
        values["daily_rate"] = breakup.daily_rate.quantize(Decimal("0.0001"))

        payroll = Payroll(
            employee_id=employee.id,
            formatted_employee_id=format_employee_id(employee.role, year, employee.employee_number),
            status=PayrollStatus.generated,
            **values,
        )
        db.add(payroll)
        try:
            await db.flush()
        except IntegrityError:
            # Lost the race to a concurrent generation for the same period;
            # the rollback expires every loaded row, so only plain values below.
            await db.rollback()
            logger.warning("Payroll insert collided for %s %s %d", code, month, year)
            raise _duplicate(code, month, year) from None

        generator = generator or get_document_generator()
        payroll.payslip_url = generator.generate_payslip(
            PayrollService.payslip_fields(employee, payroll)
        )
        await db.flush()

        await create_audit_entry(
            db,
            action="generate",
            entity_type="payroll",
            entity_id=payroll.id,
            actor=data.actor,
            new_values={
                "employee_code": employee.employee_code,
                "month": month,
                "year": year,
                "net_salary": payroll.net_salary,
            },
        )
        logger.info(
            "Payroll %s generated for %s %s %d: net=%d",
            payroll.id, employee.employee_code, month, year, payroll.net_salary,
        )
        return PayrollOut.model_validate(payroll)

    # ── Status ──────────────────────────────────────────────────────

    @staticmethod
    async def set_status(
        db: AsyncSession,
        payroll_id: uuid.UUID,
        status: Union[PayrollStatus, str],
        actor: Optional[str] = None,
    ) -> PayrollOut:
        result = check_payroll_status(status)
        if not result.ok:
            raise ValidationException([result.reason])
        target = PayrollStatus(status)

        payroll = await PayrollService.get_payroll(db, payroll_id)
        current = payroll.status
        if (current, target) not in PAYROLL_TRANSITIONS:
            logger.warning("Rejected payroll transition %s: %s -> %s", payroll.id, current.value, target.value)
            raise InvalidTransitionException("Payroll", current.value, target.value)
        if current == target:
            return PayrollOut.model_validate(payroll)

        updated = await db.execute(
            update(Payroll)
            .where(Payroll.id == payroll.id, Payroll.status == current)
            .values(status=target)
            .execution_options(synchronize_session=False)
        )
        if updated.rowcount != 1:
            raise ConcurrentModificationException("Payroll", payroll.id)
        await db.refresh(payroll)

        await create_audit_entry(
            db,
            action="status_change",
            entity_type="payroll",
            entity_id=payroll.id,
            actor=actor,
            old_values={"status": current.value},
            new_values={"status": target.value},
        )
        logger.info("Payroll %s %s -> %s", payroll.id, current.value, target.value)
        return PayrollOut.model_validate(payroll)

    # ── List ────────────────────────────────────────────────────────

    @staticmethod
    async def list_payrolls(
        db: AsyncSession,
        params: PaginationParams,
        *,
        employee_id: Optional[uuid.UUID] = None,
        month: Optional[Union[int, str]] = None,
        year: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
    ) -> PaginatedResponse:
        query = select(Payroll).order_by(Payroll.year.desc(), Payroll.created_at.desc())
        if employee_id is not None:
            query = query.where(Payroll.employee_id == employee_id)
        if month:
            try:
                query = query.where(Payroll.month == month_name(month))
            except ValueError as exc:
                raise ValidationException([str(exc)]) from exc
        if year is not None:
            query = query.where(Payroll.year == year)
        if status is not None:
            query = query.where(Payroll.status == status)
        return await paginate(
            db, query, params, model=Payroll, transform=PayrollOut.model_validate,
        )

    # ── Documents ───────────────────────────────────────────────────

    @staticmethod
    async def get_payslip_fields(db: AsyncSession, payroll_id: uuid.UUID) -> dict[str, Any]:
        payroll = await PayrollService.get_payroll(db, payroll_id)
        employee = await db.get(Employee, payroll.employee_id)
        return PayrollService.payslip_fields(employee, payroll)

    @staticmethod
    async def regenerate_payslip(
        db: AsyncSession,
        payroll_id: uuid.UUID,
        generator: Optional[DocumentGenerator] = None,
    ) -> PayrollOut:
        """Re-render the payslip from the stored breakup; amounts are not recomputed."""
        payroll = await PayrollService.get_payroll(db, payroll_id)
        employee = await db.get(Employee, payroll.employee_id)
        generator = generator or get_document_generator()
        payroll.payslip_url = generator.generate_payslip(
            PayrollService.payslip_fields(employee, payroll)
        )
        await db.flush()
        await db.refresh(payroll)
        return PayrollOut.model_validate(payroll)

    # ── Delete ──────────────────────────────────────────────────────

    @staticmethod
    async def delete_payroll(db: AsyncSession, payroll_id: uuid.UUID) -> None:
        """Delete a Generated payroll. Paid payrolls are immutable."""
        payroll = await PayrollService.get_payroll(db, payroll_id)
        if payroll.status == PayrollStatus.paid:
            raise InvalidTransitionException("Payroll", payroll.status.value, "Deleted")

        await create_audit_entry(
            db,
            action="delete",
            entity_type="payroll",
            entity_id=payroll.id,
            old_values={
                "month": payroll.month,
                "year": payroll.year,
                "net_salary": payroll.net_salary,
            },
        )
        await db.delete(payroll)
        await db.flush()
        logger.info("Payroll %s deleted", payroll_id)

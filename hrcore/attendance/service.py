"""Attendance service — daily marking, corrections, monthly report."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, time
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hrcore.attendance.models import AttendanceRecord
from hrcore.attendance.report import build_monthly_report
from hrcore.attendance.schemas import (
    AttendanceCreate,
    AttendanceOut,
    AttendanceUpdate,
    EmployeeAttendanceOut,
    MonthlyReportOut,
    MonthlyReportSummary,
)
from hrcore.common.audit import create_audit_entry
from hrcore.common.constants import (
    TIME_FORMAT,
    AttendanceStatus,
    EmploymentStatus,
    LeaveStatus,
    month_bounds,
    month_name,
)
from hrcore.common.exceptions import (
    DuplicateEntryException,
    NotFoundException,
    ValidationException,
)
from hrcore.common.pagination import PaginatedResponse, PaginationParams, paginate
from hrcore.common.validators import (
    check_attendance_status,
    check_date_range,
    check_month,
    check_time,
    check_year,
    parse_date,
    validate_attendance_data,
)
from hrcore.employees.models import Employee
from hrcore.employees.service import EmployeeService
from hrcore.leave.models import Leave

logger = logging.getLogger(__name__)


def _parse_time(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    return datetime.strptime(value, TIME_FORMAT).time()


def _duplicate(employee_code: str, day: date) -> DuplicateEntryException:
    return DuplicateEntryException(
        "date",
        day.isoformat(),
        detail=f"Attendance for {employee_code} on {day.isoformat()} is already marked.",
    )


class AttendanceService:
    """Async attendance operations."""

    # ── Lookups ─────────────────────────────────────────────────────

    @staticmethod
    async def _find_existing(
        db: AsyncSession, employee_code: str, day: date,
    ) -> Optional[uuid.UUID]:
        result = await db.execute(
            select(AttendanceRecord.id).where(
                AttendanceRecord.employee_code == employee_code,
                AttendanceRecord.date == day,
            )
        )
        return result.scalar()

    # ── Mark ────────────────────────────────────────────────────────

    @staticmethod
    async def mark_attendance(db: AsyncSession, data: AttendanceCreate) -> AttendanceOut:
        """Record one day for one employee. A second submission for the same
        day is a DuplicateEntry."""

        payload = data.model_dump(exclude_none=True)
        violations = validate_attendance_data(payload)
        if violations:
            raise ValidationException(violations)

        day = parse_date(data.date)
        employee = await EmployeeService.get_by_code(db, data.employee_code)
        code = employee.employee_code

        if await AttendanceService._find_existing(db, code, day) is not None:
            logger.warning("Duplicate attendance for %s on %s", code, day)
            raise _duplicate(code, day)

        record = AttendanceRecord(
            employee_code=code,
            date=day,
            status=AttendanceStatus(data.status),
            in_time=_parse_time(data.in_time),
            out_time=_parse_time(data.out_time),
        )
        db.add(record)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.warning("Attendance insert collided for %s on %s", code, day)
            raise _duplicate(code, day) from None

        logger.info("Attendance %s for %s on %s", record.status.value, record.employee_code, day)
        return AttendanceOut.model_validate(record)

    # ── Update ──────────────────────────────────────────────────────

    @staticmethod
    async def update_attendance(
        db: AsyncSession,
        record_id: uuid.UUID,
        data: AttendanceUpdate,
    ) -> AttendanceOut:
        record = await db.get(AttendanceRecord, record_id)
        if record is None:
            raise NotFoundException("Attendance", str(record_id))

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        checks = []
        if "status" in changes:
            checks.append(check_attendance_status(changes["status"]))
        if "in_time" in changes:
            checks.append(check_time(changes["in_time"], "in-time"))
        if "out_time" in changes:
            checks.append(check_time(changes["out_time"], "out-time"))
        violations = [c.reason for c in checks if not c.ok]
        if violations:
            raise ValidationException(violations)

        old_values = {"status": record.status.value}
        if "status" in changes:
            record.status = AttendanceStatus(changes["status"])
        if "in_time" in changes:
            record.in_time = _parse_time(changes["in_time"])
        if "out_time" in changes:
            record.out_time = _parse_time(changes["out_time"])
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="attendance",
            entity_id=record.id,
            old_values=old_values,
            new_values={k: str(v) for k, v in changes.items()},
        )
        return AttendanceOut.model_validate(record)

    # ── List ────────────────────────────────────────────────────────

    @staticmethod
    async def list_attendance(
        db: AsyncSession,
        params: PaginationParams,
        *,
        employee_code: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> PaginatedResponse:
        range_check = check_date_range(from_date, to_date)
        if not range_check.ok:
            raise ValidationException([range_check.reason])

        query = select(AttendanceRecord).order_by(
            AttendanceRecord.date, AttendanceRecord.employee_code,
        )
        if employee_code:
            query = query.where(AttendanceRecord.employee_code == employee_code)
        if from_date:
            query = query.where(AttendanceRecord.date >= from_date)
        if to_date:
            query = query.where(AttendanceRecord.date <= to_date)
        return await paginate(
            db, query, params, model=AttendanceRecord, transform=AttendanceOut.model_validate,
        )

    # ── Monthly report ──────────────────────────────────────────────

    @staticmethod
    async def monthly_report(
        db: AsyncSession,
        month: Union[int, str],
        year: int,
    ) -> MonthlyReportOut:
        """Per-employee present/absent/leave counts for every Active employee."""

        violations = [r.reason for r in (check_month(month), check_year(year)) if not r.ok]
        if violations:
            raise ValidationException(violations)

        start, end = month_bounds(month, year)
        employees = (
            await db.execute(
                select(Employee)
                .where(Employee.status == EmploymentStatus.active)
                .order_by(Employee.created_at, Employee.employee_code)
            )
        ).scalars().all()
        records = (
            await db.execute(
                select(AttendanceRecord).where(
                    AttendanceRecord.date >= start, AttendanceRecord.date <= end,
                )
            )
        ).scalars().all()
        leaves = (
            await db.execute(
                select(Leave).where(
                    Leave.status == LeaveStatus.approved,
                    Leave.from_date <= end,
                    Leave.to_date >= start,
                )
            )
        ).scalars().all()

        report = build_monthly_report(
            employees, records, leaves, month_name(month), int(year), start, end,
        )
        return MonthlyReportOut(
            month=report.month,
            year=report.year,
            report=[EmployeeAttendanceOut.model_validate(r) for r in report.rows],
            summary=MonthlyReportSummary(
                total_employees=report.total_employees,
                average_attendance=report.average_attendance,
            ),
        )

"""Payroll test suite — calculator arithmetic, leave/absence deductions,
generation, duplicate protection, status lifecycle, payslip documents.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrcore.attendance.models import AttendanceRecord
from hrcore.common.constants import AttendanceStatus, LeaveStatus, LeaveType, PayrollStatus
from hrcore.common.exceptions import (
    DuplicateEntryException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from hrcore.leave.models import Leave
from hrcore.payroll.calculator import (
    PayrollPolicy,
    calculate_payroll,
    format_employee_id,
    round_half_up,
)
from hrcore.payroll.documents import get_document_generator, set_document_generator
from hrcore.payroll.models import Payroll
from hrcore.payroll.schemas import PayrollGenerate
from hrcore.payroll.service import PayrollService


@dataclass
class _Range:
    from_date: date
    to_date: date


POLICY = PayrollPolicy()


# ═════════════════════════════════════════════════════════════════════
# 1. Calculator — pure arithmetic (no DB)
# ═════════════════════════════════════════════════════════════════════


class TestCalculator:

    def test_reference_scenario(self):
        """CTC 1,200,000 in a 30-day month with no absences."""
        b = calculate_payroll(1_200_000, "November", 2024, policy=POLICY)

        assert b.days_in_month == 30
        assert b.working_days == 22
        assert b.monthly_basic == 40000
        assert b.basic == 29333
        assert b.hra == 14667
        assert b.da == 1027
        assert b.employer_pf == 3520
        # (1,200,000 - 48,547) / 12 = 95,954.42
        assert b.special_allowance == 95954
        assert b.tds == 4000
        assert b.absence_deductions == 0
        assert b.total_earnings == 140981
        assert b.total_deductions == 7520
        assert b.gross_salary == b.total_earnings
        assert b.net_salary == 133461

    def test_daily_rate_is_not_rounded(self):
        b = calculate_payroll(1_200_000, 11, 2024, policy=POLICY)
        assert b.daily_rate == Decimal(40000) / 22

    def test_absences_are_deducted(self):
        statuses = [AttendanceStatus.absent, "Absent", "Present", AttendanceStatus.leave]
        b = calculate_payroll(1_200_000, "November", 2024, statuses, policy=POLICY)
        assert b.absent_days == 2
        # round(2 * 40000 / 22) = round(3636.36)
        assert b.absence_deductions == 3636
        assert b.total_deductions == 4000 + 3520 + 3636

    def test_approved_leave_clipped_to_month(self):
        leaves = [_Range(date(2024, 10, 30), date(2024, 11, 2))]
        b = calculate_payroll(1_200_000, "November", 2024, [], leaves, POLICY)
        assert b.leave_days == 2
        # round(2 * 1818.1818...) = 3636
        assert b.absence_deductions == 3636

    def test_leave_deduction_policy_flag(self):
        leaves = [_Range(date(2024, 11, 4), date(2024, 11, 6))]
        paid = PayrollPolicy(deduct_approved_leave=False)
        b = calculate_payroll(1_200_000, "November", 2024, ["Absent"], leaves, paid)
        assert b.leave_days == 3
        assert b.absence_deductions == round_half_up(Decimal(40000) / 22)

    def test_proration_uses_days_in_month(self):
        feb = calculate_payroll(1_200_000, "February", 2024, policy=POLICY)
        assert feb.days_in_month == 29
        assert feb.basic == round_half_up(Decimal(40000 * 22) / 29)

    def test_deterministic(self):
        args = (987_654, "March", 2025, ["Absent", "Present"], [_Range(date(2025, 3, 3), date(2025, 3, 4))], POLICY)
        assert calculate_payroll(*args) == calculate_payroll(*args)

    def test_configurable_ratios(self):
        policy = PayrollPolicy(basic_ratio=Decimal("0.50"), working_days=26)
        b = calculate_payroll(1_200_000, "November", 2024, policy=policy)
        assert b.monthly_basic == 50000
        assert b.basic == round_half_up(Decimal(50000 * 26) / 30)

    def test_round_half_up(self):
        assert round_half_up(Decimal("2.5")) == 3
        assert round_half_up(Decimal("3.5")) == 4
        assert round_half_up(Decimal("-2.5")) == -3
        assert round_half_up(Decimal("14666.5")) == 14667

    def test_formatted_employee_id(self):
        assert format_employee_id("DEV", 2024, 108) == "VT/DEV/2024/0108"
        assert format_employee_id("QA", 2025, 12345) == "VT/QA/2025/12345"


# ═════════════════════════════════════════════════════════════════════
# 2. Generation — service layer
# ═════════════════════════════════════════════════════════════════════


async def _generate(db: AsyncSession, employee, month="November", year=2024, **kwargs):
    return await PayrollService.generate_payroll(
        db, PayrollGenerate(employee_id=employee.id, month=month, year=year, **kwargs),
    )


class TestGeneratePayroll:

    async def test_generate_stores_breakup(self, db: AsyncSession, seed_employee):
        employee = await seed_employee(employee_code="VT000108", role="DEV")
        result = await _generate(db, employee)

        assert result.month == "November"
        assert result.year == 2024
        assert result.formatted_employee_id == "VT/DEV/2024/0108"
        assert result.net_salary == 133461
        assert result.status == PayrollStatus.generated

    async def test_month_number_is_stored_as_name(self, db: AsyncSession, test_employee):
        result = await _generate(db, test_employee, month=11)
        assert result.month == "November"

    async def test_reads_attendance_and_approved_leave(self, db: AsyncSession, test_employee):
        db.add_all([
            AttendanceRecord(employee_code=test_employee.employee_code, date=date(2024, 11, 4),
                             status=AttendanceStatus.absent),
            AttendanceRecord(employee_code=test_employee.employee_code, date=date(2024, 11, 5),
                             status=AttendanceStatus.present),
            AttendanceRecord(employee_code=test_employee.employee_code, date=date(2024, 10, 31),
                             status=AttendanceStatus.absent),
            Leave(employee_id=test_employee.id, leave_type=LeaveType.casual,
                  from_date=date(2024, 11, 28), to_date=date(2024, 12, 3), days=6,
                  status=LeaveStatus.approved),
            Leave(employee_id=test_employee.id, leave_type=LeaveType.sick,
                  from_date=date(2024, 11, 11), to_date=date(2024, 11, 12), days=2,
                  status=LeaveStatus.pending),
        ])
        await db.flush()

        result = await _generate(db, test_employee)
        assert result.absent_days == 1
        assert result.leave_days == 3
        assert result.absence_deductions == round_half_up(4 * Decimal(40000) / 22)

    async def test_explicit_ctc_overrides_employee(self, db: AsyncSession, test_employee):
        result = await _generate(db, test_employee, ctc=600_000)
        assert result.ctc == 600_000
        assert result.monthly_basic == 20000

    async def test_duplicate_rejected_first_untouched(self, db: AsyncSession, test_employee):
        first = await _generate(db, test_employee)

        with pytest.raises(DuplicateEntryException):
            await _generate(db, test_employee, month="november")

        count = (await db.execute(select(func.count()).select_from(Payroll))).scalar_one()
        assert count == 1
        stored = await db.get(Payroll, first.id)
        assert stored.net_salary == first.net_salary

    async def test_concurrent_insert_hits_unique_constraint(
        self, db: AsyncSession, test_employee, monkeypatch,
    ):
        first = await _generate(db, test_employee)
        await db.commit()

        async def _not_found_yet(*args, **kwargs):
            return None

        # Both requests passed the existence check before either inserted
        monkeypatch.setattr(PayrollService, "_find_existing", staticmethod(_not_found_yet))

        with pytest.raises(DuplicateEntryException) as exc_info:
            await _generate(db, test_employee)
        assert test_employee.employee_code in exc_info.value.detail

        count = (await db.execute(select(func.count()).select_from(Payroll))).scalar_one()
        assert count == 1
        stored = await db.get(Payroll, first.id)
        assert stored.net_salary == first.net_salary
        assert stored.status == PayrollStatus.generated

    async def test_same_month_other_year_allowed(self, db: AsyncSession, test_employee):
        await _generate(db, test_employee, year=2024)
        result = await _generate(db, test_employee, year=2025)
        assert result.year == 2025

    async def test_unknown_employee(self, db: AsyncSession):
        with pytest.raises(NotFoundException):
            await PayrollService.generate_payroll(
                db, PayrollGenerate(employee_id=uuid.uuid4(), month="November", year=2024, ctc=500_000),
            )

    async def test_validation(self, db: AsyncSession, test_employee):
        with pytest.raises(ValidationException) as exc_info:
            await _generate(db, test_employee, month="Smarch", ctc=5)
        assert exc_info.value.violations == [
            "Month must be a month name or a number between 1 and 12",
            "CTC must be between 10,000 and 10,000,000",
        ]

    async def test_payslip_document_written(self, db: AsyncSession, test_employee, _document_dir):
        result = await _generate(db, test_employee)

        path = Path(result.payslip_url)
        assert path.parent == _document_dir
        fields = json.loads(path.read_text())
        assert fields["employee_name"] == test_employee.name
        assert fields["net_salary"] == 133461
        assert fields["month"] == "November"


# ═════════════════════════════════════════════════════════════════════
# 3. Status lifecycle and deletion
# ═════════════════════════════════════════════════════════════════════


class TestPayrollStatus:

    async def test_generated_to_paid(self, db: AsyncSession, test_employee):
        payroll = await _generate(db, test_employee)
        result = await PayrollService.set_status(db, payroll.id, "Paid")
        assert result.status == PayrollStatus.paid
        # breakup untouched
        assert result.net_salary == payroll.net_salary

    async def test_same_status_is_noop(self, db: AsyncSession, test_employee):
        payroll = await _generate(db, test_employee)
        result = await PayrollService.set_status(db, payroll.id, "Generated")
        assert result.status == PayrollStatus.generated

    async def test_paid_is_final(self, db: AsyncSession, test_employee):
        payroll = await _generate(db, test_employee)
        await PayrollService.set_status(db, payroll.id, "Paid")
        with pytest.raises(InvalidTransitionException):
            await PayrollService.set_status(db, payroll.id, "Generated")

    async def test_unknown_status(self, db: AsyncSession, test_employee):
        payroll = await _generate(db, test_employee)
        with pytest.raises(ValidationException):
            await PayrollService.set_status(db, payroll.id, "Cancelled")

    async def test_delete_generated_only(self, db: AsyncSession, seed_employee):
        a = await _generate(db, await seed_employee())
        b = await _generate(db, await seed_employee())

        await PayrollService.delete_payroll(db, a.id)
        assert await db.get(Payroll, a.id) is None

        await PayrollService.set_status(db, b.id, "Paid")
        with pytest.raises(InvalidTransitionException):
            await PayrollService.delete_payroll(db, b.id)

    async def test_payslip_fields(self, db: AsyncSession, test_employee):
        payroll = await _generate(db, test_employee)
        fields = await PayrollService.get_payslip_fields(db, payroll.id)
        assert fields["designation"] == "Software Engineer"
        assert fields["formatted_employee_id"] == payroll.formatted_employee_id
        assert fields["total_earnings"] == 140981


# ═════════════════════════════════════════════════════════════════════
# 4. API endpoints
# ═════════════════════════════════════════════════════════════════════


class TestPayrollAPI:

    async def test_generate_and_duplicate(self, client, db: AsyncSession, test_employee):
        await db.commit()
        body = {"employee_id": str(test_employee.id), "month": "November", "year": 2024}

        resp = await client.post("/api/v1/payroll", json=body)
        assert resp.status_code == 201
        assert resp.json()["net_salary"] == 133461

        resp = await client.post("/api/v1/payroll", json=body)
        assert resp.status_code == 409
        assert resp.json()["type"].endswith("/duplicate-entry")

    @pytest.mark.parametrize("ctc", ["NaN", "Infinity"])
    async def test_non_finite_ctc_rejected(self, client, db: AsyncSession, test_employee, ctc):
        await db.commit()
        body = {"employee_id": str(test_employee.id), "month": "November", "year": 2024, "ctc": ctc}

        resp = await client.post("/api/v1/payroll", json=body)
        assert resp.status_code == 422
        assert resp.json()["type"].endswith("/validation-error")

        listing = await client.get("/api/v1/payroll")
        assert listing.json()["meta"]["total"] == 0

    async def test_list_filters_by_month(self, client, db: AsyncSession, test_employee):
        await _generate(db, test_employee, month="November")
        await _generate(db, test_employee, month="December")
        await db.commit()

        resp = await client.get("/api/v1/payroll", params={"month": "12", "year": 2024})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert [p["month"] for p in data] == ["December"]

    async def test_missing_payroll_is_404(self, client):
        resp = await client.get(f"/api/v1/payroll/{uuid.uuid4()}")
        assert resp.status_code == 404


class _RecordingGenerator:
    def __init__(self):
        self.calls = []

    def generate_payslip(self, fields):
        self.calls.append(dict(fields))
        return f"memory://payslip/{len(self.calls)}"


class TestPayslipDocuments:

    async def test_custom_generator_reference_stored(self, db: AsyncSession, test_employee):
        generator = _RecordingGenerator()
        result = await PayrollService.generate_payroll(
            db,
            PayrollGenerate(employee_id=test_employee.id, month="November", year=2024),
            generator=generator,
        )
        assert result.payslip_url == "memory://payslip/1"
        assert generator.calls[0]["formatted_employee_id"] == result.formatted_employee_id

    async def test_regenerate_keeps_amounts(self, db: AsyncSession, test_employee):
        payroll = await _generate(db, test_employee)
        generator = _RecordingGenerator()

        result = await PayrollService.regenerate_payslip(db, payroll.id, generator)

        assert result.payslip_url == "memory://payslip/1"
        assert result.net_salary == payroll.net_salary
        assert generator.calls[0]["net_salary"] == payroll.net_salary

    async def test_installed_generator_used_by_default(self, db: AsyncSession, test_employee):
        generator = _RecordingGenerator()
        previous = get_document_generator()
        set_document_generator(generator)
        try:
            result = await _generate(db, test_employee)
        finally:
            set_document_generator(previous)

        assert result.payslip_url == "memory://payslip/1"

"""Employee directory tests — onboarding, ID issue, lookup, update, API."""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from hrcore.common.exceptions import (
    DuplicateEntryException,
    NotFoundException,
    SequenceExhaustedException,
    ValidationException,
)
from hrcore.employees.models import LeaveBalance
from hrcore.employees.schemas import EmployeeCreate, EmployeeUpdate
from hrcore.employees.service import EmployeeService


def _payload(**overrides) -> EmployeeCreate:
    data = {
        "name": "Asha Verma",
        "email": "Asha.Verma@Example.com",
        "phone": "+919876543210",
        "designation": "Software Engineer",
        "department": "Engineering",
        "joining_date": "2024-01-15",
        "current_ctc": 1_200_000,
    }
    data.update(overrides)
    return EmployeeCreate(**data)


class TestLeaveBalanceRecord:

    def test_lookup_by_category(self):
        balance = LeaveBalance(casual=10, sick=5, earned=7)
        assert balance["Casual"] == 10
        assert balance["sick"] == 5

    def test_unknown_category_raises(self):
        with pytest.raises(ValueError):
            LeaveBalance(casual=1, sick=1, earned=1)["maternity"]


class TestCreateEmployee:

    async def test_create_with_policy_defaults(self, db: AsyncSession):
        result = await EmployeeService.create_employee(db, _payload())

        assert result.employee_code == "VT000101"
        assert result.email == "asha.verma@example.com"
        assert result.role == "DEV"
        assert result.leave_balance.model_dump() == {"casual": 10, "sick": 5, "earned": 7}

    async def test_codes_are_sequential(self, db: AsyncSession):
        first = await EmployeeService.create_employee(db, _payload())
        second = await EmployeeService.create_employee(db, _payload(email="ravi@example.com"))
        assert (first.employee_code, second.employee_code) == ("VT000101", "VT000102")

    async def test_sequence_continues_after_manual_code(self, db: AsyncSession):
        await EmployeeService.create_employee(db, _payload(employee_code="VT000500"))
        result = await EmployeeService.create_employee(db, _payload(email="ravi@example.com"))
        assert result.employee_code == "VT000501"

    async def test_sequence_exhausted_is_a_clear_error(self, db: AsyncSession):
        await EmployeeService.create_employee(db, _payload(employee_code="VT999999"))

        with pytest.raises(SequenceExhaustedException) as exc_info:
            await EmployeeService.create_employee(db, _payload(email="ravi@example.com"))

        assert exc_info.value.status_code == 409
        assert "VT999999" in exc_info.value.detail

    async def test_last_code_in_sequence_is_issued(self, db: AsyncSession):
        await EmployeeService.create_employee(db, _payload(employee_code="VT999998"))
        result = await EmployeeService.create_employee(db, _payload(email="ravi@example.com"))
        assert result.employee_code == "VT999999"

    async def test_duplicate_email(self, db: AsyncSession):
        await EmployeeService.create_employee(db, _payload())
        with pytest.raises(DuplicateEntryException) as exc_info:
            await EmployeeService.create_employee(db, _payload(email="asha.verma@example.com"))
        assert exc_info.value.field == "email"

    async def test_duplicate_manual_code(self, db: AsyncSession):
        await EmployeeService.create_employee(db, _payload(employee_code="VT000200"))
        with pytest.raises(DuplicateEntryException):
            await EmployeeService.create_employee(
                db, _payload(employee_code="VT000200", email="other@example.com"),
            )

    async def test_validation_collects_everything(self, db: AsyncSession):
        with pytest.raises(ValidationException) as exc_info:
            await EmployeeService.create_employee(
                db, _payload(name=" ", email="x", current_ctc=1, employee_code="ABC"),
            )
        assert len(exc_info.value.violations) == 4


class TestLookupAndUpdate:

    async def test_lookup_by_email_and_code(self, db: AsyncSession, test_employee):
        by_email = await EmployeeService.lookup(db, email=test_employee.email.upper())
        by_code = await EmployeeService.lookup(db, employee_code=test_employee.employee_code)
        assert by_email.id == by_code.id == test_employee.id

    async def test_lookup_requires_a_key(self, db: AsyncSession):
        with pytest.raises(ValidationException):
            await EmployeeService.lookup(db)

    async def test_lookup_missing(self, db: AsyncSession):
        with pytest.raises(NotFoundException):
            await EmployeeService.lookup(db, employee_code="VT999999")

    async def test_update_profile(self, db: AsyncSession, test_employee):
        result = await EmployeeService.update_employee(
            db, test_employee.id,
            EmployeeUpdate(designation="Tech Lead", current_ctc="1500000", status="Left", leaving_date="2024-12-31"),
        )
        assert result.designation == "Tech Lead"
        assert result.current_ctc == 1_500_000
        assert result.status.value == "Left"

    async def test_update_rejects_bad_ctc(self, db: AsyncSession, test_employee):
        with pytest.raises(ValidationException):
            await EmployeeService.update_employee(db, test_employee.id, EmployeeUpdate(current_ctc=1))

    async def test_update_missing(self, db: AsyncSession):
        with pytest.raises(NotFoundException):
            await EmployeeService.update_employee(db, uuid.uuid4(), EmployeeUpdate(name="New Name"))


class TestEmployeeAPI:

    async def test_create_get_balance(self, client):
        resp = await client.post("/api/v1/employees", json={
            "name": "Asha Verma",
            "email": "asha@example.com",
            "joining_date": "2024-01-15",
            "current_ctc": 900000,
        })
        assert resp.status_code == 201
        employee_id = resp.json()["id"]

        resp = await client.get(f"/api/v1/employees/{employee_id}/balance")
        assert resp.status_code == 200
        assert resp.json() == {"casual": 10, "sick": 5, "earned": 7}

    async def test_validation_problem_detail(self, client):
        resp = await client.post("/api/v1/employees", json={"name": "A"})
        assert resp.status_code == 422
        body = resp.json()
        assert body["type"].endswith("/validation-error")
        assert "Invalid email format" in body["errors"]["violations"]

    async def test_health(self, client):
        resp = await client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

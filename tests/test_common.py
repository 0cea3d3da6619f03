"""Tests for common utilities — month helpers, pagination, audit trail,
and the problem-detail error envelope.
"""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrcore.common.audit import AuditTrail, create_audit_entry
from hrcore.common.constants import month_bounds, month_name, month_number
from hrcore.common.exceptions import NotFoundException
from hrcore.common.pagination import PaginationParams, paginate
from hrcore.employees.models import Employee


def _params(page: int = 1, page_size: int = 50, sort: str | None = None) -> PaginationParams:
    return PaginationParams(page=page, page_size=page_size, sort=sort)


# ═════════════════════════════════════════════════════════════════════
# MONTH HELPERS
# ═════════════════════════════════════════════════════════════════════


class TestMonths:

    @pytest.mark.parametrize("raw", ["November", "november", "Nov", 11, "11"])
    def test_month_number(self, raw):
        assert month_number(raw) == 11

    @pytest.mark.parametrize("raw", ["Smarch", 0, 13, ""])
    def test_month_number_rejects(self, raw):
        with pytest.raises(ValueError):
            month_number(raw)

    def test_month_name(self):
        assert month_name(2) == "February"

    def test_month_bounds_leap_year(self):
        assert month_bounds("February", 2024) == (date(2024, 2, 1), date(2024, 2, 29))
        assert month_bounds(2, 2023)[1] == date(2023, 2, 28)


# ═════════════════════════════════════════════════════════════════════
# PAGINATION
# ═════════════════════════════════════════════════════════════════════


class TestPagination:

    async def test_paginate_with_sort(self, db: AsyncSession, seed_employee):
        await seed_employee(name="Charlie")
        await seed_employee(name="Alice")
        await seed_employee(name="Bob")

        result = await paginate(db, select(Employee), _params(sort="name"), model=Employee)

        assert [e.name for e in result.data] == ["Alice", "Bob", "Charlie"]
        assert result.meta.total == 3

    async def test_paginate_descending(self, db: AsyncSession, seed_employee):
        await seed_employee(name="Alice")
        await seed_employee(name="Bob")

        result = await paginate(db, select(Employee), _params(sort="-name"), model=Employee)
        assert [e.name for e in result.data] == ["Bob", "Alice"]

    async def test_unknown_sort_ignored(self, db: AsyncSession, seed_employee):
        await seed_employee()
        result = await paginate(db, select(Employee), _params(sort="salary; drop"), model=Employee)
        assert result.meta.total == 1

    @pytest.mark.parametrize("sort", ["leave_balance", "-employee_number", "leaves", "metadata"])
    async def test_non_column_sort_ignored(self, db: AsyncSession, seed_employee, sort):
        await seed_employee()
        result = await paginate(db, select(Employee), _params(sort=sort), model=Employee)
        assert result.meta.total == 1

    async def test_non_column_sort_on_endpoint(self, client, db: AsyncSession, seed_employee):
        await seed_employee()
        await db.commit()

        resp = await client.get("/api/v1/employees", params={"sort": "leave_balance"})
        assert resp.status_code == 200
        assert resp.json()["meta"]["total"] == 1

    async def test_paginate_page_2(self, db: AsyncSession, seed_employee):
        for _ in range(5):
            await seed_employee()

        result = await paginate(db, select(Employee), _params(page=2, page_size=2))

        assert len(result.data) == 2
        assert result.meta.total_pages == 3
        assert result.meta.has_next is True
        assert result.meta.has_prev is True

    async def test_count_respects_filters(self, db: AsyncSession, seed_employee):
        await seed_employee(role="QA")
        await seed_employee(role="DEV")

        query = select(Employee).where(Employee.role == "QA")
        result = await paginate(db, query, _params())
        assert result.meta.total == 1

    async def test_paginate_empty_result(self, db: AsyncSession):
        result = await paginate(db, select(Employee), _params())
        assert result.data == []
        assert result.meta.total_pages == 0
        assert result.meta.has_next is False


# ═════════════════════════════════════════════════════════════════════
# AUDIT TRAIL
# ═════════════════════════════════════════════════════════════════════


class TestAuditTrail:

    async def test_entry_flushed_in_caller_transaction(self, db: AsyncSession, test_employee):
        await create_audit_entry(
            db,
            action="update",
            entity_type="employee",
            entity_id=test_employee.id,
            actor="hr-admin",
            old_values={"designation": "Engineer"},
            new_values={"designation": "Tech Lead"},
        )

        rows = (await db.execute(select(AuditTrail))).scalars().all()
        assert len(rows) == 1
        assert rows[0].actor == "hr-admin"
        assert rows[0].new_values == {"designation": "Tech Lead"}


# ═════════════════════════════════════════════════════════════════════
# ERROR ENVELOPE
# ═════════════════════════════════════════════════════════════════════


class TestProblemDetail:

    def test_not_found_exception(self):
        exc = NotFoundException("Leave", "abc")
        assert exc.status_code == 404
        assert exc.detail == "Leave with id 'abc' does not exist."

    async def test_not_found_response(self, client):
        resp = await client.get("/api/v1/employees/00000000-0000-0000-0000-000000000000")
        assert resp.status_code == 404
        assert resp.headers["content-type"].startswith("application/problem+json")
        body = resp.json()
        assert body["title"] == "Employee Not Found"
        assert body["instance"] == "/api/v1/employees/00000000-0000-0000-0000-000000000000"

    async def test_request_validation_response(self, client):
        resp = await client.get("/api/v1/employees/not-a-uuid")
        assert resp.status_code == 422
        body = resp.json()
        assert body["type"].endswith("/validation-error")
        assert "employee_id" in body["errors"]

"""Payroll ORM model — one computed salary breakup per employee per month.

SQLAlchemy 2.0 async-compatible models.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hrcore.common.constants import PayrollStatus
from hrcore.database import Base, enum_column

if TYPE_CHECKING:
    from hrcore.employees.models import Employee


class Payroll(Base):
    """Salary breakup for one (employee, month, year). Amounts are whole units;
    only ``status`` and ``payslip_url`` change after creation."""

    __tablename__ = "payrolls"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "month", "year", name="uq_payroll_employee_period"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, primary_key=True, default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("employees.id"), nullable=False,
    )
    # Month name ("November"), not a number.
    month: Mapped[str] = mapped_column(sa.String(9), nullable=False)
    year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    formatted_employee_id: Mapped[str] = mapped_column(sa.String(40), nullable=False)

    # ── Inputs ──────────────────────────────────────────────────────
    ctc: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    days_in_month: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    working_days: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    absent_days: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    leave_days: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)

    # ── Breakup ─────────────────────────────────────────────────────
    monthly_basic: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    basic: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    hra: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    da: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    special_allowance: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    employer_pf: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    tds: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    daily_rate: Mapped[Decimal] = mapped_column(sa.Numeric(14, 4), nullable=False)
    absence_deductions: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    total_earnings: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    total_deductions: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    gross_salary: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    net_salary: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)

    status: Mapped[PayrollStatus] = mapped_column(
        enum_column(PayrollStatus, "payroll_status"),
        nullable=False,
        default=PayrollStatus.generated,
    )
    payslip_url: Mapped[Optional[str]] = mapped_column(sa.String(500))
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    employee: Mapped["Employee"] = relationship(back_populates="payrolls")

    def __repr__(self) -> str:
        return f"<Payroll {self.formatted_employee_id} {self.month} {self.year} net={self.net_salary}>"

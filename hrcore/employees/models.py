"""Employee ORM model and the fixed-variant leave balance record.

SQLAlchemy 2.0 async-compatible models with Mapped[] annotations.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.orm import InstrumentedAttribute, Mapped, mapped_column, relationship

from hrcore.common.constants import EmploymentStatus, LeaveType
from hrcore.config import settings
from hrcore.database import Base, enum_column

if TYPE_CHECKING:
    from hrcore.leave.models import Leave
    from hrcore.payroll.models import Payroll


@dataclass(frozen=True)
class LeaveBalance:
    """Remaining leave days per category.

    One field per :class:`LeaveType`; an unknown category is a ``ValueError``
    at lookup time instead of a silent zero.
    """

    casual: int
    sick: int
    earned: int

    def __getitem__(self, leave_type: LeaveType | str) -> int:
        return getattr(self, LeaveType.parse(leave_type).balance_key)

    @classmethod
    def policy_default(cls) -> "LeaveBalance":
        return cls(
            casual=settings.LEAVE_DEFAULT_CASUAL,
            sick=settings.LEAVE_DEFAULT_SICK,
            earned=settings.LEAVE_DEFAULT_EARNED,
        )

    def as_dict(self) -> dict[str, int]:
        return {"casual": self.casual, "sick": self.sick, "earned": self.earned}


class Employee(Base):
    """Employee record — owner of the leave balance."""

    __tablename__ = "employees"
    __table_args__ = (
        sa.CheckConstraint("casual_leave >= 0", name="ck_employee_casual_non_negative"),
        sa.CheckConstraint("sick_leave >= 0", name="ck_employee_sick_non_negative"),
        sa.CheckConstraint("earned_leave >= 0", name="ck_employee_earned_non_negative"),
    )

    # ── Identifiers ─────────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, primary_key=True, default=uuid.uuid4,
    )
    employee_code: Mapped[str] = mapped_column(
        sa.String(8), unique=True, nullable=False,
    )

    # ── Profile ─────────────────────────────────────────────────────
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(sa.String(20))
    designation: Mapped[Optional[str]] = mapped_column(sa.String(150))
    department: Mapped[Optional[str]] = mapped_column(sa.String(150))
    role: Mapped[str] = mapped_column(
        sa.String(20), nullable=False, default=lambda: settings.PAYROLL_DEFAULT_ROLE,
    )

    # ── Employment lifecycle ────────────────────────────────────────
    joining_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    leaving_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    current_ctc: Mapped[int] = mapped_column(sa.BigInteger, nullable=False)
    status: Mapped[EmploymentStatus] = mapped_column(
        enum_column(EmploymentStatus, "employment_status"),
        nullable=False,
        default=EmploymentStatus.active,
    )

    # ── Leave balance (written only by hrcore.leave.ledger) ─────────
    casual_leave: Mapped[int] = mapped_column(
        sa.Integer, nullable=False, default=lambda: settings.LEAVE_DEFAULT_CASUAL,
    )
    sick_leave: Mapped[int] = mapped_column(
        sa.Integer, nullable=False, default=lambda: settings.LEAVE_DEFAULT_SICK,
    )
    earned_leave: Mapped[int] = mapped_column(
        sa.Integer, nullable=False, default=lambda: settings.LEAVE_DEFAULT_EARNED,
    )

    # ── Timestamps ──────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ───────────────────────────────────────────────
    leaves: Mapped[list["Leave"]] = relationship(back_populates="employee")
    payrolls: Mapped[list["Payroll"]] = relationship(back_populates="employee")

    # ── Helpers ─────────────────────────────────────────────────────

    @classmethod
    def balance_column(cls, leave_type: LeaveType | str) -> InstrumentedAttribute:
        """Column holding the balance for *leave_type* (``Casual`` → ``casual_leave``)."""
        return getattr(cls, f"{LeaveType.parse(leave_type).balance_key}_leave")

    @property
    def leave_balance(self) -> LeaveBalance:
        return LeaveBalance(
            casual=self.casual_leave,
            sick=self.sick_leave,
            earned=self.earned_leave,
        )

    @property
    def employee_number(self) -> int:
        """Numeric part of the business identifier (``VT000108`` → 108)."""
        digits = "".join(ch for ch in self.employee_code if ch.isdigit())
        return int(digits) if digits else 0

    @property
    def is_active(self) -> bool:
        return self.status == EmploymentStatus.active

    def __repr__(self) -> str:
        return f"<Employee {self.employee_code} {self.name!r}>"

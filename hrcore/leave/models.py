"""Leave ORM model — one row per leave request."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hrcore.common.constants import LeaveStatus, LeaveType
from hrcore.database import Base, enum_column

if TYPE_CHECKING:
    from hrcore.employees.models import Employee


class Leave(Base):
    __tablename__ = "leaves"
    __table_args__ = (
        sa.CheckConstraint("from_date <= to_date", name="ck_leave_date_order"),
        sa.CheckConstraint("days >= 1", name="ck_leave_days_positive"),
        sa.CheckConstraint("debited_days >= 0", name="ck_leave_debited_non_negative"),
        sa.Index("ix_leaves_employee_status", "employee_id", "status"),
        sa.Index("ix_leaves_dates", "from_date", "to_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, primary_key=True, default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("employees.id"), nullable=False,
    )
    leave_type: Mapped[LeaveType] = mapped_column(
        enum_column(LeaveType, "leave_type"), nullable=False,
    )
    leave_sub_type: Mapped[str] = mapped_column(
        sa.String(50), nullable=False, default="Full Day",
    )
    from_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    to_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    days: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    # Days actually taken off the balance by approvals and not yet credited
    # back; smaller than ``days`` after a clamped debit.
    debited_days: Mapped[int] = mapped_column(
        sa.Integer, nullable=False, default=0, server_default="0",
    )
    reason: Mapped[Optional[str]] = mapped_column(sa.Text)
    status: Mapped[LeaveStatus] = mapped_column(
        enum_column(LeaveStatus, "leave_status"),
        nullable=False,
        default=LeaveStatus.pending,
    )
    applied_on: Mapped[date] = mapped_column(
        sa.Date, nullable=False, default=lambda: datetime.now(timezone.utc).date(),
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    employee: Mapped["Employee"] = relationship(back_populates="leaves")

    def __repr__(self) -> str:
        return (
            f"<Leave {self.leave_type.value} {self.from_date}..{self.to_date} "
            f"{self.status.value}>"
        )

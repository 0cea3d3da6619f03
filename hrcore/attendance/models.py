"""Attendance ORM model — one row per employee per calendar day."""

from __future__ import annotations

import datetime as dt
import uuid
from datetime import datetime, time, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hrcore.common.constants import AttendanceStatus
from hrcore.database import Base, enum_column


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        sa.UniqueConstraint("employee_code", "date", name="uq_attendance_emp_date"),
        sa.Index("ix_attendance_date", "date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, primary_key=True, default=uuid.uuid4,
    )
    # Business identifier (VT000101), not the employee UUID.
    employee_code: Mapped[str] = mapped_column(
        sa.String(8), sa.ForeignKey("employees.employee_code"), nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[AttendanceStatus] = mapped_column(
        enum_column(AttendanceStatus, "attendance_status"), nullable=False,
    )
    in_time: Mapped[Optional[time]] = mapped_column(sa.Time)
    out_time: Mapped[Optional[time]] = mapped_column(sa.Time)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<AttendanceRecord {self.employee_code} {self.date} {self.status.value}>"

"""
Schedule, attendance and leave ORM models.

Schedules and attendance are unique per (staff_id, day).  Days are stored as
DATE columns so that inclusive range queries compare calendar days, never
instants.
"""

from datetime import date, datetime

from sqlalchemy import Boolean, Date, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hr_kernel.db.base import TrackedBase


class ScheduleModel(TrackedBase):
    """ORM model for ``ScheduleEntry``."""

    __tablename__ = "schedules"

    staff_id: Mapped[str] = mapped_column(String(64), nullable=False)
    day: Mapped[date] = mapped_column(Date, nullable=False)
    kind: Mapped[str] = mapped_column(String(10), nullable=False)
    start_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    notes: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    includes_break: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    __table_args__ = (
        UniqueConstraint("staff_id", "day", name="uq_schedule_staff_day"),
    )

    def to_dto(self):
        from hr_kernel.domain.records import ScheduleEntry, ScheduleKind
        return ScheduleEntry(
            staff_id=self.staff_id,
            day=self.day,
            kind=ScheduleKind(self.kind),
            start_time=self.start_time,
            end_time=self.end_time,
            notes=self.notes or "",
            includes_break=self.includes_break,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: str = "system") -> "ScheduleModel":
        return cls(
            staff_id=dto.staff_id,
            day=dto.day,
            kind=dto.kind.value,
            start_time=dto.start_time,
            end_time=dto.end_time,
            notes=dto.notes,
            includes_break=dto.includes_break,
            created_by_id=created_by_id,
        )


class AttendanceModel(TrackedBase):
    """ORM model for ``AttendanceRecord``."""

    __tablename__ = "attendance"

    staff_id: Mapped[str] = mapped_column(String(64), nullable=False)
    day: Mapped[date] = mapped_column(Date, nullable=False)
    check_in: Mapped[datetime | None] = mapped_column(nullable=True)
    check_out: Mapped[datetime | None] = mapped_column(nullable=True)
    break_start: Mapped[datetime | None] = mapped_column(nullable=True)
    break_end: Mapped[datetime | None] = mapped_column(nullable=True)
    overtime_status: Mapped[str] = mapped_column(String(20), nullable=False, default="none")
    overtime_approved_minutes: Mapped[int] = mapped_column(nullable=False, default=0)
    check_out_note: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        UniqueConstraint("staff_id", "day", name="uq_attendance_staff_day"),
        Index("idx_attendance_open_shift", "check_out", "day"),
    )

    def to_dto(self):
        from hr_kernel.domain.records import AttendanceRecord, OvertimeStatus
        return AttendanceRecord(
            staff_id=self.staff_id,
            day=self.day,
            check_in=self.check_in,
            check_out=self.check_out,
            break_start=self.break_start,
            break_end=self.break_end,
            overtime_status=OvertimeStatus(self.overtime_status),
            overtime_approved_minutes=self.overtime_approved_minutes,
            check_out_note=self.check_out_note,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: str = "system") -> "AttendanceModel":
        return cls(
            staff_id=dto.staff_id,
            day=dto.day,
            check_in=dto.check_in,
            check_out=dto.check_out,
            break_start=dto.break_start,
            break_end=dto.break_end,
            overtime_status=dto.overtime_status.value,
            overtime_approved_minutes=dto.overtime_approved_minutes,
            check_out_note=dto.check_out_note,
            created_by_id=created_by_id,
        )


class LeaveRequestModel(TrackedBase):
    """ORM model for ``LeaveRequest``."""

    __tablename__ = "leave_requests"

    staff_id: Mapped[str] = mapped_column(String(64), nullable=False)
    leave_type: Mapped[str] = mapped_column(String(40), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_days: Mapped[int] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    mc_received: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_leave_staff_status", "staff_id", "status"),
        Index("idx_leave_span", "start_date", "end_date"),
    )

    def to_dto(self):
        from hr_kernel.domain.records import LeaveRequest, LeaveStatus, LeaveType
        return LeaveRequest(
            id=self.id,
            staff_id=self.staff_id,
            leave_type=LeaveType.parse(self.leave_type),
            start_date=self.start_date,
            end_date=self.end_date,
            total_days=self.total_days,
            status=LeaveStatus(self.status),
            mc_received=self.mc_received,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: str = "system") -> "LeaveRequestModel":
        return cls(
            id=dto.id,
            staff_id=dto.staff_id,
            leave_type=dto.leave_type.value,
            start_date=dto.start_date,
            end_date=dto.end_date,
            total_days=dto.total_days,
            status=dto.status.value,
            mc_received=dto.mc_received,
            created_by_id=created_by_id,
        )

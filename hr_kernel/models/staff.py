"""
Staff ORM models.

``StaffModel`` owns the ordered job history (``JobRecordModel.sequence``
preserves insertion order for the effective-date tie-break) and the
``bonus_streak`` counter, which only the payroll finalize and revert paths
write.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_kernel.db.base import TrackedBase


class StaffModel(TrackedBase):
    """ORM model for ``StaffProfile``."""

    __tablename__ = "staff_profiles"

    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    bonus_streak: Mapped[int] = mapped_column(default=0, nullable=False)
    is_attendance_bonus_eligible: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    is_sso_registered: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    jobs: Mapped[list["JobRecordModel"]] = relationship(
        back_populates="staff",
        order_by="JobRecordModel.sequence",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_staff_end_date", "end_date"),
    )

    def to_dto(self):
        from hr_kernel.domain.records import StaffProfile
        return StaffProfile(
            id=self.id,
            display_name=self.display_name,
            start_date=self.start_date,
            end_date=self.end_date,
            job_history=tuple(job.to_dto() for job in self.jobs),
            bonus_streak=self.bonus_streak,
            is_attendance_bonus_eligible=self.is_attendance_bonus_eligible,
            is_sso_registered=self.is_sso_registered,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: str = "system") -> "StaffModel":
        return cls(
            id=dto.id,
            display_name=dto.display_name,
            start_date=dto.start_date,
            end_date=dto.end_date,
            bonus_streak=dto.bonus_streak,
            is_attendance_bonus_eligible=dto.is_attendance_bonus_eligible,
            is_sso_registered=dto.is_sso_registered,
            created_by_id=created_by_id,
            jobs=[
                JobRecordModel.from_dto(job, sequence=i, created_by_id=created_by_id)
                for i, job in enumerate(dto.job_history)
            ],
        )

    def __repr__(self) -> str:
        return f"<StaffModel {self.id}: {self.display_name} streak={self.bonus_streak}>"


class JobRecordModel(TrackedBase):
    """ORM model for ``JobRecord``; ``sequence`` is the insertion order."""

    __tablename__ = "staff_job_records"

    staff_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("staff_profiles.id"), nullable=False
    )
    sequence: Mapped[int] = mapped_column(nullable=False)
    position: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    pay_type: Mapped[str] = mapped_column(String(20), nullable=False)
    rate: Mapped[Decimal] = mapped_column(nullable=False)
    standard_day_hours: Mapped[Decimal | None] = mapped_column(nullable=True)

    staff: Mapped[StaffModel] = relationship(back_populates="jobs")

    __table_args__ = (
        UniqueConstraint("staff_id", "sequence", name="uq_job_record_sequence"),
    )

    def to_dto(self):
        from hr_kernel.domain.records import JobRecord, PayType
        return JobRecord(
            position=self.position,
            department=self.department,
            effective_from=self.effective_from,
            pay_type=PayType.parse(self.pay_type),
            rate=self.rate,
            standard_day_hours=self.standard_day_hours,
        )

    @classmethod
    def from_dto(cls, dto, sequence: int, created_by_id: str = "system") -> "JobRecordModel":
        return cls(
            sequence=sequence,
            position=dto.position,
            department=dto.department,
            effective_from=dto.effective_from,
            pay_type=dto.pay_type.value,
            rate=dto.rate,
            standard_day_hours=dto.standard_day_hours,
            created_by_id=created_by_id,
        )

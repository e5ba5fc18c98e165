"""
Company configuration ORM model (singleton row ``id = "default"``).

Public holidays and bonus rules are stored as JSON so the admin screen can
edit them as one document; amounts inside JSON are decimal strings.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import JSON
from sqlalchemy.orm import Mapped, mapped_column

from hr_kernel.db.base import TrackedBase

COMPANY_CONFIG_ID = "default"


class CompanyConfigModel(TrackedBase):
    """ORM model for ``CompanyConfig``."""

    __tablename__ = "company_config"

    public_holidays: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    attendance_bonus: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    sso_rate: Mapped[Decimal] = mapped_column(nullable=False)
    sso_wage_floor: Mapped[Decimal] = mapped_column(nullable=False)
    sso_wage_cap: Mapped[Decimal] = mapped_column(nullable=False)
    advance_eligibility_percentage: Mapped[Decimal] = mapped_column(nullable=False)
    annual_leave_days: Mapped[int] = mapped_column(nullable=False)
    sick_day_quota: Mapped[int] = mapped_column(nullable=False)
    public_holiday_credit_cap: Mapped[int] = mapped_column(nullable=False)
    overtime_rate_multiplier: Mapped[Decimal] = mapped_column(nullable=False)

    def to_dto(self):
        from hr_kernel.domain.records import AttendanceBonusRules, CompanyConfig

        rules = None
        if self.attendance_bonus:
            raw = self.attendance_bonus
            rules = AttendanceBonusRules(
                allowed_lates=int(raw.get("allowed_lates", 3)),
                max_late_minutes_allowed=int(raw.get("max_late_minutes_allowed", 30)),
                allowed_absences=int(raw.get("allowed_absences", 0)),
                month1=Decimal(str(raw.get("month1", "400"))),
                month2=Decimal(str(raw.get("month2", "800"))),
                month3=Decimal(str(raw.get("month3", "1200"))),
            )
        return CompanyConfig(
            public_holidays=frozenset(date.fromisoformat(d) for d in self.public_holidays or ()),
            attendance_bonus=rules,
            sso_rate=self.sso_rate,
            sso_wage_floor=self.sso_wage_floor,
            sso_wage_cap=self.sso_wage_cap,
            advance_eligibility_percentage=self.advance_eligibility_percentage,
            annual_leave_days=self.annual_leave_days,
            sick_day_quota=self.sick_day_quota,
            public_holiday_credit_cap=self.public_holiday_credit_cap,
            overtime_rate_multiplier=self.overtime_rate_multiplier,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: str = "system") -> "CompanyConfigModel":
        rules = dto.attendance_bonus
        return cls(
            id=COMPANY_CONFIG_ID,
            public_holidays=sorted(d.isoformat() for d in dto.public_holidays),
            attendance_bonus=None if rules is None else {
                "allowed_lates": rules.allowed_lates,
                "max_late_minutes_allowed": rules.max_late_minutes_allowed,
                "allowed_absences": rules.allowed_absences,
                "month1": str(rules.month1),
                "month2": str(rules.month2),
                "month3": str(rules.month3),
            },
            sso_rate=dto.sso_rate,
            sso_wage_floor=dto.sso_wage_floor,
            sso_wage_cap=dto.sso_wage_cap,
            advance_eligibility_percentage=dto.advance_eligibility_percentage,
            annual_leave_days=dto.annual_leave_days,
            sick_day_quota=dto.sick_day_quota,
            public_holiday_credit_cap=dto.public_holiday_credit_cap,
            overtime_rate_multiplier=dto.overtime_rate_multiplier,
            created_by_id=created_by_id,
        )

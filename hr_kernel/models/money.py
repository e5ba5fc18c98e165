"""
Advance, loan and adjustment ORM models.

The engine never creates these.  Finalize mutates ``LoanModel.remaining_balance``
/ ``is_active`` and ``SalaryAdvanceModel.status``; revert restores them from
the settlement recorded on the payslip.
"""

from decimal import Decimal

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from hr_kernel.db.base import TrackedBase


class SalaryAdvanceModel(TrackedBase):
    """ORM model for ``SalaryAdvance``."""

    __tablename__ = "salary_advances"

    staff_id: Mapped[str] = mapped_column(String(64), nullable=False)
    pay_period_year: Mapped[int] = mapped_column(nullable=False)
    pay_period_month: Mapped[int] = mapped_column(nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    __table_args__ = (
        Index("idx_advance_period", "pay_period_year", "pay_period_month", "status"),
    )

    def to_dto(self):
        from hr_kernel.domain.records import AdvanceStatus, SalaryAdvance
        return SalaryAdvance(
            id=self.id,
            staff_id=self.staff_id,
            pay_period_year=self.pay_period_year,
            pay_period_month=self.pay_period_month,
            amount=self.amount,
            status=AdvanceStatus(self.status),
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: str = "system") -> "SalaryAdvanceModel":
        return cls(
            id=dto.id,
            staff_id=dto.staff_id,
            pay_period_year=dto.pay_period_year,
            pay_period_month=dto.pay_period_month,
            amount=dto.amount,
            status=dto.status.value,
            created_by_id=created_by_id,
        )


class LoanModel(TrackedBase):
    """ORM model for ``Loan``."""

    __tablename__ = "loans"

    staff_id: Mapped[str] = mapped_column(String(64), nullable=False)
    monthly_repayment: Mapped[Decimal] = mapped_column(nullable=False)
    remaining_balance: Mapped[Decimal] = mapped_column(nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("idx_loan_staff_active", "staff_id", "is_active"),
    )

    def to_dto(self):
        from hr_kernel.domain.records import Loan
        return Loan(
            id=self.id,
            staff_id=self.staff_id,
            monthly_repayment=self.monthly_repayment,
            remaining_balance=self.remaining_balance,
            is_active=self.is_active,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: str = "system") -> "LoanModel":
        return cls(
            id=dto.id,
            staff_id=dto.staff_id,
            monthly_repayment=dto.monthly_repayment,
            remaining_balance=dto.remaining_balance,
            is_active=dto.is_active,
            created_by_id=created_by_id,
        )


class MonthlyAdjustmentModel(TrackedBase):
    """ORM model for ``MonthlyAdjustment``."""

    __tablename__ = "monthly_adjustments"

    staff_id: Mapped[str] = mapped_column(String(64), nullable=False)
    pay_period_year: Mapped[int] = mapped_column(nullable=False)
    pay_period_month: Mapped[int] = mapped_column(nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    __table_args__ = (
        Index("idx_adjustment_period", "pay_period_year", "pay_period_month"),
    )

    def to_dto(self):
        from hr_kernel.domain.records import AdjustmentKind, MonthlyAdjustment
        return MonthlyAdjustment(
            id=self.id,
            staff_id=self.staff_id,
            pay_period_year=self.pay_period_year,
            pay_period_month=self.pay_period_month,
            kind=AdjustmentKind(self.kind),
            amount=self.amount,
            description=self.description or "",
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: str = "system") -> "MonthlyAdjustmentModel":
        return cls(
            id=dto.id,
            staff_id=dto.staff_id,
            pay_period_year=dto.pay_period_year,
            pay_period_month=dto.pay_period_month,
            kind=dto.kind.value,
            amount=dto.amount,
            description=dto.description,
            created_by_id=created_by_id,
        )

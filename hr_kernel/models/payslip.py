"""
Payslip ORM model.

Keyed by the natural id ``{staff_id}_{year}_{month}`` and unique per
(staff_id, year, month).  Besides the earnings and deductions breakdowns it
records everything revert needs to be an exact inverse: the streak before
finalize, the loan repayments applied and the advances marked deducted.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hr_kernel.db.base import TrackedBase


class PayslipModel(TrackedBase):
    """ORM model for ``PayslipRecord``."""

    __tablename__ = "payslips"

    staff_id: Mapped[str] = mapped_column(String(64), nullable=False)
    pay_period_year: Mapped[int] = mapped_column(nullable=False)
    pay_period_month: Mapped[int] = mapped_column(nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(nullable=False)
    previous_streak: Mapped[int | None] = mapped_column(nullable=True)
    new_streak: Mapped[int] = mapped_column(nullable=False)
    earnings: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    deductions: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    loan_repayments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    advance_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    finalized_at: Mapped[datetime | None] = mapped_column(nullable=True)
    finalized_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "staff_id", "pay_period_year", "pay_period_month",
            name="uq_payslip_staff_period",
        ),
        Index("idx_payslip_period", "pay_period_year", "pay_period_month"),
    )

    def to_dto(self):
        from hr_kernel.domain.records import LoanRepayment, PayslipRecord
        return PayslipRecord(
            id=self.id,
            staff_id=self.staff_id,
            pay_period_year=self.pay_period_year,
            pay_period_month=self.pay_period_month,
            net_pay=self.net_pay,
            new_streak=self.new_streak,
            previous_streak=self.previous_streak,
            earnings=dict(self.earnings or {}),
            deductions=dict(self.deductions or {}),
            loan_repayments=tuple(
                LoanRepayment(
                    loan_id=r["loan_id"],
                    amount=Decimal(str(r["amount"])),
                    closed_loan=bool(r.get("closed_loan", False)),
                )
                for r in self.loan_repayments or ()
            ),
            advance_ids=tuple(self.advance_ids or ()),
            finalized_at=self.finalized_at,
            finalized_by=self.finalized_by,
        )

    def __repr__(self) -> str:
        return f"<PayslipModel {self.id}: net={self.net_pay} streak={self.new_streak}>"

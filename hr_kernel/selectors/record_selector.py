"""
Module: hr_kernel.selectors.record_selector
Responsibility: The engine's view of the record store.  Range queries by
    staff id and inclusive calendar day, equality queries by status and pay
    period, all returning frozen DTOs.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Read-only.
    - Date ranges are inclusive on both ends.
    - Results are ordered deterministically (by day, then id).

Failure modes:
    - Returns None or an empty list when nothing matches; SQLAlchemyError
      propagates to the caller, which decides whether the input is optional.
"""

from datetime import date

from sqlalchemy import and_, or_, select

from hr_kernel.domain.records import (
    AdvanceStatus,
    AttendanceRecord,
    CompanyConfig,
    LeaveRequest,
    LeaveStatus,
    Loan,
    MonthlyAdjustment,
    PayslipRecord,
    SalaryAdvance,
    ScheduleEntry,
    StaffProfile,
)
from hr_kernel.models import (
    AttendanceModel,
    CompanyConfigModel,
    LeaveRequestModel,
    LoanModel,
    MonthlyAdjustmentModel,
    PayslipModel,
    SalaryAdvanceModel,
    ScheduleModel,
    StaffModel,
)
from hr_kernel.models.company import COMPANY_CONFIG_ID
from hr_kernel.selectors.base import BaseSelector


class RecordSelector(BaseSelector[StaffModel]):
    """Selector for staff, daily records, money records and payslips."""

    # -- staff and config ----------------------------------------------------

    def get_staff(self, staff_id: str) -> StaffProfile | None:
        model = self.session.get(StaffModel, staff_id)
        return model.to_dto() if model is not None else None

    def list_staff(self, staff_ids: list[str] | None = None) -> list[StaffProfile]:
        stmt = select(StaffModel).order_by(StaffModel.id)
        if staff_ids is not None:
            stmt = stmt.where(StaffModel.id.in_(staff_ids))
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def get_company_config(self) -> CompanyConfig | None:
        model = self.session.get(CompanyConfigModel, COMPANY_CONFIG_ID)
        return model.to_dto() if model is not None else None

    # -- daily records -------------------------------------------------------

    def schedules_for(self, staff_id: str, start: date, end: date) -> list[ScheduleEntry]:
        stmt = (
            select(ScheduleModel)
            .where(
                ScheduleModel.staff_id == staff_id,
                ScheduleModel.day >= start,
                ScheduleModel.day <= end,
            )
            .order_by(ScheduleModel.day)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def attendance_for(self, staff_id: str, start: date, end: date) -> list[AttendanceRecord]:
        stmt = (
            select(AttendanceModel)
            .where(
                AttendanceModel.staff_id == staff_id,
                AttendanceModel.day >= start,
                AttendanceModel.day <= end,
            )
            .order_by(AttendanceModel.day)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def open_shifts_before(self, day: date) -> list[AttendanceRecord]:
        """Attendance with a check-in but no checkout, dated before ``day``."""
        stmt = (
            select(AttendanceModel)
            .where(
                AttendanceModel.check_in.is_not(None),
                AttendanceModel.check_out.is_(None),
                AttendanceModel.day < day,
            )
            .order_by(AttendanceModel.day, AttendanceModel.staff_id)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def approved_leave_for(self, staff_id: str, start: date, end: date) -> list[LeaveRequest]:
        """Approved leave requests overlapping [start, end]."""
        stmt = (
            select(LeaveRequestModel)
            .where(
                LeaveRequestModel.staff_id == staff_id,
                LeaveRequestModel.status == LeaveStatus.APPROVED.value,
                LeaveRequestModel.start_date <= end,
                LeaveRequestModel.end_date >= start,
            )
            .order_by(LeaveRequestModel.start_date, LeaveRequestModel.id)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    # -- money records -------------------------------------------------------

    def advances_for(
        self,
        staff_id: str,
        year: int,
        month: int,
        statuses: tuple[AdvanceStatus, ...] = (AdvanceStatus.APPROVED,),
    ) -> list[SalaryAdvance]:
        stmt = (
            select(SalaryAdvanceModel)
            .where(
                SalaryAdvanceModel.staff_id == staff_id,
                SalaryAdvanceModel.pay_period_year == year,
                SalaryAdvanceModel.pay_period_month == month,
                SalaryAdvanceModel.status.in_([s.value for s in statuses]),
            )
            .order_by(SalaryAdvanceModel.id)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def active_loans_for(self, staff_id: str) -> list[Loan]:
        stmt = (
            select(LoanModel)
            .where(LoanModel.staff_id == staff_id, LoanModel.is_active.is_(True))
            .order_by(LoanModel.id)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def adjustments_for(self, staff_id: str, year: int, month: int) -> list[MonthlyAdjustment]:
        stmt = (
            select(MonthlyAdjustmentModel)
            .where(
                MonthlyAdjustmentModel.staff_id == staff_id,
                MonthlyAdjustmentModel.pay_period_year == year,
                MonthlyAdjustmentModel.pay_period_month == month,
            )
            .order_by(MonthlyAdjustmentModel.id)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    # -- payslips ------------------------------------------------------------

    def get_payslip(self, payslip_id: str) -> PayslipRecord | None:
        model = self.session.get(PayslipModel, payslip_id)
        return model.to_dto() if model is not None else None

    def payslips_for_period(self, year: int, month: int) -> list[PayslipRecord]:
        stmt = (
            select(PayslipModel)
            .where(
                PayslipModel.pay_period_year == year,
                PayslipModel.pay_period_month == month,
            )
            .order_by(PayslipModel.staff_id)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def finalized_staff_ids(self, year: int, month: int) -> set[str]:
        stmt = select(PayslipModel.staff_id).where(
            PayslipModel.pay_period_year == year,
            PayslipModel.pay_period_month == month,
        )
        return set(self.session.scalars(stmt))

    def latest_payslip_for(self, staff_id: str) -> PayslipRecord | None:
        stmt = (
            select(PayslipModel)
            .where(PayslipModel.staff_id == staff_id)
            .order_by(PayslipModel.pay_period_year.desc(), PayslipModel.pay_period_month.desc())
            .limit(1)
        )
        model = self.session.scalars(stmt).first()
        return model.to_dto() if model is not None else None

    def later_payslip_for(self, staff_id: str, year: int, month: int) -> PayslipRecord | None:
        """The earliest payslip for the staff member after (year, month)."""
        stmt = (
            select(PayslipModel)
            .where(
                PayslipModel.staff_id == staff_id,
                or_(
                    PayslipModel.pay_period_year > year,
                    and_(
                        PayslipModel.pay_period_year == year,
                        PayslipModel.pay_period_month > month,
                    ),
                ),
            )
            .order_by(PayslipModel.pay_period_year, PayslipModel.pay_period_month)
            .limit(1)
        )
        model = self.session.scalars(stmt).first()
        return model.to_dto() if model is not None else None

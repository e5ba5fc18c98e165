"""
Builders for record DTOs and store seeding shared by the test suite.

All wall-clock values are built in the business timezone (Asia/Bangkok)
so tests read the way a roster does: ``at(day, "09:05")``.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal
from itertools import count
from zoneinfo import ZoneInfo

from hr_kernel.domain.records import (
    AdjustmentKind,
    AdvanceStatus,
    AttendanceBonusRules,
    AttendanceRecord,
    CompanyConfig,
    JobRecord,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
    Loan,
    MonthlyAdjustment,
    OvertimeStatus,
    PayType,
    SalaryAdvance,
    ScheduleEntry,
    ScheduleKind,
    StaffProfile,
)
from hr_kernel.models import (
    AttendanceModel,
    CompanyConfigModel,
    LeaveRequestModel,
    LoanModel,
    MonthlyAdjustmentModel,
    SalaryAdvanceModel,
    ScheduleModel,
    StaffModel,
)

BANGKOK = ZoneInfo("Asia/Bangkok")
_ids = count(1)


def at(day: date, hhmm: str) -> datetime:
    hour, minute = (int(p) for p in hhmm.split(":"))
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=BANGKOK)


def salaried_job(
    rate: str = "30000",
    effective_from: date = date(2024, 1, 1),
    position: str = "Barista",
    department: str = "Front of house",
) -> JobRecord:
    return JobRecord(
        position=position,
        department=department,
        effective_from=effective_from,
        pay_type=PayType.SALARIED,
        rate=Decimal(rate),
    )


def hourly_job(rate: str = "100", effective_from: date = date(2024, 1, 1)) -> JobRecord:
    return JobRecord(
        position="Part-time",
        department="Kitchen",
        effective_from=effective_from,
        pay_type=PayType.HOURLY,
        rate=Decimal(rate),
    )


def make_staff(
    staff_id: str = "S1",
    job: JobRecord | None = None,
    start_date: date | None = date(2024, 1, 1),
    end_date: date | None = None,
    bonus_streak: int = 0,
    **kwargs,
) -> StaffProfile:
    return StaffProfile(
        id=staff_id,
        display_name=kwargs.pop("display_name", f"Staff {staff_id}"),
        start_date=start_date,
        end_date=end_date,
        job_history=(job or salaried_job(),),
        bonus_streak=bonus_streak,
        **kwargs,
    )


def work_day(
    staff_id: str,
    day: date,
    start: str = "09:00",
    end: str = "18:00",
    includes_break: bool | None = None,
) -> ScheduleEntry:
    return ScheduleEntry(
        staff_id=staff_id,
        day=day,
        kind=ScheduleKind.WORK,
        start_time=start,
        end_time=end,
        includes_break=includes_break,
    )


def off_day(staff_id: str, day: date) -> ScheduleEntry:
    return ScheduleEntry(staff_id=staff_id, day=day, kind=ScheduleKind.OFF)


def attended(
    staff_id: str,
    day: date,
    check_in: str = "09:00",
    check_out: str | None = "18:00",
    overtime_minutes: int = 0,
    break_start: str | None = None,
    break_end: str | None = None,
) -> AttendanceRecord:
    return AttendanceRecord(
        staff_id=staff_id,
        day=day,
        check_in=at(day, check_in),
        check_out=at(day, check_out) if check_out else None,
        break_start=at(day, break_start) if break_start else None,
        break_end=at(day, break_end) if break_end else None,
        overtime_status=OvertimeStatus.APPROVED if overtime_minutes else OvertimeStatus.NONE,
        overtime_approved_minutes=overtime_minutes,
    )


def leave(
    staff_id: str,
    leave_type: LeaveType,
    start: date,
    end: date,
    mc_received: bool = False,
    status: LeaveStatus = LeaveStatus.APPROVED,
) -> LeaveRequest:
    return LeaveRequest(
        id=f"L{next(_ids)}",
        staff_id=staff_id,
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        total_days=(end - start).days + 1,
        status=status,
        mc_received=mc_received,
    )


def company_config(
    holidays: tuple[date, ...] = (),
    rules: AttendanceBonusRules | None = AttendanceBonusRules(),
    **kwargs,
) -> CompanyConfig:
    return CompanyConfig(public_holidays=frozenset(holidays), attendance_bonus=rules, **kwargs)


def advance(
    staff_id: str,
    year: int,
    month: int,
    amount: str,
    status=AdvanceStatus.APPROVED,
    advance_id: str | None = None,
) -> SalaryAdvance:
    return SalaryAdvance(
        id=advance_id or f"A{next(_ids)}",
        staff_id=staff_id,
        pay_period_year=year,
        pay_period_month=month,
        amount=Decimal(amount),
        status=status,
    )


def loan(
    staff_id: str,
    monthly: str,
    balance: str,
    active: bool = True,
    loan_id: str | None = None,
) -> Loan:
    return Loan(
        id=loan_id or f"LN{next(_ids)}",
        staff_id=staff_id,
        monthly_repayment=Decimal(monthly),
        remaining_balance=Decimal(balance),
        is_active=active,
    )


def adjustment(staff_id: str, year: int, month: int, kind: AdjustmentKind, amount: str) -> MonthlyAdjustment:
    return MonthlyAdjustment(
        id=f"ADJ{next(_ids)}",
        staff_id=staff_id,
        pay_period_year=year,
        pay_period_month=month,
        kind=kind,
        amount=Decimal(amount),
        description=f"{kind.value} adjustment",
    )


def weekdays(start: date, end: date) -> list[date]:
    days = []
    day = start
    while day <= end:
        if day.weekday() < 5:
            days.append(day)
        day += timedelta(days=1)
    return days


def full_attendance(staff_id: str, start: date, end: date):
    """Weekday shifts 09:00-18:00 attended on time, weekends off."""
    schedules, records = [], []
    day = start
    while day <= end:
        if day.weekday() < 5:
            schedules.append(work_day(staff_id, day))
            records.append(attended(staff_id, day))
        else:
            schedules.append(off_day(staff_id, day))
        day += timedelta(days=1)
    return schedules, records


# ---------------------------------------------------------------------------
# Store seeding
# ---------------------------------------------------------------------------


def seed(session, *, config=None, staff=(), schedules=(), attendance=(), leave_requests=(),
         advances=(), loans=(), adjustments=()) -> None:
    """Persist DTOs through their ORM ``from_dto`` and commit."""
    if config is not None:
        session.add(CompanyConfigModel.from_dto(config))
    for s in staff:
        session.add(StaffModel.from_dto(s))
    for s in schedules:
        session.add(ScheduleModel.from_dto(s))
    for a in attendance:
        session.add(AttendanceModel.from_dto(a))
    for r in leave_requests:
        session.add(LeaveRequestModel.from_dto(r))
    for a in advances:
        session.add(SalaryAdvanceModel.from_dto(a))
    for ln in loans:
        session.add(LoanModel.from_dto(ln))
    for a in adjustments:
        session.add(MonthlyAdjustmentModel.from_dto(a))
    session.commit()

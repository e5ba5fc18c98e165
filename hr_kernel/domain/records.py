"""
Record DTOs (``hr_kernel.domain.records``).

Responsibility
--------------
Frozen dataclass value objects for everything the engines read: staff
profiles with their job history, schedules, attendance, leave, company
configuration, advances, loans, adjustments and finalized payslips.

Architecture position
---------------------
**Kernel domain layer** -- pure data definitions with ZERO I/O.  ORM models
in ``hr_kernel.models`` convert to these via ``to_dto()``; engines consume
only these.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* All monetary fields use ``Decimal`` -- never ``float``.
* ``StaffProfile.current_job_as_of`` is the only job-history accessor:
  latest ``effective_from`` not after the reference date, ties broken by
  insertion order (later record wins).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from hr_kernel.domain.values import PayPeriod


class PayType(Enum):
    """How a job is paid."""
    SALARIED = "Salaried"
    HOURLY = "Hourly"

    @classmethod
    def parse(cls, value: str | PayType) -> PayType:
        """Accept legacy spellings ("Salary", "Monthly") for salaried jobs."""
        if isinstance(value, PayType):
            return value
        normalized = str(value).strip().lower()
        if normalized in ("salaried", "salary", "monthly"):
            return cls.SALARIED
        if normalized == "hourly":
            return cls.HOURLY
        raise ValueError(f"Unknown pay type: {value!r}")


class ScheduleKind(Enum):
    WORK = "work"
    OFF = "off"


class OvertimeStatus(Enum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveType(Enum):
    ANNUAL = "Annual"
    SICK = "Sick"
    PERSONAL = "Personal"
    PUBLIC_HOLIDAY_IN_LIEU = "PublicHolidayInLieu"
    UNPAID = "Unpaid"

    @classmethod
    def parse(cls, value: str | LeaveType) -> LeaveType:
        """Match on letters only: "Sick Leave", "sick" and "SICK" are equal."""
        if isinstance(value, LeaveType):
            return value
        letters = "".join(ch for ch in str(value).lower() if ch.isalpha())
        if letters.endswith("leave") and letters != "leave":
            letters = letters[: -len("leave")]
        for member in cls:
            if member.value.lower() == letters:
                return member
        raise ValueError(f"Unknown leave type: {value!r}")


class LeaveStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AdvanceStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DEDUCTED = "deducted"
    REJECTED = "rejected"


class AdjustmentKind(Enum):
    EARNING = "Earning"
    DEDUCTION = "Deduction"


# ---------------------------------------------------------------------------
# Staff
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JobRecord:
    """One entry of a staff member's job history.

    ``rate`` is the monthly salary for salaried jobs and the hourly rate for
    hourly jobs.  ``standard_day_hours`` overrides the policy default.
    """
    position: str
    department: str
    effective_from: date
    pay_type: PayType
    rate: Decimal
    standard_day_hours: Decimal | None = None

    @property
    def is_salaried(self) -> bool:
        return self.pay_type is PayType.SALARIED


@dataclass(frozen=True)
class StaffProfile:
    """A staff member with ordered job history and bonus streak counter."""
    id: str
    display_name: str
    start_date: date | None = None
    end_date: date | None = None
    job_history: tuple[JobRecord, ...] = ()
    bonus_streak: int = 0
    is_attendance_bonus_eligible: bool = True
    is_sso_registered: bool = True

    def current_job_as_of(self, day: date) -> JobRecord | None:
        current: JobRecord | None = None
        for job in self.job_history:
            if job.effective_from > day:
                continue
            if current is None or job.effective_from >= current.effective_from:
                current = job
        return current

    def is_separating_in(self, period: PayPeriod) -> bool:
        return self.end_date is not None and period.contains(self.end_date)


# ---------------------------------------------------------------------------
# Daily records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScheduleEntry:
    """Planned shift (or day off) for one staff member on one day.

    ``includes_break`` overrides the pay-type break rule when set.
    """
    staff_id: str
    day: date
    kind: ScheduleKind
    start_time: str | None = None
    end_time: str | None = None
    notes: str = ""
    includes_break: bool | None = None

    @property
    def is_work(self) -> bool:
        return self.kind is ScheduleKind.WORK


@dataclass(frozen=True)
class AttendanceRecord:
    """Clock events for one staff member on one day."""
    staff_id: str
    day: date
    check_in: datetime | None = None
    check_out: datetime | None = None
    break_start: datetime | None = None
    break_end: datetime | None = None
    overtime_status: OvertimeStatus = OvertimeStatus.NONE
    overtime_approved_minutes: int = 0
    check_out_note: str | None = None

    @property
    def has_explicit_break(self) -> bool:
        return self.break_start is not None and self.break_end is not None

    @property
    def approved_overtime_minutes(self) -> int:
        if self.overtime_status is OvertimeStatus.APPROVED:
            return max(0, self.overtime_approved_minutes)
        return 0


@dataclass(frozen=True)
class LeaveRequest:
    """A leave request spanning start_date through end_date inclusive."""
    id: str
    staff_id: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: int
    status: LeaveStatus = LeaveStatus.APPROVED
    mc_received: bool = False

    @property
    def is_approved(self) -> bool:
        return self.status is LeaveStatus.APPROVED

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


# ---------------------------------------------------------------------------
# Company configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AttendanceBonusRules:
    """Disqualification thresholds and tiered bonus amounts."""
    allowed_lates: int = 3
    max_late_minutes_allowed: int = 30
    allowed_absences: int = 0
    month1: Decimal = Decimal("400")
    month2: Decimal = Decimal("800")
    month3: Decimal = Decimal("1200")


@dataclass(frozen=True)
class CompanyConfig:
    """Company-wide payroll settings (singleton).

    ``sso_rate`` and ``advance_eligibility_percentage`` are percentages.
    The statutory contribution base is clamped to
    [``sso_wage_floor``, ``sso_wage_cap``].
    """
    public_holidays: frozenset[date] = frozenset()
    attendance_bonus: AttendanceBonusRules | None = None
    sso_rate: Decimal = Decimal("5")
    sso_wage_floor: Decimal = Decimal("1650")
    sso_wage_cap: Decimal = Decimal("15000")
    advance_eligibility_percentage: Decimal = Decimal("50")
    annual_leave_days: int = 12
    sick_day_quota: int = 30
    public_holiday_credit_cap: int = 13
    overtime_rate_multiplier: Decimal = Decimal("1.5")

    def is_public_holiday(self, day: date) -> bool:
        return day in self.public_holidays


# ---------------------------------------------------------------------------
# Money records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SalaryAdvance:
    id: str
    staff_id: str
    pay_period_year: int
    pay_period_month: int
    amount: Decimal
    status: AdvanceStatus = AdvanceStatus.PENDING


@dataclass(frozen=True)
class Loan:
    id: str
    staff_id: str
    monthly_repayment: Decimal
    remaining_balance: Decimal
    is_active: bool = True

    @property
    def scheduled_repayment(self) -> Decimal:
        """This month's repayment, never more than the outstanding balance."""
        if not self.is_active or self.remaining_balance <= 0:
            return Decimal("0")
        return max(Decimal("0"), min(self.monthly_repayment, self.remaining_balance))


@dataclass(frozen=True)
class MonthlyAdjustment:
    id: str
    staff_id: str
    pay_period_year: int
    pay_period_month: int
    kind: AdjustmentKind
    amount: Decimal
    description: str = ""


@dataclass(frozen=True)
class LoanRepayment:
    """One loan instalment.

    ``closed_loan`` is only set on stored payslips, when finalize brought the
    loan balance to zero.
    """
    loan_id: str
    amount: Decimal
    closed_loan: bool = False


@dataclass(frozen=True)
class PayslipRecord:
    """A finalized payslip as stored.

    ``previous_streak`` is None only for payslips written before the prior
    streak value was recorded.
    """
    id: str
    staff_id: str
    pay_period_year: int
    pay_period_month: int
    net_pay: Decimal
    new_streak: int
    previous_streak: int | None = None
    earnings: dict = field(default_factory=dict)
    deductions: dict = field(default_factory=dict)
    loan_repayments: tuple[LoanRepayment, ...] = ()
    advance_ids: tuple[str, ...] = ()
    finalized_at: datetime | None = None
    finalized_by: str | None = None

    @property
    def period(self) -> PayPeriod:
        return PayPeriod(self.pay_period_year, self.pay_period_month)


def payslip_id_for(staff_id: str, period: PayPeriod) -> str:
    """Deterministic payslip key ``{staff_id}_{year}_{month}``."""
    return f"{staff_id}_{period.year}_{period.month}"


# ---------------------------------------------------------------------------
# Engine input bundle
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StaffPeriodRecords:
    """Everything one engine call needs for one staff member and period.

    ``leave_requests`` holds approved requests overlapping the year to date
    through the period end.  ``missing_inputs`` names optional inputs that
    could not be fetched and were replaced by empty defaults.
    """
    staff: StaffProfile
    period: PayPeriod
    schedules: tuple[ScheduleEntry, ...] = ()
    attendance: tuple[AttendanceRecord, ...] = ()
    leave_requests: tuple[LeaveRequest, ...] = ()
    advances: tuple[SalaryAdvance, ...] = ()
    loans: tuple[Loan, ...] = ()
    adjustments: tuple[MonthlyAdjustment, ...] = ()
    latest_payslip: PayslipRecord | None = None
    missing_inputs: tuple[str, ...] = ()

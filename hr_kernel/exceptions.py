"""
Typed exception hierarchy for the HR kernel.

Every error raised by the engines and services has a typed class, a
machine-readable ``code`` class attribute, and stores its context as
attributes so it survives logging and API serialization.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    HrEngineError (base)
    |
    +-- NotAuthenticatedError            (raised by callers, never the engine)
    +-- NotAuthorizedError               (raised by callers, never the engine)
    |
    +-- InvalidArgumentError
    |   +-- InvalidPayPeriodError
    |   +-- InvalidTimeOfDayError
    |
    +-- NotFoundError
    |   +-- StaffNotFoundError
    |   +-- CompanyConfigNotFoundError
    |   +-- BonusRulesNotFoundError
    |   +-- PayslipNotFoundError
    |   +-- AttendanceRecordNotFoundError
    |
    +-- FailedPreconditionError
    |   +-- FuturePeriodError
    |   +-- PreCutoverPeriodError
    |   +-- HourlyStaffNotEligibleError
    |   +-- NonMonthlyStaffError
    |   +-- NoJobHistoryError
    |   +-- PayslipAlreadyFinalizedError
    |   +-- StaleStreakError
    |   +-- OutOfOrderRevertError
    |   +-- PartialRunError
    |   +-- InvalidTransitionError
    |
    +-- InternalError

===============================================================================
HANDLING PATTERNS
===============================================================================

Roster-wide payroll runs collect per-row failures as ``RowError`` values
carrying the exception ``code``; they do not abort the run.  Missing company
configuration or bonus rules abort the whole run.

    try:
        preview = service.preview_run(2025, 10)
    except CompanyConfigNotFoundError as e:
        api_response(code=e.code)
"""


class HrEngineError(Exception):
    """
    Base exception for all HR engine errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "HR_ENGINE_ERROR"


# Caller-side access control


class NotAuthenticatedError(HrEngineError):
    """Caller has no authenticated identity."""

    code: str = "NOT_AUTHENTICATED"


class NotAuthorizedError(HrEngineError):
    """Caller lacks the role required for the operation."""

    code: str = "NOT_AUTHORIZED"

    def __init__(self, actor_id: str, operation: str):
        self.actor_id = actor_id
        self.operation = operation
        super().__init__(f"Actor {actor_id} is not authorized to {operation}")


# Invalid arguments


class InvalidArgumentError(HrEngineError):
    """Malformed request argument."""

    code: str = "INVALID_ARGUMENT"


class InvalidPayPeriodError(InvalidArgumentError):
    """Year/month pair does not name a calendar month."""

    code: str = "INVALID_PAY_PERIOD"

    def __init__(self, year: object, month: object):
        self.year = year
        self.month = month
        super().__init__(f"Invalid pay period: year={year!r} month={month!r}")


class InvalidTimeOfDayError(InvalidArgumentError):
    """Time-of-day string is not HH:MM or HH:MM:SS."""

    code: str = "INVALID_TIME_OF_DAY"

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid time of day: {value!r}")


# Not found


class NotFoundError(HrEngineError):
    """Base exception for missing records."""

    code: str = "NOT_FOUND"


class StaffNotFoundError(NotFoundError):
    """Staff profile does not exist."""

    code: str = "STAFF_NOT_FOUND"

    def __init__(self, staff_id: str):
        self.staff_id = staff_id
        super().__init__(f"Staff profile not found: {staff_id}")


class CompanyConfigNotFoundError(NotFoundError):
    """The company configuration singleton is missing."""

    code: str = "COMPANY_CONFIG_NOT_FOUND"

    def __init__(self):
        super().__init__("Company configuration not found")


class BonusRulesNotFoundError(NotFoundError):
    """Company configuration has no attendance bonus rules."""

    code: str = "BONUS_RULES_NOT_FOUND"

    def __init__(self):
        super().__init__("Attendance bonus rules are not configured")


class PayslipNotFoundError(NotFoundError):
    """Payslip id does not exist."""

    code: str = "PAYSLIP_NOT_FOUND"

    def __init__(self, payslip_id: str):
        self.payslip_id = payslip_id
        super().__init__(f"Payslip not found: {payslip_id}")


class AttendanceRecordNotFoundError(NotFoundError):
    """No attendance record for the staff member on the given day."""

    code: str = "ATTENDANCE_RECORD_NOT_FOUND"

    def __init__(self, staff_id: str, day: str):
        self.staff_id = staff_id
        self.day = day
        super().__init__(f"No attendance record for {staff_id} on {day}")


# Failed preconditions


class FailedPreconditionError(HrEngineError):
    """Request is well-formed but the system state does not allow it."""

    code: str = "FAILED_PRECONDITION"


class FuturePeriodError(FailedPreconditionError):
    """Payroll requested for a period that has not started."""

    code: str = "FUTURE_PERIOD"

    def __init__(self, period: str):
        self.period = period
        super().__init__(f"Cannot run payroll for future period {period}")


class PreCutoverPeriodError(FailedPreconditionError):
    """Payroll requested for a period before the payroll cutover date."""

    code: str = "PRE_CUTOVER_PERIOD"

    def __init__(self, period: str, cutover: str):
        self.period = period
        self.cutover = cutover
        super().__init__(
            f"Cannot run payroll for {period}: before cutover {cutover}"
        )


class HourlyStaffNotEligibleError(FailedPreconditionError):
    """Salary advances are only available to salaried staff."""

    code: str = "HOURLY_STAFF_NOT_ELIGIBLE"

    def __init__(self, staff_id: str):
        self.staff_id = staff_id
        super().__init__(
            f"Staff {staff_id} is paid hourly and cannot draw a salary advance"
        )


class NonMonthlyStaffError(FailedPreconditionError):
    """Attendance bonus requested for a staff member without a monthly salary."""

    code: str = "NON_MONTHLY_STAFF"

    def __init__(self, staff_id: str):
        self.staff_id = staff_id
        super().__init__(
            f"Attendance bonus only applies to salaried staff ({staff_id})"
        )


class NoJobHistoryError(FailedPreconditionError):
    """Staff member has no job record effective on the reference date."""

    code: str = "NO_JOB_HISTORY"

    def __init__(self, staff_id: str, as_of: str):
        self.staff_id = staff_id
        self.as_of = as_of
        super().__init__(f"Staff {staff_id} has no job effective on {as_of}")


class PayslipAlreadyFinalizedError(FailedPreconditionError):
    """A finalized payslip already exists for the staff member and period."""

    code: str = "PAYSLIP_ALREADY_FINALIZED"

    def __init__(self, payslip_id: str):
        self.payslip_id = payslip_id
        super().__init__(f"Payslip already finalized: {payslip_id}")


class StaleStreakError(FailedPreconditionError):
    """The staff streak changed between preview and finalize (or revert)."""

    code: str = "STALE_STREAK"

    def __init__(self, staff_id: str, expected: int, actual: int):
        self.staff_id = staff_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Bonus streak for {staff_id} is {actual}, expected {expected}"
        )


class OutOfOrderRevertError(FailedPreconditionError):
    """A later payslip exists, so this one cannot be reverted yet."""

    code: str = "OUT_OF_ORDER_REVERT"

    def __init__(self, payslip_id: str, later_payslip_id: str):
        self.payslip_id = payslip_id
        self.later_payslip_id = later_payslip_id
        super().__init__(
            f"Cannot revert {payslip_id}: later payslip {later_payslip_id} "
            "must be reverted first"
        )


class PartialRunError(FailedPreconditionError):
    """A deadline-truncated preview cannot be finalized."""

    code: str = "PARTIAL_RUN"

    def __init__(self, period: str, missing_staff: int):
        self.period = period
        self.missing_staff = missing_staff
        super().__init__(
            f"Preview for {period} is partial ({missing_staff} staff not "
            "computed) and cannot be finalized"
        )


class InvalidTransitionError(FailedPreconditionError):
    """Workflow action is not allowed from the current state."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, workflow: str, from_state: str, action: str):
        self.workflow = workflow
        self.from_state = from_state
        self.action = action
        super().__init__(
            f"{workflow}: action '{action}' not allowed from '{from_state}'"
        )


# Internal


class InternalError(HrEngineError):
    """Unexpected fetch or compute failure."""

    code: str = "INTERNAL"

"""
Financials Service (``hr_modules.financials.service``).

Responsibility
--------------
Read-only, current-period views of one staff member's pay: how much salary
advance they may still request, and a mid-month projection of net pay.

Architecture position
---------------------
**Modules layer** -- loads records through ``StaffRecordLoader`` and
delegates to ``calculate_advance_eligibility`` and ``project_live_pay``.
"Today" and the current period come from the injected Clock.

Failure modes
-------------
* StaffNotFoundError, CompanyConfigNotFoundError.
* NoJobHistoryError / HourlyStaffNotEligibleError from the advance engine.
* Optional inputs that fail to load degrade to empty defaults and are
  listed in ``PayEstimate.missing_inputs``.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from hr_engines.advance_eligibility import AdvanceEligibility, calculate_advance_eligibility
from hr_engines.pay_estimate import PayEstimate, project_live_pay
from hr_kernel.domain.calendar import BusinessCalendar
from hr_kernel.domain.clock import Clock, SystemClock
from hr_kernel.domain.policy import DEFAULT_POLICY, PayrollPolicy
from hr_kernel.domain.records import AdvanceStatus, CompanyConfig, StaffProfile
from hr_kernel.domain.values import PayPeriod
from hr_kernel.exceptions import (
    CompanyConfigNotFoundError,
    InvalidArgumentError,
    StaffNotFoundError,
)
from hr_kernel.logging_config import LogContext, get_logger
from hr_modules._loading import StaffRecordLoader

logger = get_logger("modules.financials.service")


class FinancialsService:
    """Advance eligibility and live pay estimate for the current period."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        policy: PayrollPolicy | None = None,
        calendar: BusinessCalendar | None = None,
    ):
        self._clock = clock or SystemClock()
        self._policy = policy or DEFAULT_POLICY
        self._calendar = calendar or BusinessCalendar.from_policy(self._policy)
        self._loader = StaffRecordLoader(session, self._calendar)
        self._selector = self._loader.selector

    def advance_eligibility(self, staff_id: str) -> AdvanceEligibility:
        staff, config = self._staff_and_config(staff_id)
        today = self._calendar.today(self._clock)
        period = PayPeriod.of(today)
        with LogContext.bind(staff_id=staff_id, pay_period=period.key):
            records = self._loader.load(
                staff,
                period,
                advance_statuses=(AdvanceStatus.PENDING, AdvanceStatus.APPROVED),
            )
            result = calculate_advance_eligibility(
                records, config, self._calendar, today, self._policy
            )
            logger.info("advance_eligibility_calculated", extra={
                "unpaid_absences": result.unpaid_absences,
                "available_advance": str(result.available_advance),
            })
            return result

    def live_pay_estimate(self, staff_id: str) -> PayEstimate:
        staff, config = self._staff_and_config(staff_id)
        today = self._calendar.today(self._clock)
        period = PayPeriod.of(today)
        with LogContext.bind(staff_id=staff_id, pay_period=period.key):
            records = self._loader.load(staff, period, include_latest_payslip=True)
            estimate = project_live_pay(records, config, self._calendar, today, self._policy)
            logger.info("live_pay_estimated", extra={
                "estimated_net_pay": str(estimate.estimated_net_pay),
                "missing_inputs": list(estimate.missing_inputs),
            })
            return estimate

    def _staff_and_config(self, staff_id: str) -> tuple[StaffProfile, CompanyConfig]:
        if not staff_id:
            raise InvalidArgumentError("staff_id is required")
        staff = self._selector.get_staff(staff_id)
        if staff is None:
            raise StaffNotFoundError(staff_id)
        config = self._selector.get_company_config()
        if config is None:
            raise CompanyConfigNotFoundError()
        return staff, config

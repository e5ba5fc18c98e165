"""
Payroll Run Service (``hr_modules.payroll.service``).

Responsibility
--------------
Orchestrates a payroll run for one pay period: preview (compute every
eligible staff row without writing), finalize (persist payslips and the
streak, settle loans and advances) and revert (the exact inverse of
finalize for specific payslips).

Architecture position
---------------------
**Modules layer** -- thin glue.  Records are fetched on the calling thread
through ``StaffRecordLoader``; per-staff computation is delegated to the
pure ``calculate_payroll_line`` engine in a thread pool over those
immutable records.  Workers never touch the session.

Invariants enforced
-------------------
* Finalize and revert each own the transaction boundary
  (``commit`` on success, ``rollback`` and re-raise on any failure), so a
  batch is all-or-nothing.
* Finalize refuses partial previews, existing payslips and lines whose
  streak no longer matches the staff member's current streak.
* Revert refuses when a later-period payslip exists for the staff member
  or the current streak is not the one the payslip wrote.
* One row's failure never aborts the others.  Missing company config or
  bonus rules abort the whole run.

Failure modes
-------------
* InvalidPayPeriodError, FuturePeriodError, PreCutoverPeriodError before
  anything is fetched.
* CompanyConfigNotFoundError / BonusRulesNotFoundError for the whole run.
* Per-row ``RowError`` carrying the exception ``code`` (``INTERNAL`` for
  unexpected failures, logged with traceback).
* PartialRunError, PayslipAlreadyFinalizedError, StaleStreakError,
  InvalidTransitionError from finalize.
* PayslipNotFoundError, OutOfOrderRevertError, StaleStreakError from
  revert.

Audit relevance
---------------
Structured log events at operation start and at commit/rollback, carrying
the pay period, actor, payslip ids and total net pay.  Payslips record
the prior streak and the loan/advance settlement so that revert is exact.

Usage::

    service = PayrollRunService(session, clock=clock)
    preview = service.preview_run(2025, 10)
    result = service.finalize_run(preview, actor_id="hr-admin")
    service.revert_payslips(result.payslip_ids, actor_id="hr-admin")
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from contextvars import copy_context
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hr_engines.bonus_streak import revert_month
from hr_engines.payroll_calculator import (
    ALREADY_FINALIZED,
    PayrollLine,
    calculate_payroll_line,
    check_run_period,
    ineligibility_reason,
)
from hr_kernel.domain.calendar import BusinessCalendar
from hr_kernel.domain.clock import Clock, SystemClock
from hr_kernel.domain.policy import DEFAULT_POLICY, PayrollPolicy
from hr_kernel.domain.records import (
    AdvanceStatus,
    CompanyConfig,
    StaffPeriodRecords,
    payslip_id_for,
)
from hr_kernel.domain.values import PayPeriod
from hr_kernel.exceptions import (
    BonusRulesNotFoundError,
    CompanyConfigNotFoundError,
    HrEngineError,
    InternalError,
    InvalidArgumentError,
    OutOfOrderRevertError,
    PartialRunError,
    PayslipAlreadyFinalizedError,
    PayslipNotFoundError,
    StaffNotFoundError,
    StaleStreakError,
)
from hr_kernel.logging_config import LogContext, get_logger
from hr_kernel.models import LoanModel, PayslipModel, SalaryAdvanceModel, StaffModel
from hr_modules._loading import StaffRecordLoader
from hr_modules.payroll.models import (
    FinalizeResult,
    PayrollRunPreview,
    PayslipState,
    RevertResult,
    RowError,
    SkippedStaff,
)
from hr_modules.payroll.workflows import advance

logger = get_logger("modules.payroll.service")

ZERO = Decimal("0")


class PayrollRunService:
    """
    Preview, finalize and revert payroll runs.

    Contract
    --------
    * ``preview_run`` never writes.
    * ``finalize_run`` and ``revert_payslips`` commit once or not at all.

    Non-goals
    ---------
    * Does NOT authenticate or authorize ``actor_id``; the caller does.
    * Does NOT render payslips.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        policy: PayrollPolicy | None = None,
        calendar: BusinessCalendar | None = None,
        max_workers: int = 4,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._policy = policy or DEFAULT_POLICY
        self._calendar = calendar or BusinessCalendar.from_policy(self._policy)
        self._loader = StaffRecordLoader(session, self._calendar)
        self._selector = self._loader.selector
        self._max_workers = max_workers

    # =========================================================================
    # Preview
    # =========================================================================

    def preview_run(
        self,
        year: int,
        month: int,
        staff_ids: Sequence[str] | None = None,
        deadline_seconds: float | None = None,
    ) -> PayrollRunPreview:
        """Compute the run for every eligible staff member without writing."""
        started = time.monotonic()
        period = PayPeriod(year, month)
        today = self._calendar.today(self._clock)

        with LogContext.bind(pay_period=period.key):
            check_run_period(period, today, self._calendar, self._policy)
            config = self._selector.get_company_config()
            if config is None:
                raise CompanyConfigNotFoundError()
            if config.attendance_bonus is None:
                raise BonusRulesNotFoundError()

            logger.info("payroll_preview_started", extra={
                "staff_filter": list(staff_ids) if staff_ids is not None else None,
                "deadline_seconds": deadline_seconds,
            })

            roster = self._selector.list_staff(list(staff_ids) if staff_ids is not None else None)
            finalized = self._selector.finalized_staff_ids(period.year, period.month)

            errors: list[RowError] = []
            skipped: list[SkippedStaff] = []
            states: dict[str, PayslipState] = {}
            pending: list[StaffPeriodRecords] = []

            if staff_ids is not None:
                known = {s.id for s in roster}
                for staff_id in sorted(set(staff_ids) - known):
                    errors.append(RowError(
                        staff_id=staff_id,
                        code=StaffNotFoundError.code,
                        message=str(StaffNotFoundError(staff_id)),
                    ))

            for staff in roster:
                reason = ineligibility_reason(
                    staff, period, self._calendar, already_finalized=staff.id in finalized
                )
                if reason == ALREADY_FINALIZED:
                    states[staff.id] = PayslipState.FINALIZED
                    skipped.append(SkippedStaff(staff.id, reason, PayslipState.FINALIZED))
                    continue
                if reason is not None:
                    state = advance(PayslipState.PENDING, "exclude")
                    states[staff.id] = state
                    skipped.append(SkippedStaff(staff.id, reason, state))
                    continue
                try:
                    pending.append(self._loader.load(staff, period))
                except SQLAlchemyError as exc:
                    logger.warning("mandatory_input_unavailable", extra={
                        "staff_id": staff.id,
                        "error": str(exc),
                    })
                    errors.append(RowError(staff.id, InternalError.code, str(exc)))

            remaining = None
            if deadline_seconds is not None:
                remaining = max(0.0, deadline_seconds - (time.monotonic() - started))
            lines, row_errors, unfinished = self._compute_rows(pending, config, today, remaining)
            errors.extend(row_errors)
            for line in lines:
                states[line.staff_id] = advance(PayslipState.PENDING, "preview")

            fully_finalized = (
                not pending
                and not errors
                and any(s.reason == ALREADY_FINALIZED for s in skipped)
            )
            preview = PayrollRunPreview(
                period=period,
                generated_at=self._clock.now(),
                lines=tuple(sorted(lines, key=lambda l: l.staff_id)),
                errors=tuple(sorted(errors, key=lambda e: e.staff_id)),
                skipped=tuple(skipped),
                unfinished_staff_ids=tuple(sorted(unfinished)),
                is_fully_finalized=fully_finalized,
                states=states,
            )

            logger.info("payroll_run_previewed", extra={
                "lines": len(preview.lines),
                "errors": len(preview.errors),
                "skipped": len(preview.skipped),
                "is_partial": preview.is_partial,
                "is_fully_finalized": preview.is_fully_finalized,
                "total_net_pay": str(preview.total_net_pay),
            })
            return preview

    def _compute_rows(
        self,
        pending: list[StaffPeriodRecords],
        config: CompanyConfig,
        today: date,
        timeout: float | None,
    ) -> tuple[list[PayrollLine], list[RowError], list[str]]:
        lines: list[PayrollLine] = []
        errors: list[RowError] = []
        if not pending:
            return lines, errors, []

        executor = ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="payroll-row",
        )
        try:
            futures = {
                executor.submit(
                    copy_context().run,
                    calculate_payroll_line,
                    records,
                    config,
                    self._calendar,
                    today,
                    self._policy,
                ): records.staff.id
                for records in pending
            }
            done, not_done = wait(futures, timeout=timeout)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        for future in done:
            staff_id = futures[future]
            try:
                lines.append(future.result())
            except HrEngineError as exc:
                logger.warning("payroll_row_failed", extra={
                    "staff_id": staff_id,
                    "error_code": exc.code,
                    "error": str(exc),
                })
                errors.append(RowError(staff_id, exc.code, str(exc)))
            except Exception as exc:
                logger.error(
                    "payroll_row_crashed",
                    extra={"staff_id": staff_id},
                    exc_info=exc,
                )
                errors.append(RowError(staff_id, InternalError.code, str(exc)))

        unfinished = [futures[f] for f in not_done]
        if unfinished:
            logger.warning("payroll_preview_deadline_reached", extra={
                "unfinished": len(unfinished),
                "completed": len(done),
            })
        return lines, errors, unfinished

    # =========================================================================
    # Finalize
    # =========================================================================

    def finalize_run(
        self,
        preview: PayrollRunPreview,
        actor_id: str,
        staff_ids: Sequence[str] | None = None,
    ) -> FinalizeResult:
        """Persist the previewed lines atomically."""
        _require_actor(actor_id)
        period = preview.period

        with LogContext.bind(actor_id=actor_id, pay_period=period.key):
            if preview.is_partial:
                raise PartialRunError(period.key, len(preview.unfinished_staff_ids))
            check_run_period(
                period, self._calendar.today(self._clock), self._calendar, self._policy
            )

            lines = preview.lines
            if staff_ids is not None:
                wanted = set(staff_ids)
                lines = tuple(line for line in lines if line.staff_id in wanted)

            now = self._clock.now()
            logger.info("payroll_finalize_started", extra={"lines": len(lines)})
            try:
                payslip_ids = []
                for line in lines:
                    state = preview.states.get(line.staff_id, PayslipState.PENDING)
                    advance(state, "finalize")
                    payslip_ids.append(self._finalize_line(line, actor_id, now))
                self._session.commit()
            except Exception:
                self._session.rollback()
                logger.warning("payroll_finalize_rolled_back", extra={"lines": len(lines)})
                raise

            total = sum((line.net_pay for line in lines), ZERO)
            logger.info("payroll_run_finalized", extra={
                "payslip_ids": payslip_ids,
                "total_net_pay": str(total),
            })
            return FinalizeResult(
                period=period,
                payslip_ids=tuple(payslip_ids),
                total_net_pay=total,
                finalized_at=now,
                finalized_by=actor_id,
            )

    def _finalize_line(self, line: PayrollLine, actor_id: str, now: datetime) -> str:
        payslip_id = payslip_id_for(line.staff_id, line.period)
        if self._session.get(PayslipModel, payslip_id) is not None:
            raise PayslipAlreadyFinalizedError(payslip_id)

        staff = self._session.get(StaffModel, line.staff_id)
        if staff is None:
            raise StaffNotFoundError(line.staff_id)
        if staff.bonus_streak != line.previous_streak:
            raise StaleStreakError(line.staff_id, line.previous_streak, staff.bonus_streak)

        staff.bonus_streak = line.new_streak
        staff.updated_by_id = actor_id

        settled = []
        for repayment in line.deductions.loan_repayments:
            loan = self._session.get(LoanModel, repayment.loan_id)
            if loan is None:
                raise InternalError(f"Loan {repayment.loan_id} disappeared during finalize")
            loan.remaining_balance = loan.remaining_balance - repayment.amount
            closed = loan.remaining_balance <= 0
            if closed:
                loan.remaining_balance = ZERO
                loan.is_active = False
            loan.updated_by_id = actor_id
            settled.append({
                "loan_id": repayment.loan_id,
                "amount": str(repayment.amount),
                "closed_loan": closed,
            })

        for advance_id in line.deductions.advance_ids:
            model = self._session.get(SalaryAdvanceModel, advance_id)
            if model is not None and model.status == AdvanceStatus.APPROVED.value:
                model.status = AdvanceStatus.DEDUCTED.value
                model.updated_by_id = actor_id

        self._session.add(PayslipModel(
            id=payslip_id,
            staff_id=line.staff_id,
            pay_period_year=line.period.year,
            pay_period_month=line.period.month,
            net_pay=line.net_pay,
            previous_streak=line.previous_streak,
            new_streak=line.new_streak,
            earnings=_earnings_breakdown(line),
            deductions=_deductions_breakdown(line),
            loan_repayments=settled,
            advance_ids=list(line.deductions.advance_ids),
            finalized_at=now,
            finalized_by=actor_id,
            created_by_id=actor_id,
        ))
        self._session.flush()
        return payslip_id

    # =========================================================================
    # Revert
    # =========================================================================

    def revert_payslips(self, payslip_ids: Sequence[str], actor_id: str) -> RevertResult:
        """Undo finalize for specific payslips, latest period first."""
        _require_actor(actor_id)
        now = self._clock.now()

        with LogContext.bind(actor_id=actor_id):
            logger.info("payslip_revert_started", extra={"payslip_ids": list(payslip_ids)})
            try:
                models = []
                for payslip_id in dict.fromkeys(payslip_ids):
                    model = self._session.get(PayslipModel, payslip_id)
                    if model is None:
                        raise PayslipNotFoundError(payslip_id)
                    models.append(model)
                models.sort(
                    key=lambda m: (m.pay_period_year, m.pay_period_month, m.staff_id),
                    reverse=True,
                )

                reverted = []
                for model in models:
                    advance(PayslipState.FINALIZED, "revert")
                    reverted.append(self._revert_one(model, actor_id))
                self._session.commit()
            except Exception:
                self._session.rollback()
                logger.warning("payslip_revert_rolled_back", extra={
                    "payslip_ids": list(payslip_ids),
                })
                raise

            logger.info("payslips_reverted", extra={"payslip_ids": reverted})
            return RevertResult(
                reverted_payslip_ids=tuple(reverted),
                reverted_at=now,
                reverted_by=actor_id,
            )

    def revert_run(self, year: int, month: int, actor_id: str) -> RevertResult:
        """Revert every payslip of the period."""
        period = PayPeriod(year, month)
        with LogContext.bind(pay_period=period.key):
            ids = [p.id for p in self._selector.payslips_for_period(period.year, period.month)]
            return self.revert_payslips(ids, actor_id)

    def _revert_one(self, payslip: PayslipModel, actor_id: str) -> str:
        later = self._selector.later_payslip_for(
            payslip.staff_id, payslip.pay_period_year, payslip.pay_period_month
        )
        if later is not None:
            raise OutOfOrderRevertError(payslip.id, later.id)

        staff = self._session.get(StaffModel, payslip.staff_id)
        if staff is None:
            raise StaffNotFoundError(payslip.staff_id)
        if staff.bonus_streak != payslip.new_streak:
            raise StaleStreakError(payslip.staff_id, payslip.new_streak, staff.bonus_streak)

        staff.bonus_streak = revert_month(payslip.new_streak, payslip.previous_streak)
        staff.updated_by_id = actor_id

        record = payslip.to_dto()
        for repayment in record.loan_repayments:
            loan = self._session.get(LoanModel, repayment.loan_id)
            if loan is None:
                logger.warning("revert_loan_missing", extra={
                    "payslip_id": payslip.id,
                    "loan_id": repayment.loan_id,
                })
                continue
            loan.remaining_balance = loan.remaining_balance + repayment.amount
            if repayment.closed_loan:
                loan.is_active = True
            loan.updated_by_id = actor_id

        for advance_id in record.advance_ids:
            model = self._session.get(SalaryAdvanceModel, advance_id)
            if model is not None and model.status == AdvanceStatus.DEDUCTED.value:
                model.status = AdvanceStatus.APPROVED.value
                model.updated_by_id = actor_id

        self._session.delete(payslip)
        self._session.flush()
        return record.id


def _require_actor(actor_id: str) -> None:
    if not actor_id or not str(actor_id).strip():
        raise InvalidArgumentError("actor_id is required for write operations")


def _earnings_breakdown(line: PayrollLine) -> dict:
    e = line.earnings
    return {
        "base_pay": str(e.base_pay),
        "overtime_pay": str(e.overtime_pay),
        "attendance_bonus": str(e.attendance_bonus),
        "sso_allowance": str(e.sso_allowance),
        "leave_payout": str(e.leave_payout),
        "other": [
            {"id": a.id, "description": a.description, "amount": str(a.amount)}
            for a in e.other
        ],
        "total": str(e.total),
    }


def _deductions_breakdown(line: PayrollLine) -> dict:
    d = line.deductions
    return {
        "absence": str(d.absence),
        "unexcused_absence_days": d.unexcused_absence_days,
        "sick_leave_deducted_days": d.sick_leave_deducted_days,
        "sso": str(d.sso),
        "advances": str(d.advances),
        "loans": str(d.loans),
        "other": [
            {"id": a.id, "description": a.description, "amount": str(a.amount)}
            for a in d.other
        ],
        "total": str(d.total),
    }

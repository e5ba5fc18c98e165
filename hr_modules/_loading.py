"""
Shared record loading for the service layer.

Used by hr_modules/*/service.py to assemble ``StaffPeriodRecords`` for one
staff member and pay period.

Mandatory inputs (schedules, attendance) propagate their errors.  Optional
inputs (leave, advances, loans, adjustments, latest payslip) that fail with
a ``SQLAlchemyError`` are replaced by empty defaults, logged as
``optional_input_unavailable`` and named in ``missing_inputs``.  Each
optional fetch runs in its own savepoint so a failed query leaves the
session usable for the rest of the roster.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hr_kernel.domain.calendar import BusinessCalendar
from hr_kernel.domain.records import AdvanceStatus, StaffPeriodRecords, StaffProfile
from hr_kernel.domain.values import PayPeriod
from hr_kernel.logging_config import get_logger
from hr_kernel.selectors.record_selector import RecordSelector

logger = get_logger("modules.loading")

T = TypeVar("T")

LEAVE = "leave_requests"
ADVANCES = "advances"
LOANS = "loans"
ADJUSTMENTS = "adjustments"
LATEST_PAYSLIP = "latest_payslip"


class StaffRecordLoader:
    """Fetches everything one engine call needs for a staff member and period."""

    def __init__(self, session: Session, calendar: BusinessCalendar):
        self._session = session
        self._selector = RecordSelector(session)
        self._calendar = calendar

    @property
    def selector(self) -> RecordSelector:
        return self._selector

    def load(
        self,
        staff: StaffProfile,
        period: PayPeriod,
        advance_statuses: tuple[AdvanceStatus, ...] = (AdvanceStatus.APPROVED,),
        include_latest_payslip: bool = False,
    ) -> StaffPeriodRecords:
        start, end = self._calendar.bounds_of(period)
        year_start = self._calendar.year_start(period.year)
        missing: list[str] = []

        schedules = self._selector.schedules_for(staff.id, start, end)
        attendance = self._selector.attendance_for(staff.id, start, end)

        leave = self._optional(
            staff.id, LEAVE, missing,
            lambda: self._selector.approved_leave_for(staff.id, year_start, end),
            [],
        )
        advances = self._optional(
            staff.id, ADVANCES, missing,
            lambda: self._selector.advances_for(
                staff.id, period.year, period.month, advance_statuses
            ),
            [],
        )
        loans = self._optional(
            staff.id, LOANS, missing,
            lambda: self._selector.active_loans_for(staff.id),
            [],
        )
        adjustments = self._optional(
            staff.id, ADJUSTMENTS, missing,
            lambda: self._selector.adjustments_for(staff.id, period.year, period.month),
            [],
        )
        latest = None
        if include_latest_payslip:
            latest = self._optional(
                staff.id, LATEST_PAYSLIP, missing,
                lambda: self._selector.latest_payslip_for(staff.id),
                None,
            )

        return StaffPeriodRecords(
            staff=staff,
            period=period,
            schedules=tuple(schedules),
            attendance=tuple(attendance),
            leave_requests=tuple(leave),
            advances=tuple(advances),
            loans=tuple(loans),
            adjustments=tuple(adjustments),
            latest_payslip=latest,
            missing_inputs=tuple(missing),
        )

    def _optional(
        self,
        staff_id: str,
        name: str,
        missing: list[str],
        fetch: Callable[[], T],
        default: T,
    ) -> T:
        # A failed statement aborts the enclosing transaction on PostgreSQL;
        # the savepoint keeps it usable for the remaining fetches.
        savepoint = self._session.begin_nested()
        try:
            result = fetch()
        except SQLAlchemyError as exc:
            savepoint.rollback()
            logger.warning(
                "optional_input_unavailable",
                extra={
                    "staff_id": staff_id,
                    "input": name,
                    "error": str(exc),
                },
            )
            missing.append(name)
            return default
        savepoint.commit()
        return result

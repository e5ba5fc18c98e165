"""
Attendance status resolver.

Classifies one staff member's day from its schedule entry, attendance
record and covering leave.  Evaluation order, first match wins:

    1. UPCOMING  the day is after today
    2. LEAVE     approved leave covers the day
    3. work day  LATE / PRESENT when checked in, ABSENT otherwise
    4. OFF       unless checked in, which is PRESENT

Lateness is ``check_in > scheduled_start + late_grace_minutes``; the
reported magnitude is the full difference rounded up to whole minutes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

from hr_kernel.domain.calendar import BusinessCalendar
from hr_kernel.domain.policy import DEFAULT_POLICY, PayrollPolicy
from hr_kernel.domain.records import AttendanceRecord, LeaveRequest, ScheduleEntry
from hr_kernel.exceptions import InvalidTimeOfDayError
from hr_kernel.logging_config import get_logger

logger = get_logger("engines.attendance_status")


class DayStatus(Enum):
    UPCOMING = "upcoming"
    LEAVE = "leave"
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    OFF = "off"


@dataclass(frozen=True)
class DayResolution:
    day: date
    status: DayStatus
    late_minutes: int = 0


def scheduled_instant(
    calendar: BusinessCalendar,
    day: date,
    time_of_day: str | None,
) -> datetime | None:
    """Schedule time on ``day``, or None when missing or unparseable."""
    if not time_of_day:
        return None
    try:
        return calendar.combine(day, time_of_day)
    except InvalidTimeOfDayError:
        logger.warning(
            "schedule_time_unparseable",
            extra={"day": day, "time_of_day": time_of_day},
        )
        return None


def late_minutes_for(
    check_in: datetime,
    scheduled_start: datetime,
    grace_minutes: int = 0,
) -> int:
    """Minutes late, or 0 when within grace."""
    difference = check_in - scheduled_start
    if difference <= timedelta(minutes=grace_minutes):
        return 0
    return math.ceil(difference.total_seconds() / 60)


def resolve_day(
    schedule: ScheduleEntry | None,
    attendance: AttendanceRecord | None,
    leave: LeaveRequest | None,
    day: date,
    today: date,
    calendar: BusinessCalendar,
    policy: PayrollPolicy = DEFAULT_POLICY,
) -> DayResolution:
    if day > today:
        return DayResolution(day, DayStatus.UPCOMING)

    if leave is not None and leave.is_approved:
        return DayResolution(day, DayStatus.LEAVE)

    checked_in = attendance is not None and attendance.check_in is not None

    if schedule is not None and schedule.is_work:
        if not checked_in:
            return DayResolution(day, DayStatus.ABSENT)
        start = scheduled_instant(calendar, day, schedule.start_time)
        if start is None:
            return DayResolution(day, DayStatus.PRESENT)
        late = late_minutes_for(
            calendar.localize(attendance.check_in), start, policy.late_grace_minutes
        )
        if late > 0:
            return DayResolution(day, DayStatus.LATE, late)
        return DayResolution(day, DayStatus.PRESENT)

    if checked_in:
        return DayResolution(day, DayStatus.PRESENT)
    return DayResolution(day, DayStatus.OFF)

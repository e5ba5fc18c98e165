"""
Shared fixtures for service-layer tests.

Provides a seeded October 2025 roster and the services wired to the
deterministic clock.  Every fixture is opt-in; tests declare what they
depend on in their signatures.

Roster (all ids deterministic):
    S1  salaried 31,000, full October attendance, one loan, one advance
    S2  hourly 100, five worked days
    S3  starts after October (not started)
    S4  separated before October
"""

from datetime import date

import pytest

from hr_kernel.domain.records import StaffProfile
from hr_modules.attendance import AttendanceService
from hr_modules.financials import FinancialsService
from hr_modules.payroll import PayrollRunService
from tests.factories import (
    advance,
    attended,
    company_config,
    full_attendance,
    hourly_job,
    loan,
    make_staff,
    salaried_job,
    seed,
    work_day,
)

SALARIED_ID = "S1"
HOURLY_ID = "S2"
NOT_STARTED_ID = "S3"
SEPARATED_ID = "S4"

S1_LOAN_ID = "LOAN-S1"
S1_ADVANCE_ID = "ADV-S1"


def salaried_staff(staff_id: str = SALARIED_ID, **kwargs) -> StaffProfile:
    return make_staff(staff_id, job=salaried_job("31000"), **kwargs)


@pytest.fixture
def october_roster(session):
    """Seed the company config and the four-person roster."""
    s1 = salaried_staff()
    s2 = make_staff(HOURLY_ID, job=hourly_job("100"))
    s3 = make_staff(NOT_STARTED_ID, start_date=date(2025, 11, 10))
    s4 = make_staff(SEPARATED_ID, end_date=date(2025, 9, 30))

    schedules, attendance = full_attendance(SALARIED_ID, date(2025, 10, 1), date(2025, 10, 31))
    hourly_days = [date(2025, 10, d) for d in range(6, 11)]
    schedules += [work_day(HOURLY_ID, d) for d in hourly_days]
    attendance += [attended(HOURLY_ID, d) for d in hourly_days]

    seed(
        session,
        config=company_config(),
        staff=[s1, s2, s3, s4],
        schedules=schedules,
        attendance=attendance,
        loans=[loan(SALARIED_ID, "1000", "1500", loan_id=S1_LOAN_ID)],
        advances=[advance(SALARIED_ID, 2025, 10, "2000", advance_id=S1_ADVANCE_ID)],
    )
    return session


@pytest.fixture
def payroll_service(session, clock, policy, calendar):
    return PayrollRunService(session, clock=clock, policy=policy, calendar=calendar)


@pytest.fixture
def financials_service(session, clock, policy, calendar):
    return FinancialsService(session, clock, policy, calendar)


@pytest.fixture
def attendance_service(session, clock, policy, calendar):
    return AttendanceService(session, clock, policy, calendar)

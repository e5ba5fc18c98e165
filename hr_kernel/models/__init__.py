"""
ORM models for the record store.

``import_all_models`` makes every table known to ``Base.metadata`` before
``create_tables`` runs.
"""

from hr_kernel.models.attendance import (
    AttendanceModel,
    LeaveRequestModel,
    ScheduleModel,
)
from hr_kernel.models.company import CompanyConfigModel
from hr_kernel.models.money import LoanModel, MonthlyAdjustmentModel, SalaryAdvanceModel
from hr_kernel.models.payslip import PayslipModel
from hr_kernel.models.staff import JobRecordModel, StaffModel

__all__ = [
    "AttendanceModel",
    "CompanyConfigModel",
    "JobRecordModel",
    "LeaveRequestModel",
    "LoanModel",
    "MonthlyAdjustmentModel",
    "PayslipModel",
    "SalaryAdvanceModel",
    "ScheduleModel",
    "StaffModel",
    "import_all_models",
]


def import_all_models() -> tuple[type, ...]:
    return (
        StaffModel,
        JobRecordModel,
        ScheduleModel,
        AttendanceModel,
        LeaveRequestModel,
        CompanyConfigModel,
        SalaryAdvanceModel,
        LoanModel,
        MonthlyAdjustmentModel,
        PayslipModel,
    )

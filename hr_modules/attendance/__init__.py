"""Attendance services: dashboard summary, bonus calculator and checkout maintenance."""

from hr_modules.attendance.service import AttendanceService

__all__ = ["AttendanceService"]

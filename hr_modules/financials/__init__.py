"""Staff financials: salary advance eligibility and live pay estimate."""

from hr_modules.financials.service import FinancialsService

__all__ = ["FinancialsService"]

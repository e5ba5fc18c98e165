"""Read-only query selectors."""

from hr_kernel.selectors.base import BaseSelector
from hr_kernel.selectors.record_selector import RecordSelector

__all__ = ["BaseSelector", "RecordSelector"]

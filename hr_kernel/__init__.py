"""
HR Kernel - attendance and payroll core

Shared foundation for the calculation engines and services:
- Typed exceptions with machine-readable codes
- Structured JSON logging with request-scoped context
- Injected clock and a single business calendar for all date math
- Versioned payroll policy constants
- Immutable record DTOs, ORM models and read-only selectors
"""

__version__ = "0.1.0"

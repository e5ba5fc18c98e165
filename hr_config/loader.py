"""
Policy Loader (``hr_config.loader``).

Responsibility
--------------
Loads a YAML policy file and parses it into a ``PayrollPolicy``.  This is
internal tooling; the runtime entry point is
``hr_config.get_active_policy()``.

Invariants enforced
-------------------
* Unknown keys are rejected; a typo never silently falls back to a default.
* Decimal fields are parsed from their string form, never through float.
* ``compute_checksum`` is deterministic for identical content.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown key, wrong type or out-of-range value  -> ``ValueError``.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from hr_kernel.domain.calendar import BusinessCalendar
from hr_kernel.domain.policy import PayrollPolicy
from hr_kernel.exceptions import InvalidTimeOfDayError

_FIELDS = {f.name for f in dataclasses.fields(PayrollPolicy)}
_INT_FIELDS = (
    "late_grace_minutes",
    "default_break_minutes",
    "hourly_equivalent_days",
    "long_sick_leave_days",
    "auto_fix_shift_hours",
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; an empty file yields an empty dict."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: policy file must contain a mapping")
    return data


def parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_decimal(name: str, value: Any) -> Decimal:
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError(f"{name}: write decimals as strings or integers, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"{name}: not a decimal: {value!r}") from exc


def parse_policy(data: dict[str, Any]) -> PayrollPolicy:
    """Build a PayrollPolicy from a parsed mapping."""
    unknown = sorted(set(data) - _FIELDS)
    if unknown:
        raise ValueError(f"Unknown policy keys: {', '.join(unknown)}")

    kwargs: dict[str, Any] = {}
    for name, value in data.items():
        if name in _INT_FIELDS:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name}: expected an integer, got {value!r}")
            kwargs[name] = value
        elif name == "standard_day_hours":
            kwargs[name] = parse_decimal(name, value)
        elif name == "payroll_cutover":
            kwargs[name] = parse_date(value)
        elif name == "default_checkout_time":
            if not isinstance(value, str):
                raise ValueError(f"{name}: quote times of day, got {value!r}")
            try:
                BusinessCalendar.parse_time_of_day(value)
            except InvalidTimeOfDayError as exc:
                raise ValueError(str(exc)) from exc
            kwargs[name] = value
        else:
            kwargs[name] = str(value)

    return PayrollPolicy(**kwargs)


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()

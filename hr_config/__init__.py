"""
hr_config -- single public entrypoint for runtime configuration.

Responsibility:
    Provides the ONLY way to obtain the calculation policy and database
    settings at runtime: ``get_active_policy()`` and ``get_database_url()``.
    No other component reads configuration files or environment variables.

Architecture position:
    Configuration -- sits above ``hr_kernel`` and below ``hr_modules`` and
    ``scripts``.  The kernel MUST NEVER import from ``hr_config``.

Invariants enforced:
    - Policy resolution order: explicit path, ``HR_POLICY_FILE``, the
      packaged ``policy.yaml``.
    - Unknown keys are rejected.

Failure modes:
    - ``FileNotFoundError`` -- the resolved policy file does not exist.
    - ``ValueError`` -- unknown keys or invalid values.

Audit relevance:
    Every successful ``get_active_policy()`` call emits an
    ``HR_POLICY_TRACE`` log entry with the policy version, source path and
    content checksum, tying each run back to the exact policy that
    governed it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from hr_config.loader import compute_checksum, load_yaml_file, parse_policy
from hr_kernel.domain.policy import PayrollPolicy

_logger = logging.getLogger("hr_kernel.config")

POLICY_FILE_ENV = "HR_POLICY_FILE"
DATABASE_URL_ENV = "HR_DATABASE_URL"
DEFAULT_DATABASE_URL = "sqlite:///hr_engine.db"

_DEFAULT_POLICY_FILE = Path(__file__).parent / "policy.yaml"


def get_active_policy(path: Path | str | None = None) -> PayrollPolicy:
    """The ONLY public policy entrypoint.

    Args:
        path: Explicit policy file.  Falls back to ``HR_POLICY_FILE`` and
            then to the packaged default.

    Raises:
        FileNotFoundError: If the resolved file does not exist.
        ValueError: If the file has unknown keys or invalid values.
    """
    source = Path(path or os.environ.get(POLICY_FILE_ENV) or _DEFAULT_POLICY_FILE)
    data = load_yaml_file(source)
    policy = parse_policy(data)

    _logger.info(
        "HR_POLICY_TRACE",
        extra={
            "trace_type": "HR_POLICY_TRACE",
            "policy_version": policy.version,
            "policy_source": str(source),
            "checksum": compute_checksum(data),
            "timezone": policy.timezone,
            "payroll_cutover": policy.payroll_cutover,
        },
    )
    return policy


def get_database_url() -> str:
    return os.environ.get(DATABASE_URL_ENV) or DEFAULT_DATABASE_URL


__all__ = [
    "DATABASE_URL_ENV",
    "DEFAULT_DATABASE_URL",
    "POLICY_FILE_ENV",
    "get_active_policy",
    "get_database_url",
]

#!/usr/bin/env python3
"""
Preview, finalize or revert a payroll run from the command line.

Usage:
    hr-payroll-run preview --year 2025 --month 10
    hr-payroll-run preview --year 2025 --month 10 --staff S1 --staff S2 --json
    hr-payroll-run finalize --year 2025 --month 10 --actor hr-admin
    hr-payroll-run revert --actor hr-admin --payslip S1_2025_10
    hr-payroll-run revert --actor hr-admin --year 2025 --month 10

Finalize always recomputes the preview first and refuses a partial one.
The database comes from --database-url or HR_DATABASE_URL; the policy from
--policy-file, HR_POLICY_FILE or the packaged default.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from decimal import Decimal

from hr_config import get_active_policy, get_database_url
from hr_kernel.db.engine import create_tables, get_session, init_engine_from_url
from hr_kernel.exceptions import HrEngineError
from hr_kernel.logging_config import configure_logging
from hr_modules.payroll import PayrollRunPreview, PayrollRunService

W = 80


def hline(char: str = "=") -> str:
    return char * W


def _fmt(amount: Decimal) -> str:
    return f"{amount:,.2f}"


def print_preview(preview: PayrollRunPreview) -> None:
    print(hline())
    print(f"  PAYROLL PREVIEW {preview.period.key}".ljust(W))
    print(hline())
    print(f"  {'Staff':<12} {'Name':<24} {'Type':<9} {'Earnings':>12} {'Deductions':>12} {'Net':>12}")
    print(f"  {'-'*12} {'-'*24} {'-'*9} {'-'*12} {'-'*12} {'-'*12}")
    for line in preview.lines:
        print(
            f"  {line.staff_id:<12} {line.display_name[:24]:<24} {line.pay_type.value:<9} "
            f"{_fmt(line.earnings.total):>12} {_fmt(line.deductions.total):>12} "
            f"{_fmt(line.net_pay):>12}"
        )
    print()
    print(f"  Total net pay: {_fmt(preview.total_net_pay)}")
    for skipped in preview.skipped:
        print(f"  SKIPPED {skipped.staff_id}: {skipped.reason}")
    for error in preview.errors:
        print(f"  ERROR   {error.staff_id}: [{error.code}] {error.message}")
    if preview.is_partial:
        print(f"  PARTIAL: {len(preview.unfinished_staff_ids)} staff not computed")
    if preview.is_fully_finalized:
        print("  All eligible staff are already finalized for this period.")
    print()


def preview_as_json(preview: PayrollRunPreview) -> str:
    return json.dumps(
        {
            "period": preview.period.key,
            "is_partial": preview.is_partial,
            "is_fully_finalized": preview.is_fully_finalized,
            "total_net_pay": str(preview.total_net_pay),
            "lines": [
                {
                    "staff_id": line.staff_id,
                    "pay_type": line.pay_type.value,
                    "earnings": str(line.earnings.total),
                    "deductions": str(line.deductions.total),
                    "net_pay": str(line.net_pay),
                    "previous_streak": line.previous_streak,
                    "new_streak": line.new_streak,
                    "missing_inputs": list(line.missing_inputs),
                }
                for line in preview.lines
            ],
            "skipped": [{"staff_id": s.staff_id, "reason": s.reason} for s in preview.skipped],
            "errors": [
                {"staff_id": e.staff_id, "code": e.code, "message": e.message}
                for e in preview.errors
            ],
        },
        indent=2,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hr-payroll-run",
        description="Preview, finalize or revert a monthly payroll run.",
    )
    parser.add_argument("--database-url", help="SQLAlchemy URL (default: HR_DATABASE_URL)")
    parser.add_argument("--policy-file", help="Policy YAML (default: HR_POLICY_FILE)")
    parser.add_argument("--log-level", default="WARNING", help="Log level for JSON logs on stderr")
    parser.add_argument("--create-tables", action="store_true", help="Create missing tables first")
    sub = parser.add_subparsers(dest="command", required=True)

    preview = sub.add_parser("preview", help="Compute the run without writing")
    finalize = sub.add_parser("finalize", help="Compute and persist the run")
    for p in (preview, finalize):
        p.add_argument("--year", type=int, required=True)
        p.add_argument("--month", type=int, required=True)
        p.add_argument("--staff", action="append", dest="staff_ids", help="Limit to staff id (repeatable)")
        p.add_argument("--deadline", type=float, help="Seconds before the preview is cut off")
        p.add_argument("--json", action="store_true", help="Print the preview as JSON")
    finalize.add_argument("--actor", required=True)

    revert = sub.add_parser("revert", help="Revert payslips")
    revert.add_argument("--actor", required=True)
    revert.add_argument("--payslip", action="append", dest="payslip_ids")
    revert.add_argument("--year", type=int)
    revert.add_argument("--month", type=int)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))

    try:
        policy = get_active_policy(args.policy_file)
    except (OSError, ValueError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 2

    init_engine_from_url(args.database_url or get_database_url())
    if args.create_tables:
        create_tables()

    session = get_session()
    try:
        service = PayrollRunService(session, policy=policy)

        if args.command in ("preview", "finalize"):
            preview = service.preview_run(
                args.year, args.month, staff_ids=args.staff_ids, deadline_seconds=args.deadline,
            )
            if args.json:
                print(preview_as_json(preview))
            else:
                print_preview(preview)
            if args.command == "finalize":
                result = service.finalize_run(preview, actor_id=args.actor)
                print(f"  Finalized {len(result.payslip_ids)} payslips, "
                      f"net {_fmt(result.total_net_pay)}")
            return 1 if preview.errors else 0

        if args.payslip_ids:
            result = service.revert_payslips(args.payslip_ids, actor_id=args.actor)
        elif args.year is not None and args.month is not None:
            result = service.revert_run(args.year, args.month, actor_id=args.actor)
        else:
            print("  ERROR: revert needs --payslip or --year/--month", file=sys.stderr)
            return 2
        print(f"  Reverted {len(result.reverted_payslip_ids)} payslips")
        for payslip_id in result.reverted_payslip_ids:
            print(f"    {payslip_id}")
        return 0

    except HrEngineError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1
    finally:
        session.close()


if __name__ == "__main__":
    sys.exit(main())

"""Tests for the hr-payroll-run command line (scripts/payroll_run.py)."""

import json
from datetime import date

import pytest

from hr_kernel.db.engine import create_tables, init_engine_from_url, reset_engine, session_scope
from scripts.payroll_run import build_parser, main
from tests.factories import company_config, full_attendance, make_staff, salaried_job, seed


@pytest.fixture
def database_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'hr.db'}"
    yield url
    reset_engine()


@pytest.fixture
def seeded_database(database_url):
    init_engine_from_url(database_url)
    create_tables()
    schedules, attendance = full_attendance("S1", date(2025, 10, 1), date(2025, 10, 31))
    with session_scope() as session:
        seed(
            session,
            config=company_config(),
            staff=[make_staff("S1", job=salaried_job("31000"))],
            schedules=schedules,
            attendance=attendance,
        )
    return database_url


class TestParser:

    def test_repeatable_staff(self):
        args = build_parser().parse_args(
            ["preview", "--year", "2025", "--month", "10", "--staff", "S1", "--staff", "S2"]
        )
        assert args.staff_ids == ["S1", "S2"]

    def test_finalize_requires_actor(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["finalize", "--year", "2025", "--month", "10"])


class TestMain:

    def test_missing_config_reports_code(self, database_url, capsys):
        code = main(["--database-url", database_url, "--create-tables",
                     "preview", "--year", "2025", "--month", "10"])
        assert code == 1
        assert "COMPANY_CONFIG_NOT_FOUND" in capsys.readouterr().err

    def test_preview_json(self, seeded_database, capsys):
        code = main(["--database-url", seeded_database,
                     "preview", "--year", "2025", "--month", "10", "--json"])
        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["period"] == "2025-10"
        assert payload["total_net_pay"] == "31400.00"
        assert payload["lines"][0]["new_streak"] == 1

    def test_finalize_then_revert(self, seeded_database, capsys):
        assert main(["--database-url", seeded_database, "finalize",
                     "--year", "2025", "--month", "10", "--actor", "hr-admin"]) == 0
        assert "Finalized 1 payslips" in capsys.readouterr().out

        assert main(["--database-url", seeded_database, "revert",
                     "--actor", "hr-admin", "--payslip", "S1_2025_10"]) == 0
        assert "S1_2025_10" in capsys.readouterr().out

    def test_revert_needs_target(self, seeded_database, capsys):
        assert main(["--database-url", seeded_database, "revert", "--actor", "hr-admin"]) == 2

    def test_bad_policy_file(self, database_url, tmp_path, capsys):
        bad = tmp_path / "policy.yaml"
        bad.write_text("grace: 5\n")
        code = main(["--database-url", database_url, "--policy-file", str(bad),
                     "preview", "--year", "2025", "--month", "10"])
        assert code == 2
        assert "Unknown policy keys" in capsys.readouterr().err

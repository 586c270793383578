"""Tests for the command line trigger."""

from __future__ import annotations

from datetime import timedelta

import pytest

from license_notifier.config import reset_settings_cache
from license_notifier.infrastructure import database
from license_notifier.interfaces import cli
from license_notifier.utils import utc_day_start


def test_missing_configuration_exits_with_config_error(monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings_cache()

    assert cli.main([]) == cli.EXIT_CONFIG_ERROR


def test_unreachable_store_exits_non_zero(monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'missing' / 'nowhere.db'}")
    reset_settings_cache()
    database.reset_engine()

    assert cli.main([]) == cli.EXIT_STORE_UNAVAILABLE


def test_run_once_succeeds_with_logged_unit_errors(seed, mail_gateway):
    today = utc_day_start().date()
    seed.license("L1", item="Adobe CC", tag="NPT")
    seed.serial("S1", license_id="L1", label="AD-1", end_date=today - timedelta(days=2))
    seed.user("ann")
    seed.user("ben")
    mail_gateway.explode.add("ann@example.com")

    assert cli.main([]) == cli.EXIT_OK
    assert mail_gateway.recipients == ["ben@example.com"]
    assert {row.email_status for row in seed.notifications()} == {"failed", "sent"}


def test_retry_failed_resends_through_the_mail_gateway(seed, mail_gateway):
    today = utc_day_start().date()
    seed.license("L1", item="Adobe CC", tag="NPT")
    seed.serial("S1", license_id="L1", label="AD-1", end_date=today - timedelta(days=2))
    seed.user("ann")
    seed.user("ben")
    mail_gateway.reject.add("ann@example.com")
    assert cli.main([]) == cli.EXIT_OK
    mail_gateway.reject.clear()

    assert cli.main(["--retry-failed"]) == cli.EXIT_OK

    assert mail_gateway.recipients == ["ben@example.com", "ann@example.com"]
    assert mail_gateway.requests[-1].subject == "URGENT: AD-1 License Expired"
    assert [row.email_status for row in seed.notifications()] == ["sent", "sent"]


def test_init_db_creates_tables_on_an_empty_store(mail_gateway):
    assert cli.main(["--init-db"]) == cli.EXIT_OK


def test_interval_must_be_positive():
    with pytest.raises(SystemExit):
        cli.parse_args(["--interval-minutes", "0"])

"""Tests for configuration settings."""

import logging
from datetime import date
from decimal import Decimal

import structlog

from gigo_sales.config import configure_logging, get_logger
from gigo_sales.config.settings import get_settings
from gigo_sales.records import PlanRecord


def test_settings_has_defaults():
    """Test that settings has sensible defaults."""
    settings = get_settings()

    assert settings.sales_categories == ["qurt", "toys", "milchofka"]
    assert settings.category_distribution == {"qurt": 15.0, "toys": 40.0, "milchofka": 45.0}
    assert settings.debt_limit_percent == 7.0
    assert settings.plan_window_days == 90
    assert settings.reconcile_mode == "delta"
    assert settings.bonus_tiers_file is None
    assert settings.log_level == "INFO"


def test_settings_loads_from_env(monkeypatch):
    """Test that settings loads from environment variables."""
    monkeypatch.setenv("DEBT_LIMIT_PERCENT", "5")
    monkeypatch.setenv("RECONCILE_MODE", "recompute")
    monkeypatch.setenv("SALES_CATEGORIES", '["qurt", "toys"]')
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.debt_limit_percent == 5.0
    assert settings.reconcile_mode == "recompute"
    assert settings.sales_categories == ["qurt", "toys"]


def test_env_debt_limit_flows_into_new_plans(monkeypatch):
    monkeypatch.setenv("DEBT_LIMIT_PERCENT", "12.5")
    get_settings.cache_clear()

    plan = PlanRecord.create("muxlisa", 1000, date(2025, 1, 1))

    assert plan.debt_limit_percent == Decimal("12.5")


def test_settings_are_cached():
    """Test that get_settings returns cached instance."""
    settings1 = get_settings()
    settings2 = get_settings()

    assert settings1 is settings2


def test_configure_logging_json(caplog):
    """Test that JSON logging renders structured events."""
    configure_logging(level="INFO", format="json")
    caplog.set_level(logging.INFO)
    try:
        get_logger("gigo_sales.test").info("report_approved", report_id="r1")
    finally:
        structlog.reset_defaults()

    assert '"event": "report_approved"' in caplog.text

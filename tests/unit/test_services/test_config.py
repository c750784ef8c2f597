"""Tests for environment-backed report settings."""

import pytest
from unittest.mock import patch
from zoneinfo import ZoneInfo
from src.utils.config import (
    DEFAULT_EXTRA_CHAT_IDS,
    DEFAULT_RECIPIENT_USER_IDS,
    ReportSettings,
)


@pytest.mark.unit
def test_defaults():
    settings = ReportSettings()

    assert settings.recipient_user_ids == ["cme8bv80n00000swo16enzbxp", "cme8bv89h00010swo8kk9gus7"]
    assert settings.extra_chat_ids == ["1000901678"]
    assert settings.reminder_excluded_user_ids == DEFAULT_RECIPIENT_USER_IDS
    assert settings.tzinfo == ZoneInfo("UTC")


@pytest.mark.unit
def test_defaults_are_copies():
    settings = ReportSettings()
    settings.extra_chat_ids.append("999")

    assert DEFAULT_EXTRA_CHAT_IDS == ["1000901678"]


@pytest.mark.unit
def test_from_env_overrides():
    env = {
        "APP_BASE_URL": "https://tasks.example.org/",
        "REPORT_TIMEZONE": "Asia/Ho_Chi_Minh",
        "REPORT_RECIPIENT_USER_IDS": "u1, u2,,",
        "REPORT_EXTRA_CHAT_IDS": "",
        "CLEANING_SCHEDULE": '{"Monday": "Ann"}',
    }
    with patch.dict("os.environ", env):
        settings = ReportSettings.from_env()

    assert settings.app_base_url == "https://tasks.example.org"
    assert settings.tzinfo == ZoneInfo("Asia/Ho_Chi_Minh")
    assert settings.recipient_user_ids == ["u1", "u2"]
    assert settings.extra_chat_ids == []
    assert settings.reminder_excluded_user_ids == ["u1", "u2"]
    assert settings.cleaning_schedule == {"Monday": "Ann"}


@pytest.mark.unit
def test_from_env_without_overrides(monkeypatch):
    for name in (
        "REPORT_RECIPIENT_USER_IDS",
        "REPORT_EXTRA_CHAT_IDS",
        "REMINDER_EXCLUDED_USER_IDS",
        "CLEANING_SCHEDULE",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = ReportSettings.from_env()

    assert settings.recipient_user_ids == DEFAULT_RECIPIENT_USER_IDS
    assert settings.extra_chat_ids == DEFAULT_EXTRA_CHAT_IDS
    assert settings.cleaning_schedule == {}


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["{bad", '["Ann", "Bob"]', "   "])
def test_from_env_ignores_unusable_cleaning_schedule(monkeypatch, raw):
    monkeypatch.setenv("CLEANING_SCHEDULE", raw)

    settings = ReportSettings.from_env()

    assert settings.cleaning_schedule == {}

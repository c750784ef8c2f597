"""Shared pytest fixtures and configuration."""

import os
import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("STORAGE_BUCKET", "test-bucket")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456789:TEST-token-value-for-unit-tests-only")
os.environ.setdefault("TELEGRAM_BOT_USERNAME", "origins_test_bot")
os.environ.setdefault("APP_BASE_URL", "https://origins.example.com")
os.environ.setdefault("REPORT_TIMEZONE", "UTC")
os.environ.setdefault("LOG_FORMAT", "text")

from src.utils.config import ReportSettings  # noqa: E402
from tests.utils.factories import create_task_data  # noqa: E402


@pytest.fixture
def report_settings():
    """Report settings with the default recipients and a known base URL."""
    return ReportSettings(app_base_url="https://origins.example.com", timezone="UTC")


@pytest.fixture
def saturday_noon():
    """Saturday 2024-12-14 12:00 UTC (week of Monday 2024-12-09)."""
    return datetime(2024, 12, 14, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def tuesday_noon():
    """Tuesday 2024-12-10 12:00 UTC."""
    return datetime(2024, 12, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_task_rows():
    """Bob's Wednesday task listed before Ann's Monday task."""
    return [
        create_task_data(
            title="Fix the printer",
            staff_name="Bob",
            created_at="2024-12-11T09:30:00+00:00",
            priority="HIGH",
            progress=50,
        ),
        create_task_data(
            title="File the invoices",
            staff_name="Ann",
            created_at="2024-12-09T08:00:00+00:00",
            priority="LOW",
            progress=100,
            status="COMPLETED",
            assigned_by_name="Maria",
        ),
    ]


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client whose table() queries chain back to themselves."""
    client = MagicMock()
    query = MagicMock()
    for method in ("select", "eq", "gte", "lte", "order", "in_", "is_", "insert", "update", "delete"):
        getattr(query, method).return_value = query
    query.not_ = query
    query.execute.return_value = MagicMock(data=[])
    client.table.return_value = query
    return client


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2024-12-14 12:00:00") as frozen_time:
        yield frozen_time

"""Environment-backed settings for the report and reminder pipelines."""

import os
import json
from typing import Optional
from zoneinfo import ZoneInfo
from pydantic import BaseModel, Field
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

# Managers who receive the weekly report
DEFAULT_RECIPIENT_USER_IDS = ["cme8bv80n00000swo16enzbxp", "cme8bv89h00010swo8kk9gus7"]
# Always notified, whether or not it belongs to a user
DEFAULT_EXTRA_CHAT_IDS = ["1000901678"]


def _split_ids(raw: Optional[str], default: list[str]) -> list[str]:
    """Parse a comma-separated env value, falling back to default when unset."""
    if raw is None:
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


def _parse_schedule(raw: Optional[str]) -> dict[str, str]:
    """Parse the CLEANING_SCHEDULE JSON object; anything malformed means no schedule."""
    if not raw or not raw.strip():
        return {}
    try:
        schedule = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring malformed CLEANING_SCHEDULE", error=str(e))
        return {}
    if not isinstance(schedule, dict):
        logger.warning("Ignoring CLEANING_SCHEDULE that is not an object", value_type=type(schedule).__name__)
        return {}
    return {str(day): str(person) for day, person in schedule.items()}


class ReportSettings(BaseModel):
    """Settings injected into the weekly report and reminder services."""
    app_base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL used to build permanent retrieval links"
    )
    timezone: str = Field(default="UTC", description="IANA timezone for week windows and dates")
    recipient_user_ids: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RECIPIENT_USER_IDS),
        description="User IDs whose chat IDs receive the weekly report"
    )
    extra_chat_ids: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTRA_CHAT_IDS),
        description="Chat IDs appended to every report run unconditionally"
    )
    reminder_excluded_user_ids: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RECIPIENT_USER_IDS),
        description="User IDs skipped by the daily reminder"
    )
    cleaning_schedule: dict[str, str] = Field(
        default_factory=dict,
        description="Weekday name -> person on cleaning duty"
    )

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def from_env(cls) -> "ReportSettings":
        """Build settings from environment variables."""
        recipients = _split_ids(os.environ.get("REPORT_RECIPIENT_USER_IDS"), DEFAULT_RECIPIENT_USER_IDS)
        return cls(
            app_base_url=os.environ.get("APP_BASE_URL", "http://localhost:3000").rstrip("/"),
            timezone=os.environ.get("REPORT_TIMEZONE", "UTC"),
            recipient_user_ids=recipients,
            extra_chat_ids=_split_ids(os.environ.get("REPORT_EXTRA_CHAT_IDS"), DEFAULT_EXTRA_CHAT_IDS),
            reminder_excluded_user_ids=_split_ids(
                os.environ.get("REMINDER_EXCLUDED_USER_IDS"), recipients
            ),
            cleaning_schedule=_parse_schedule(os.environ.get("CLEANING_SCHEDULE")),
        )

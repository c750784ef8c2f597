"""Weekly report orchestration - fetch, build, publish, notify."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional
from pydantic import ValidationError
from ulid import ULID
from src.models.report import ReportOutcome, ReportRunResult, ReportWindow
from src.models.task import Task
from src.services.report_builder import build_report
from src.services.storage import build_report_key, permanent_report_url, publish_artifact, PDF_CONTENT_TYPE
from src.services.supabase_client import fetch_tasks_in_window, get_users_with_chat_ids
from src.services.telegram import download_button, send_telegram_message
from src.utils.config import ReportSettings
from src.utils.errors import OriginsError, ReportGenerationError
from src.utils.logging import StructuredLogger, get_structured_logger, log_timing, mask_chat_id

logger = get_structured_logger(__name__)

SATURDAY = 5  # datetime.weekday()
TARGET_SATURDAY = "SAT"
FORCE_MODE = "sat"


def current_week_window(now: datetime) -> ReportWindow:
    """Monday 00:00:00.000 through Saturday 23:59:59.999 of the week containing now."""
    monday = (now - timedelta(days=now.weekday())).replace(hour=0, minute=0, second=0, microsecond=0)
    saturday_end = (monday + timedelta(days=5)).replace(hour=23, minute=59, second=59, microsecond=999000)
    return ReportWindow(start=monday, end=saturday_end)


def resolve_report_target(mode: Optional[str], today: datetime) -> Optional[str]:
    """"sat" always targets Saturday; automatic mode only proceeds on a Saturday."""
    if mode == FORCE_MODE:
        return TARGET_SATURDAY
    if today.weekday() == SATURDAY:
        return TARGET_SATURDAY
    return None


def report_title(window: ReportWindow) -> str:
    return f"Tasks Report ({window.label})"


def sort_report_tasks(tasks: list[Task]) -> list[Task]:
    """Priority descending (URGENT first), then oldest first."""
    return sorted(tasks, key=lambda task: (-task.priority.rank, task.created_at))


def parse_tasks(rows: list[dict]) -> list[Task]:
    try:
        return [Task.model_validate(row) for row in rows]
    except ValidationError as e:
        raise ReportGenerationError(f"Malformed task row: {e.error_count()} validation error(s)") from e


async def resolve_recipients(settings: ReportSettings) -> list[str]:
    """Chat IDs of the configured recipients that have one, plus the extra chat IDs."""
    users = await get_users_with_chat_ids(settings.recipient_user_ids)
    chat_ids = [str(user["telegram_chat_id"]) for user in users if user.get("telegram_chat_id")]
    chat_ids.extend(settings.extra_chat_ids)
    return chat_ids


async def _generate_and_publish(
    now: datetime,
    settings: ReportSettings,
    run_id: str,
    run_logger: StructuredLogger
) -> ReportRunResult:
    """Window, fetch, build and publish. Raises on any failure."""
    window = current_week_window(now)

    with log_timing("fetch_report_tasks", logger=run_logger):
        rows = await fetch_tasks_in_window(window.start, window.end)
    tasks = sort_report_tasks(parse_tasks(rows))

    title = report_title(window)
    with log_timing("build_report", logger=run_logger, task_count=len(tasks)):
        document = build_report(tasks, title, tz=settings.tzinfo)

    key = build_report_key(window.start, now.astimezone(timezone.utc))
    with log_timing("publish_report", logger=run_logger, key=key):
        private_url = await publish_artifact(document.content, key, PDF_CONTENT_TYPE)

    return ReportRunResult(
        outcome=ReportOutcome.SUCCESS,
        run_id=run_id,
        task_count=len(tasks),
        title=title,
        window=window,
        key=key,
        private_url=private_url,
        permanent_url=permanent_report_url(key, settings.app_base_url),
    )


async def _notify_all(chat_ids: list[str], message: str, link: str) -> list[tuple[str, BaseException]]:
    """Send to every chat concurrently; returns the failures once all have settled."""
    results = await asyncio.gather(
        *(
            send_telegram_message(
                chat_id,
                message,
                parse_mode=None,
                reply_markup=download_button(link),
                disable_preview=True,
            )
            for chat_id in chat_ids
        ),
        return_exceptions=True,
    )
    return [
        (chat_id, result)
        for chat_id, result in zip(chat_ids, results)
        if isinstance(result, BaseException)
    ]


def _now(settings: ReportSettings, now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(settings.tzinfo)
    if now.tzinfo is None:
        return now.replace(tzinfo=settings.tzinfo)
    return now.astimezone(settings.tzinfo)


async def run_weekly_report(
    mode: Optional[str] = None,
    now: Optional[datetime] = None,
    settings: Optional[ReportSettings] = None
) -> ReportRunResult:
    """
    Run the weekly report pipeline once.

    Terminal states: SUCCESS, SKIPPED (automatic mode, not Saturday),
    NOT_FOUND (no chat IDs resolved), GENERATION_FAILED (before any send),
    NOTIFICATION_FAILED (artifact stored, at least one send failed).
    """
    settings = settings or ReportSettings.from_env()
    now = _now(settings, now)
    run_id = str(ULID())
    run_logger = logger.bind(run_id=run_id)

    if resolve_report_target(mode, now) is None:
        run_logger.info("Weekly report skipped", mode=mode, weekday=now.strftime("%A"))
        return ReportRunResult(outcome=ReportOutcome.SKIPPED, run_id=run_id)

    run_logger.info("Weekly report started", mode=mode or "auto")

    try:
        result = await _generate_and_publish(now, settings, run_id, run_logger)
        chat_ids = await resolve_recipients(settings)
    except OriginsError as e:
        run_logger.error("Weekly report generation failed", error=str(e), exc_info=True)
        return ReportRunResult(outcome=ReportOutcome.GENERATION_FAILED, run_id=run_id, error=str(e))

    if not chat_ids:
        run_logger.warning("No report recipients resolved", key=result.key)
        return result.model_copy(update={
            "outcome": ReportOutcome.NOT_FOUND,
            "error": "No manager Telegram chat IDs found",
        })

    message = f"📄 Weekly Tasks Report\n{result.title}"
    with log_timing("notify_report_recipients", logger=run_logger, recipients=len(chat_ids)):
        failures = await _notify_all(chat_ids, message, result.permanent_url)

    result = result.model_copy(update={
        "recipient_count": len(chat_ids),
        "failed_recipient_count": len(failures),
    })

    if failures:
        for chat_id, error in failures:
            run_logger.error(
                "Report notification failed",
                chat_id=mask_chat_id(chat_id),
                error=str(error)
            )
        return result.model_copy(update={
            "outcome": ReportOutcome.NOTIFICATION_FAILED,
            "error": "Telegram send failed",
        })

    run_logger.info(
        "Weekly report completed",
        task_count=result.task_count,
        key=result.key,
        recipients=len(chat_ids)
    )
    return result


async def generate_latest_report(
    now: Optional[datetime] = None,
    settings: Optional[ReportSettings] = None
) -> ReportRunResult:
    """Build and publish the current week's report without notifying anyone."""
    settings = settings or ReportSettings.from_env()
    now = _now(settings, now)
    run_id = str(ULID())
    run_logger = logger.bind(run_id=run_id)

    try:
        result = await _generate_and_publish(now, settings, run_id, run_logger)
    except OriginsError as e:
        run_logger.error("Latest report generation failed", error=str(e), exc_info=True)
        return ReportRunResult(outcome=ReportOutcome.GENERATION_FAILED, run_id=run_id, error=str(e))

    run_logger.info("Latest report generated", key=result.key, task_count=result.task_count)
    return result

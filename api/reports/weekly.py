"""Weekly report trigger (Vercel cron or on demand with ?mode=sat)."""

from src.models.report import ReportOutcome, ReportRunResult
from src.services.weekly_report import run_weekly_report
from src.utils.http import JSONHandler, run_sync
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


def build_response(result: ReportRunResult) -> tuple[int, dict]:
    """Map a run outcome to (status, JSON body)."""
    if result.outcome == ReportOutcome.SKIPPED:
        return 200, {"message": "Not Saturday; skipping."}

    if result.outcome == ReportOutcome.GENERATION_FAILED:
        return 500, {"error": "Failed to generate/send report"}

    if result.outcome == ReportOutcome.NOT_FOUND:
        return 404, {"error": "No manager Telegram chat IDs found", "permanentUrl": result.permanent_url}

    if result.outcome == ReportOutcome.NOTIFICATION_FAILED:
        return 502, {
            "error": "Telegram send failed",
            "permanentUrl": result.permanent_url,
            "failedRecipients": result.failed_recipient_count,
        }

    return 200, {
        "ok": True,
        "count": result.task_count,
        "title": result.title,
        "dateRange": {
            "start": result.window.start.isoformat(),
            "end": result.window.end.isoformat(),
        },
        "url": result.private_url,
        "permanentUrl": result.permanent_url,
        "recipients": result.recipient_count,
    }


class handler(JSONHandler):
    """Run the weekly report pipeline and summarize the outcome."""

    def do_GET(self):
        with correlation_context():
            try:
                mode = self.query_params().get("mode")
                result = run_sync(run_weekly_report(mode=mode))
                status, body = build_response(result)
                self.send_json(status, body)
            except Exception as e:
                logger.error("Weekly report error", error=str(e), exc_info=True)
                self.send_json(500, {"error": "Failed to generate/send report"})

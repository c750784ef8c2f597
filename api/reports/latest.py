"""Generate and publish the current week's report without notifying anyone."""

from src.models.report import ReportOutcome
from src.services.weekly_report import generate_latest_report
from src.utils.http import JSONHandler, run_sync
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


class handler(JSONHandler):

    def do_GET(self):
        with correlation_context():
            try:
                result = run_sync(generate_latest_report())
            except Exception as e:
                logger.error("Latest report generation error", error=str(e), exc_info=True)
                self.send_json(500, {
                    "success": False,
                    "error": "Failed to generate report",
                    "details": str(e),
                })
                return

            if result.outcome != ReportOutcome.SUCCESS:
                self.send_json(500, {
                    "success": False,
                    "error": "Failed to generate report",
                    "details": result.error or "Unknown error",
                })
                return

            self.send_json(200, {
                "success": True,
                "count": result.task_count,
                "title": result.title,
                "dateRange": {
                    "start": result.window.start.isoformat(),
                    "end": result.window.end.isoformat(),
                },
                "pdfUrl": result.permanent_url,
            })

"""Daily reminder endpoint (Vercel cron)."""

from src.services.reminders import send_daily_reminders
from src.utils.http import JSONHandler, run_sync
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


class handler(JSONHandler):

    def do_GET(self):
        with correlation_context():
            try:
                summary = run_sync(send_daily_reminders())
            except Exception as e:
                logger.error("Daily reminder error", error=str(e), exc_info=True)
                self.send_json(500, {"success": False, "error": "Failed to send reminders"})
                return

            self.send_json(200, {
                "success": True,
                "message": "Telegram messages sent successfully",
                "sent": summary["sent"],
                "failed": summary["failed"],
                "todayCleaner": summary["today_cleaner"],
            })

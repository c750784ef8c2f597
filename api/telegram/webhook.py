"""Telegram bot webhook endpoint."""

from src.services.telegram_webhook import handle_telegram_update
from src.utils.http import JSONHandler, run_sync
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


class handler(JSONHandler):
    """Always acknowledges so Telegram does not redeliver the update."""

    def do_POST(self):
        with correlation_context():
            try:
                update = self.read_json_body()
                run_sync(handle_telegram_update(update))
            except Exception as e:
                logger.error("Telegram webhook error", error=str(e), exc_info=True)
            self.send_json(200, {"status": "ok"})

"""Telegram connect link for a user (?userId=...)."""

import os
from src.services.supabase_client import get_user_by_id
from src.services.telegram import build_connect_link
from src.utils.http import JSONHandler, run_sync
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


class handler(JSONHandler):

    def do_GET(self):
        with correlation_context():
            user_id = self.query_params().get("userId")
            if not user_id:
                self.send_json(400, {"error": "userId is required"})
                return

            bot_username = os.environ.get("TELEGRAM_BOT_USERNAME")
            if not bot_username:
                logger.error("TELEGRAM_BOT_USERNAME environment variable is not set")
                self.send_json(500, {"error": "Service configuration is incomplete."})
                return

            try:
                user = run_sync(get_user_by_id(user_id))
            except Exception as e:
                logger.error("Telegram link generation error", error=str(e), exc_info=True)
                self.send_json(500, {"error": "Failed to generate link."})
                return

            if not user:
                self.send_json(404, {"error": "User not found."})
                return

            self.send_json(200, {"link": build_connect_link(user["id"], bot_username)})

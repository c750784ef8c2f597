"""Private file lookup - returns a short-lived signed download URL."""

from src.services.storage import get_private_file_signed_url
from src.utils.errors import StorageError
from src.utils.http import JSONHandler, run_sync
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


class handler(JSONHandler):

    def do_GET(self):
        with correlation_context():
            key = self.query_params().get("key")
            if not key:
                self.send_json(400, {"error": "Missing key parameter"})
                return

            try:
                url = run_sync(get_private_file_signed_url(key))
            except StorageError as e:
                logger.warning("Signed URL generation failed", key=key, error=str(e))
                self.send_json(404, {"error": "File not found"})
                return
            except Exception as e:
                logger.error("Private file error", key=key, error=str(e), exc_info=True)
                self.send_json(500, {"error": "Internal server error"})
                return

            self.send_json(200, {"url": url})

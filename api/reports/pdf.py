"""Permanent report retrieval - proxies stored PDFs under reports/."""

from src.services.storage import PDF_CONTENT_TYPE, fetch_artifact, is_report_key
from src.utils.errors import StorageError
from src.utils.http import JSONHandler, run_sync
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)

CACHE_CONTROL = "public, max-age=31536000"


class handler(JSONHandler):
    """
    Serve a stored report.

    No session is required, so Telegram link previews and downloads work;
    access is limited to keys under reports/.
    """

    def do_GET(self):
        with correlation_context():
            key = self.query_params().get("key")
            if not key:
                self.send_json(400, {"error": "Missing key parameter"})
                return

            if not is_report_key(key):
                logger.warning("Rejected report key outside reports/", key=key)
                self.send_json(403, {"error": "Access denied"})
                return

            try:
                content = run_sync(fetch_artifact(key))
            except StorageError as e:
                logger.warning("Report not found", key=key, error=str(e))
                self.send_json(404, {"error": "File not found"})
                return
            except Exception as e:
                logger.error("PDF serving error", key=key, error=str(e), exc_info=True)
                self.send_json(500, {"error": "Internal server error"})
                return

            filename = key.split("/")[-1]
            self.send_response(200)
            self.send_header('Content-Type', PDF_CONTENT_TYPE)
            self.send_header('Content-Disposition', f'inline; filename="{filename}"')
            self.send_header('Content-Length', str(len(content)))
            self.send_header('Cache-Control', CACHE_CONTROL)
            self.end_headers()
            self.wfile.write(content)

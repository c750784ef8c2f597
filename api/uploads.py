"""Presigned upload URL for task and private files (POST)."""

from src.services.storage import build_upload_key, get_upload_signed_url
from src.utils.http import JSONHandler, run_sync
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


class handler(JSONHandler):

    def do_POST(self):
        with correlation_context():
            body = self.read_json_body()
            filename = body.get("filename")
            content_type = body.get("contentType")
            is_private = bool(body.get("isPrivate"))
            user_id = body.get("userId")

            if not filename or not content_type:
                self.send_json(400, {"error": "Filename and content type are required"})
                return
            if is_private and not user_id:
                self.send_json(400, {"error": "User ID required for private uploads"})
                return

            try:
                key = build_upload_key(str(filename), user_id=user_id, private=is_private)
            except ValueError as e:
                self.send_json(400, {"error": str(e)})
                return

            try:
                upload = run_sync(get_upload_signed_url(key, content_type))
            except Exception as e:
                logger.error("Presigned URL generation error", key=key, error=str(e), exc_info=True)
                self.send_json(500, {"error": "Failed to generate presigned URL"})
                return

            logger.info("Upload URL issued", key=key, private=is_private)
            self.send_json(200, {
                "signedUrl": upload["signed_url"],
                "privateUrl": upload["private_url"],
                "key": key,
            })

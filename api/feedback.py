"""Feedback list/lookup (GET) and creation (POST)."""

from pydantic import ValidationError
from src.models.task import parse_media
from src.services.feedback import build_feedback_filters, create_feedback_record, list_feedback_records
from src.services.supabase_client import get_feedback_by_id
from src.utils.errors import FeedbackPermissionError
from src.utils.http import JSONHandler, run_sync
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


class handler(JSONHandler):

    def do_GET(self):
        with correlation_context():
            params = self.query_params()
            feedback_id = params.get("id")

            try:
                if feedback_id:
                    feedback = run_sync(get_feedback_by_id(feedback_id))
                    if not feedback:
                        self.send_json(404, {"error": "Feedback not found"})
                        return
                else:
                    filters = build_feedback_filters(
                        staff_id=params.get("staffId"),
                        manager_id=params.get("managerId"),
                        feedback_type=params.get("type"),
                        task_id=params.get("taskId"),
                    )
                    feedback = run_sync(list_feedback_records(filters))
            except ValueError:
                self.send_json(400, {"error": "Invalid feedback type"})
                return
            except Exception as e:
                logger.error("Feedback fetch error", error=str(e), exc_info=True)
                self.send_json(500, {"error": "Failed to fetch feedback"})
                return

            self.send_json(200, {"feedback": feedback})

    def do_POST(self):
        with correlation_context():
            body = self.read_json_body()
            if not body.get("content") or not body.get("staffId") or not body.get("managerId"):
                self.send_json(400, {"error": "Content, staff ID, and manager ID are required"})
                return

            try:
                media = parse_media(body.get("media"))
            except (ValidationError, TypeError) as e:
                self.send_json(400, {"error": "Invalid media entry", "details": str(e)})
                return

            try:
                feedback = run_sync(create_feedback_record(
                    body["content"],
                    body["staffId"],
                    body["managerId"],
                    role=body.get("userRole"),
                    feedback_type=body.get("type"),
                    task_id=body.get("taskId"),
                    media=media,
                ))
            except FeedbackPermissionError as e:
                self.send_json(403, {"error": str(e)})
                return
            except ValueError:
                self.send_json(400, {"error": "Invalid feedback type"})
                return
            except Exception as e:
                logger.error("Feedback creation error", error=str(e), exc_info=True)
                self.send_json(500, {"error": "Failed to create feedback"})
                return

            self.send_json(200, {"feedback": feedback})

"""Task media: attach uploaded files (POST) or remove one (DELETE)."""

from pydantic import ValidationError
from src.models.task import parse_media
from src.services.task_media import add_media_to_task, remove_media_from_task
from src.utils.errors import MediaNotFoundError, TaskNotFoundError, TaskPermissionError
from src.utils.http import JSONHandler, run_sync
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


class handler(JSONHandler):

    def do_POST(self):
        with correlation_context():
            body = self.read_json_body()
            task_id = body.get("taskId")
            if not task_id:
                self.send_json(400, {"error": "Task ID is required"})
                return

            items = body.get("media")
            if not isinstance(items, list) or not items:
                self.send_json(400, {"error": "Media files are required"})
                return
            try:
                media = parse_media(items)
            except (ValidationError, TypeError) as e:
                self.send_json(400, {"error": "Invalid media entry", "details": str(e)})
                return

            try:
                task = run_sync(add_media_to_task(task_id, media, body.get("userId"), body.get("userRole")))
            except TaskNotFoundError:
                self.send_json(404, {"error": "Task not found"})
                return
            except TaskPermissionError as e:
                self.send_json(403, {"error": str(e)})
                return
            except Exception as e:
                logger.error("Add media error", task_id=task_id, error=str(e), exc_info=True)
                self.send_json(500, {"error": "Failed to add media to task"})
                return

            self.send_json(200, {
                "task": task,
                "message": f"Successfully added {len(media)} media file(s) to task",
            })

    def do_DELETE(self):
        with correlation_context():
            params = self.query_params()
            task_id = params.get("taskId")
            media_id = params.get("mediaId")
            user_id = params.get("userId")
            role = params.get("userRole")
            if not (task_id and media_id and user_id and role):
                self.send_json(400, {"error": "Task ID, Media ID, User ID, and User Role are required"})
                return

            try:
                task = run_sync(remove_media_from_task(task_id, media_id, user_id, role))
            except TaskNotFoundError:
                self.send_json(404, {"error": "Task not found"})
                return
            except MediaNotFoundError:
                self.send_json(404, {"error": "Media not found"})
                return
            except TaskPermissionError as e:
                self.send_json(403, {"error": str(e)})
                return
            except Exception as e:
                logger.error("Remove media error", task_id=task_id, media_id=media_id, error=str(e), exc_info=True)
                self.send_json(500, {"error": "Failed to remove media from task"})
                return

            self.send_json(200, {"task": task, "message": "Media removed successfully"})

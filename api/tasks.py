"""Task create (POST), update (PUT) and delete (DELETE) endpoint."""

from pydantic import ValidationError
from src.models.task import parse_media
from src.services.task_creation import build_new_task, create_task_record
from src.services.task_updates import delete_task, update_task_fields
from src.utils.errors import TaskNotFoundError, TaskPermissionError
from src.utils.http import JSONHandler, run_sync
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)

UPDATE_FIELDS = ("title", "description", "progress", "status", "notes", "priority")


def _permission_body(error: TaskPermissionError) -> dict:
    body = {"error": str(error)}
    if error.error_type:
        body["type"] = error.error_type
    return body


class handler(JSONHandler):

    def do_POST(self):
        with correlation_context():
            body = self.read_json_body()
            if not body.get("title") or not body.get("description") or not body.get("staffId"):
                self.send_json(400, {"error": "Title, description, and staff ID are required"})
                return

            try:
                row = build_new_task(
                    body["title"],
                    body["description"],
                    body["staffId"],
                    progress=body.get("progress"),
                    status=body.get("status"),
                    notes=body.get("notes"),
                    due_date=body.get("dueDate"),
                    continued_from_task_id=body.get("continuedFromTaskId"),
                )
                media = parse_media(body.get("media"))
            except (ValidationError, ValueError, TypeError) as e:
                self.send_json(400, {"error": "Invalid task fields", "details": str(e)})
                return

            try:
                task = run_sync(create_task_record(row, media))
            except Exception as e:
                logger.error("Task creation error", error=str(e), exc_info=True)
                self.send_json(500, {"error": "Failed to create task"})
                return

            self.send_json(200, {"task": task})

    def do_PUT(self):
        with correlation_context():
            body = self.read_json_body()
            task_id = body.get("id")
            if not task_id:
                self.send_json(400, {"error": "Task ID is required"})
                return

            changes = {field: body[field] for field in UPDATE_FIELDS if field in body}
            if "dueDate" in body:
                changes["due_date"] = body["dueDate"]

            try:
                task = run_sync(update_task_fields(
                    task_id,
                    changes,
                    role=body.get("userRole"),
                    is_adding_notes=bool(body.get("isAddingNotes", False)),
                ))
            except TaskNotFoundError:
                self.send_json(404, {"error": "Task not found"})
                return
            except TaskPermissionError as e:
                self.send_json(403, _permission_body(e))
                return
            except Exception as e:
                logger.error("Task update error", task_id=task_id, error=str(e), exc_info=True)
                self.send_json(500, {"error": "Failed to update task"})
                return

            self.send_json(200, {"task": task})

    def do_DELETE(self):
        with correlation_context():
            params = self.query_params()
            task_id = params.get("id")
            if not task_id:
                self.send_json(400, {"error": "Task ID is required"})
                return

            try:
                run_sync(delete_task(task_id, params.get("userId"), params.get("userRole")))
            except TaskNotFoundError:
                self.send_json(404, {"error": "Task not found"})
                return
            except TaskPermissionError as e:
                self.send_json(403, _permission_body(e))
                return
            except Exception as e:
                logger.error("Task deletion error", task_id=task_id, error=str(e), exc_info=True)
                self.send_json(500, {"error": "Failed to delete task"})
                return

            self.send_json(200, {"success": True, "message": "Task deleted successfully"})

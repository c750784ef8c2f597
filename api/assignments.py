"""Manager task assignment (POST)."""

from src.services.task_creation import assign_task
from src.utils.errors import TaskPermissionError, UserNotFoundError
from src.utils.http import JSONHandler, run_sync
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)

REQUIRED_FIELDS = ("staffId", "title", "description", "managerId")


class handler(JSONHandler):

    def do_POST(self):
        with correlation_context():
            body = self.read_json_body()
            if body.get("userRole") != "manager":
                self.send_json(403, {"error": "Only managers can assign tasks"})
                return
            if not all(body.get(field) for field in REQUIRED_FIELDS):
                self.send_json(400, {"error": "Missing required fields"})
                return

            try:
                task = run_sync(assign_task(
                    body["managerId"],
                    body["staffId"],
                    body["title"],
                    body["description"],
                    role=body.get("userRole"),
                    priority=body.get("priority"),
                    due_date=body.get("dueDate"),
                ))
            except TaskPermissionError as e:
                self.send_json(403, {"error": str(e)})
                return
            except UserNotFoundError as e:
                self.send_json(404, {"error": str(e)})
                return
            except ValueError:
                self.send_json(400, {"error": "Invalid priority"})
                return
            except Exception as e:
                logger.error("Task assignment error", error=str(e), exc_info=True)
                self.send_json(500, {"error": "Internal server error"})
                return

            self.send_json(200, task)

"""Task creation by staff and task assignment by managers."""

from datetime import date
from typing import Optional
from src.models.report import format_report_date
from src.models.task import MediaAttachment, TaskPriority, TaskStatus
from src.models.user import UserRole
from src.services.supabase_client import add_task_media, create_task, get_user_by_id
from src.services.task_updates import status_for_progress
from src.services.telegram import send_telegram_message
from src.utils.errors import TaskPermissionError, UserNotFoundError
from src.utils.logging import get_structured_logger, mask_chat_id

logger = get_structured_logger(__name__)

NO_DUE_DATE = "Not set"


def build_new_task(
    title: str,
    description: str,
    staff_id: str,
    progress: Optional[int] = None,
    status: Optional[str] = None,
    notes: Optional[str] = None,
    due_date: Optional[str] = None,
    continued_from_task_id: Optional[str] = None
) -> dict:
    """Row for a task a staff member logs for themselves; an unknown status raises ValueError."""
    progress = int(progress or 0)
    return {
        "title": title,
        "description": description,
        "progress": progress,
        "status": TaskStatus(str(status).upper()).value if status else status_for_progress(progress),
        "notes": notes,
        "staff_id": staff_id,
        "due_date": due_date or None,
        "continued_from_task_id": continued_from_task_id or None,
    }


async def create_task_record(row: dict, media: Optional[list[MediaAttachment]] = None) -> dict:
    """Insert the task, then its media; the returned task carries both."""
    task = await create_task(row)
    task["media"] = await add_task_media(task["id"], [item.model_dump() for item in media or []])
    logger.info(
        "Task created",
        task_id=task["id"],
        staff_id=row.get("staff_id"),
        media_count=len(task["media"]),
        continued_from=row.get("continued_from_task_id"),
    )
    return task


def _format_due_date(due_date: Optional[str]) -> str:
    if not due_date:
        return NO_DUE_DATE
    try:
        return format_report_date(date.fromisoformat(due_date[:10]))
    except ValueError:
        return due_date


def format_assignment_message(
    title: str,
    description: str,
    priority: str,
    due_date: Optional[str],
    manager_name: str
) -> str:
    return (
        "📢 *New Task Assigned!*\n\n"
        f"*Task:* {title}\n"
        f"*Description:* {description}\n"
        f"*Priority:* {priority}\n"
        f"*Due Date:* {_format_due_date(due_date)}\n"
        f"*Assigned by:* {manager_name}"
    )


async def assign_task(
    manager_id: str,
    staff_id: str,
    title: str,
    description: str,
    role: Optional[str],
    priority: Optional[str] = None,
    due_date: Optional[str] = None
) -> dict:
    """
    Create a task on a staff member's list on behalf of a manager.

    Only managers may assign. The assignee is told over Telegram when they
    have a chat linked; a failed notification never fails the assignment.
    """
    if role != UserRole.MANAGER.value:
        raise TaskPermissionError("Only managers can assign tasks")
    priority = TaskPriority((priority or TaskPriority.NORMAL.value).upper()).value

    staff = await get_user_by_id(staff_id)
    if not staff:
        raise UserNotFoundError("Staff member not found")
    manager = await get_user_by_id(manager_id)
    if not manager:
        raise UserNotFoundError("Manager not found")

    task = await create_task({
        "title": title,
        "description": description,
        "priority": priority,
        "progress": 0,
        "status": TaskStatus.IN_PROGRESS.value,
        "staff_id": staff_id,
        "assigned_by_id": manager_id,
        "due_date": due_date or None,
    })
    logger.info("Task assigned", task_id=task["id"], staff_id=staff_id, manager_id=manager_id, priority=priority)

    chat_id = staff.get("telegram_chat_id")
    if chat_id:
        text = format_assignment_message(title, description, priority, due_date, manager.get("name", ""))
        try:
            await send_telegram_message(chat_id, text)
        except Exception as e:
            logger.error(
                "Failed to notify assignee",
                task_id=task["id"],
                chat_id=mask_chat_id(chat_id),
                error=str(e),
            )

    return task

"""Task update and delete rules."""

from typing import Optional
from src.models.task import TaskStatus
from src.models.user import UserRole
from src.services.storage import delete_file
from src.services.supabase_client import (
    delete_task_records,
    get_task_by_id,
    get_task_media_keys,
    update_task,
)
from src.utils.errors import TaskNotFoundError, TaskPermissionError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

EDITABLE_FIELDS = ("title", "description", "progress", "status", "notes", "due_date", "priority")
NOTE_FIELDS = ("notes", "progress")


def status_for_progress(progress: int) -> str:
    """Progress 100 means completed; anything else is in progress."""
    return TaskStatus.COMPLETED.value if progress == 100 else TaskStatus.IN_PROGRESS.value


def build_task_update(
    existing: dict,
    changes: dict,
    role: Optional[str],
    is_adding_notes: bool = False
) -> dict:
    """
    Turn requested changes into the row update allowed for this role.

    Staff adding notes to a manager-assigned task may only touch notes and
    progress. A progress change always recomputes status.
    """
    if role == UserRole.BK.value:
        raise TaskPermissionError("BK users cannot edit tasks")

    assigned = bool(existing.get("assigned_by_id"))
    if role == UserRole.STAFF.value and assigned and not is_adding_notes:
        raise TaskPermissionError(
            "You cannot edit tasks that were assigned to you by a manager. "
            "You can only add notes and media.",
            error_type="assigned_task_edit",
        )

    allowed = NOTE_FIELDS if role == UserRole.STAFF.value and assigned else EDITABLE_FIELDS
    updates = {}
    for field in allowed:
        if field not in changes:
            continue
        value = changes[field]
        if field in ("title", "description", "status", "priority") and not value:
            continue
        if field in ("status", "priority"):
            value = str(value).upper()
        if field == "due_date":
            value = value or None
        updates[field] = value

    if updates.get("progress") is not None:
        updates["status"] = status_for_progress(int(updates["progress"]))

    return updates


async def update_task_fields(
    task_id: str,
    changes: dict,
    role: Optional[str],
    is_adding_notes: bool = False
) -> dict:
    """Load, apply the update rules, persist."""
    existing = await get_task_by_id(task_id)
    if not existing:
        raise TaskNotFoundError(f"Task not found: {task_id}")

    updates = build_task_update(existing, changes, role, is_adding_notes)
    task = await update_task(task_id, updates)
    logger.info("Task updated", task_id=task_id, fields=sorted(updates))
    return task


def check_delete_allowed(task: dict, user_id: Optional[str], role: Optional[str]) -> None:
    """Raise TaskPermissionError unless role/user may delete task."""
    if role == UserRole.STAFF.value:
        if task.get("staff_id") != user_id:
            raise TaskPermissionError("You can only delete your own tasks")
        if task.get("assigned_by_id"):
            raise TaskPermissionError(
                "You cannot delete tasks that were assigned to you by a manager. "
                "Please contact your manager if you need this task removed.",
                error_type="assigned_task",
            )
    elif role == UserRole.MANAGER.value:
        if task.get("assigned_by_id") != user_id and task.get("staff_id") != user_id:
            raise TaskPermissionError("You can only delete tasks you assigned or your own tasks")
    elif role == UserRole.BK.value:
        raise TaskPermissionError("BK users cannot delete tasks")


async def delete_task(task_id: str, user_id: Optional[str], role: Optional[str]) -> None:
    """Delete a task, its rows and its stored media files."""
    task = await get_task_by_id(task_id)
    if not task:
        raise TaskNotFoundError(f"Task not found: {task_id}")

    check_delete_allowed(task, user_id, role)

    media_keys = await get_task_media_keys(task_id)
    await delete_task_records(task_id)

    for key in media_keys:
        try:
            await delete_file(key)
            logger.info("Deleted task media file", task_id=task_id, key=key)
        except Exception as e:
            # Stored file cleanup never fails the delete
            logger.error("Failed to delete task media file", task_id=task_id, key=key, error=str(e))

    logger.info("Task deleted", task_id=task_id, media_files=len(media_keys))

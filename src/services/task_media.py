"""Adding and removing files on existing tasks."""

from typing import Optional
from src.models.task import MediaAttachment, TaskMedia
from src.models.user import UserRole
from src.services.storage import delete_file
from src.services.supabase_client import (
    add_task_media,
    delete_task_media,
    get_task_by_id,
    get_task_media_item,
    get_task_with_media,
)
from src.utils.errors import MediaNotFoundError, TaskNotFoundError, TaskPermissionError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


def check_media_allowed(task: dict, user_id: Optional[str], role: Optional[str], verb: str = "add media to") -> None:
    """Staff touch media on their own tasks; managers on tasks they assigned or own."""
    if role == UserRole.STAFF.value:
        if task.get("staff_id") != user_id:
            raise TaskPermissionError(f"You can only {verb} your own tasks")
    elif role == UserRole.MANAGER.value:
        if task.get("assigned_by_id") != user_id and task.get("staff_id") != user_id:
            raise TaskPermissionError(f"You can only {verb} tasks you assigned or your own tasks")


async def _load_task(task_id: str) -> dict:
    task = await get_task_by_id(task_id)
    if not task:
        raise TaskNotFoundError(f"Task not found: {task_id}")
    return task


async def add_media_to_task(
    task_id: str,
    media: list[MediaAttachment],
    user_id: Optional[str],
    role: Optional[str]
) -> dict:
    """Attach media and return the task with all of its media."""
    task = await _load_task(task_id)
    check_media_allowed(task, user_id, role)

    await add_task_media(task_id, [item.model_dump() for item in media])
    logger.info("Task media added", task_id=task_id, count=len(media))
    return await get_task_with_media(task_id)


async def remove_media_from_task(
    task_id: str,
    media_id: str,
    user_id: Optional[str],
    role: Optional[str]
) -> dict:
    """Remove one media row, then its stored file; return the updated task."""
    task = await _load_task(task_id)
    row = await get_task_media_item(task_id, media_id)
    if not row:
        raise MediaNotFoundError(f"Media not found: {media_id}")
    check_media_allowed(task, user_id, role, verb="remove media from")

    item = TaskMedia.model_validate(row)
    await delete_task_media(item.id)

    if item.key:
        try:
            await delete_file(item.key)
            logger.info("Deleted task media file", task_id=task_id, key=item.key)
        except Exception as e:
            logger.error("Failed to delete task media file", task_id=task_id, key=item.key, error=str(e))

    return await get_task_with_media(task_id)

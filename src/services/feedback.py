"""Manager feedback on staff work."""

from typing import Optional
from src.models.feedback import FeedbackType
from src.models.task import MediaAttachment
from src.models.user import UserRole
from src.services.supabase_client import (
    add_feedback_media,
    create_feedback,
    get_feedback_by_id,
    list_feedback,
)
from src.utils.errors import FeedbackPermissionError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


def build_feedback_filters(
    staff_id: Optional[str] = None,
    manager_id: Optional[str] = None,
    feedback_type: Optional[str] = None,
    task_id: Optional[str] = None
) -> dict:
    """Column filters for the feedback list; unset arguments are left out."""
    filters = {
        "staff_id": staff_id,
        "manager_id": manager_id,
        "type": FeedbackType(feedback_type.upper()).value if feedback_type else None,
        "task_id": task_id,
    }
    return {column: value for column, value in filters.items() if value}


async def list_feedback_records(filters: dict) -> list[dict]:
    return await list_feedback(filters)


async def create_feedback_record(
    content: str,
    staff_id: str,
    manager_id: str,
    role: Optional[str],
    feedback_type: Optional[str] = None,
    task_id: Optional[str] = None,
    media: Optional[list[MediaAttachment]] = None
) -> dict:
    """
    Store feedback with its media and return it with relations embedded.

    BK users cannot give feedback. Type defaults to DAILY; an unknown type
    raises ValueError.
    """
    if role == UserRole.BK.value:
        raise FeedbackPermissionError("BK users cannot give feedback")

    row = await create_feedback({
        "content": content,
        "type": FeedbackType((feedback_type or FeedbackType.DAILY.value).upper()).value,
        "staff_id": staff_id,
        "manager_id": manager_id,
        "task_id": task_id or None,
    })
    await add_feedback_media(row["id"], [item.model_dump() for item in media or []])
    logger.info("Feedback created", feedback_id=row["id"], staff_id=staff_id, type=row.get("type"))

    return await get_feedback_by_id(row["id"]) or row

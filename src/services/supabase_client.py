"""Supabase access for tasks, task media, feedback and users, with async context manager support."""

import os
from datetime import datetime
from typing import Any, Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from src.utils.errors import SupabaseError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

# One client per warm serverless instance
_client: Optional[Client] = None

# Embeds the assignee and assigner through their FK columns
TASK_WITH_USERS = "*, staff:staff_id(id, name), assigned_by:assigned_by_id(id, name)"
RECIPIENT_COLUMNS = "id, name, telegram_chat_id"
TASK_WITH_MEDIA = f"{TASK_WITH_USERS}, media:task_media(*)"
FEEDBACK_WITH_RELATIONS = (
    "*, staff:staff_id(id, name), manager:manager_id(id, name), "
    "task:task_id(id, title, description), media:feedback_media(*)"
)


def get_supabase_client() -> Client:
    """Get or create the service-role client."""
    global _client

    if _client is None:
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
        if not url or not key:
            raise SupabaseError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        _client = create_client(url, key, ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
            postgrest_client_timeout=30,
            storage_client_timeout=60,
        ))
        logger.info("Supabase client initialized", url=url)

    return _client


class SupabaseClient:
    """Async context manager yielding the shared client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error("Supabase operation error", error=str(exc_val), error_type=exc_type.__name__)
        return False


def _execute(query: Any, action: str) -> list[dict]:
    """Run a built query and return its rows; client errors become SupabaseError."""
    try:
        result = query.execute()
    except Exception as e:
        raise SupabaseError(f"Failed to {action}: {e}") from e
    return result.data or []


# Tasks
async def fetch_tasks_in_window(start: datetime, end: datetime) -> list[dict]:
    """Tasks created in [start, end], oldest first, with assignee and assigner embedded."""
    async with SupabaseClient() as client:
        return _execute(
            client.table("tasks")
            .select(TASK_WITH_USERS)
            .gte("created_at", start.isoformat())
            .lte("created_at", end.isoformat())
            .order("created_at"),
            "fetch tasks",
        )


async def get_task_by_id(task_id: str) -> Optional[dict]:
    async with SupabaseClient() as client:
        rows = _execute(client.table("tasks").select(TASK_WITH_USERS).eq("id", task_id), "get task")
    return rows[0] if rows else None


async def get_task_with_media(task_id: str) -> Optional[dict]:
    async with SupabaseClient() as client:
        rows = _execute(client.table("tasks").select(TASK_WITH_MEDIA).eq("id", task_id), "get task")
    return rows[0] if rows else None


async def create_task(data: dict) -> dict:
    async with SupabaseClient() as client:
        rows = _execute(client.table("tasks").insert(data), "create task")
    if not rows:
        raise SupabaseError("Failed to create task: no row returned")
    return rows[0]


async def update_task(task_id: str, updates: dict) -> dict:
    async with SupabaseClient() as client:
        rows = _execute(client.table("tasks").update(updates).eq("id", task_id), "update task")
    if not rows:
        raise SupabaseError(f"Failed to update task: {task_id}")
    return rows[0]


async def get_task_media_keys(task_id: str) -> list[str]:
    """Storage keys of all media attached to a task."""
    async with SupabaseClient() as client:
        rows = _execute(client.table("task_media").select("key").eq("task_id", task_id), "get task media")
    return [row["key"] for row in rows if row.get("key")]


async def delete_task_records(task_id: str) -> None:
    """Delete a task after its media and feedback rows."""
    async with SupabaseClient() as client:
        _execute(client.table("task_media").delete().eq("task_id", task_id), "delete task media")
        _execute(client.table("feedback").delete().eq("task_id", task_id), "delete task feedback")
        _execute(client.table("tasks").delete().eq("id", task_id), "delete task")


# Task media
async def add_task_media(task_id: str, media: list[dict]) -> list[dict]:
    """Attach media rows to a task and return them as stored."""
    if not media:
        return []
    async with SupabaseClient() as client:
        return _execute(
            client.table("task_media").insert([{**item, "task_id": task_id} for item in media]),
            "add task media",
        )


async def get_task_media_item(task_id: str, media_id: str) -> Optional[dict]:
    async with SupabaseClient() as client:
        rows = _execute(
            client.table("task_media").select("*").eq("id", media_id).eq("task_id", task_id),
            "get task media",
        )
    return rows[0] if rows else None


async def delete_task_media(media_id: str) -> None:
    async with SupabaseClient() as client:
        _execute(client.table("task_media").delete().eq("id", media_id), "delete task media")


# Feedback
async def create_feedback(data: dict) -> dict:
    async with SupabaseClient() as client:
        rows = _execute(client.table("feedback").insert(data), "create feedback")
    if not rows:
        raise SupabaseError("Failed to create feedback: no row returned")
    return rows[0]


async def add_feedback_media(feedback_id: str, media: list[dict]) -> list[dict]:
    if not media:
        return []
    async with SupabaseClient() as client:
        return _execute(
            client.table("feedback_media").insert([{**item, "feedback_id": feedback_id} for item in media]),
            "add feedback media",
        )


async def get_feedback_by_id(feedback_id: str) -> Optional[dict]:
    async with SupabaseClient() as client:
        rows = _execute(
            client.table("feedback").select(FEEDBACK_WITH_RELATIONS).eq("id", feedback_id),
            "get feedback",
        )
    return rows[0] if rows else None


async def list_feedback(filters: dict) -> list[dict]:
    """Feedback matching every column=value filter, newest first."""
    async with SupabaseClient() as client:
        query = client.table("feedback").select(FEEDBACK_WITH_RELATIONS)
        for column, value in filters.items():
            query = query.eq(column, value)
        return _execute(query.order("created_at", desc=True), "list feedback")


# Users
async def get_user_by_id(user_id: str) -> Optional[dict]:
    async with SupabaseClient() as client:
        rows = _execute(client.table("users").select("*").eq("id", user_id), "get user")
    return rows[0] if rows else None


async def update_user_chat_id(user_id: str, chat_id: str) -> dict:
    """Link a Telegram chat to a user."""
    async with SupabaseClient() as client:
        rows = _execute(
            client.table("users").update({"telegram_chat_id": chat_id}).eq("id", user_id),
            "update user chat id",
        )
    if not rows:
        raise SupabaseError(f"Failed to update user chat id: {user_id}")
    return rows[0]


async def get_users_with_chat_ids(user_ids: list[str]) -> list[dict]:
    """Users among user_ids that have a Telegram chat linked."""
    if not user_ids:
        return []
    async with SupabaseClient() as client:
        return _execute(
            client.table("users")
            .select(RECIPIENT_COLUMNS)
            .in_("id", user_ids)
            .not_.is_("telegram_chat_id", "null"),
            "get report recipients",
        )


async def get_users_for_reminder(excluded_ids: list[str]) -> list[dict]:
    """Every user with a Telegram chat linked, minus excluded_ids."""
    async with SupabaseClient() as client:
        query = client.table("users").select(RECIPIENT_COLUMNS).not_.is_("telegram_chat_id", "null")
        if excluded_ids:
            query = query.not_.in_("id", excluded_ids)
        return _execute(query, "get reminder users")

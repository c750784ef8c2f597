"""Object storage (Supabase Storage) - signed URLs, uploads and report artifacts."""

import os
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote
import httpx
from src.services.supabase_client import SupabaseClient
from src.utils.errors import StorageError
from src.utils.logging import get_structured_logger, mask_sensitive_data

logger = get_structured_logger(__name__)

DEFAULT_BUCKET = "origins-files"
PDF_CONTENT_TYPE = "application/pdf"
REPORTS_PREFIX = "reports/"
TASK_UPLOADS_PREFIX = "tasks/"
PRIVATE_UPLOADS_PREFIX = "private/"
PRIVATE_FILE_PATH = "/api/files"
REPORT_PDF_PATH = "/api/reports/pdf"
DOWNLOAD_URL_TTL_SECONDS = 300


def get_bucket_name() -> str:
    return os.environ.get("STORAGE_BUCKET", DEFAULT_BUCKET)


def private_file_path(key: str) -> str:
    """App-relative path that proxies reads of a stored object."""
    return f"{PRIVATE_FILE_PATH}?key={quote(key, safe='')}"


def permanent_report_url(key: str, base_url: str) -> str:
    """Stable report URL served by the retrieval endpoint; never expires."""
    return f"{base_url.rstrip('/')}{REPORT_PDF_PATH}?key={quote(key, safe='')}"


def build_report_key(window_start: datetime, generated_at: datetime) -> str:
    """Storage key for a weekly report, unique per generation second."""
    stamp = generated_at.strftime("%Y-%m-%dT%H-%M-%S")
    return (
        f"{REPORTS_PREFIX}{window_start.year}-{window_start.month}-{window_start.day}"
        f"_SAT_{stamp}.pdf"
    )


def is_report_key(key: Optional[str]) -> bool:
    return bool(key) and key.startswith(REPORTS_PREFIX)


def build_upload_key(
    filename: str,
    user_id: Optional[str] = None,
    private: bool = False,
    now: Optional[datetime] = None
) -> str:
    """
    Storage key for a client upload: tasks/<ms>-<name>, or
    private/<user_id>/<ms>-<name> for private files.

    Only the last path segment of filename is kept so a client cannot
    write outside its prefix.
    """
    if private and not user_id:
        raise ValueError("user_id is required for private uploads")
    if private and "/" in user_id:
        raise ValueError("user_id must not contain '/'")
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    if not name:
        raise ValueError("filename is empty")
    millis = int((now or datetime.now(timezone.utc)).timestamp() * 1000)
    prefix = f"{PRIVATE_UPLOADS_PREFIX}{user_id}/" if private else TASK_UPLOADS_PREFIX
    return f"{prefix}{millis}-{name}"


async def get_upload_signed_url(key: str, content_type: str) -> dict:
    """
    Request a time-limited signed upload URL for key.

    Returns {"signed_url": ..., "private_url": ...}; the private URL goes
    through the app and does not expire.
    """
    async with SupabaseClient() as client:
        try:
            result = client.storage.from_(get_bucket_name()).create_signed_upload_url(key)
        except Exception as e:
            raise StorageError(f"Failed to create signed upload URL: {e}")

    signed_url = result.get("signed_url") or result.get("signedUrl")
    if not signed_url:
        raise StorageError(f"Failed to create signed upload URL: no URL returned for {key}")

    logger.debug(
        "Signed upload URL created",
        key=key,
        content_type=content_type
    )
    return {"signed_url": signed_url, "private_url": private_file_path(key)}


async def get_private_file_signed_url(key: str, expires_in: int = DOWNLOAD_URL_TTL_SECONDS) -> str:
    """Short-lived signed download URL for key."""
    async with SupabaseClient() as client:
        try:
            result = client.storage.from_(get_bucket_name()).create_signed_url(key, expires_in)
        except Exception as e:
            raise StorageError(f"Failed to create signed download URL: {e}")

    signed_url = result.get("signedURL") or result.get("signedUrl") or result.get("signed_url")
    if not signed_url:
        raise StorageError(f"File not found: {key}")
    return signed_url


async def publish_artifact(
    content: bytes,
    key: str,
    content_type: str = PDF_CONTENT_TYPE,
    client: Optional[httpx.AsyncClient] = None
) -> str:
    """
    Upload content through a signed URL and return its private path.

    Errors propagate as StorageError; nothing is retried.
    """
    signed = await get_upload_signed_url(key, content_type)

    try:
        if client is None:
            async with httpx.AsyncClient() as http:
                response = await http.put(
                    signed["signed_url"],
                    content=content,
                    headers={"Content-Type": content_type}
                )
        else:
            response = await client.put(
                signed["signed_url"],
                content=content,
                headers={"Content-Type": content_type}
            )
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise StorageError(f"Failed to upload {key}: {mask_sensitive_data(str(e))}")

    logger.info(
        "Artifact uploaded",
        key=key,
        content_type=content_type,
        size_bytes=len(content)
    )
    return signed["private_url"]


async def fetch_artifact(key: str, client: Optional[httpx.AsyncClient] = None) -> bytes:
    """Download stored bytes through a short-lived signed URL."""
    signed_url = await get_private_file_signed_url(key)

    try:
        if client is None:
            async with httpx.AsyncClient() as http:
                response = await http.get(signed_url)
        else:
            response = await client.get(signed_url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise StorageError(f"Failed to download {key}: {mask_sensitive_data(str(e))}")

    return response.content


async def delete_file(key: str) -> None:
    """Remove an object from the bucket."""
    async with SupabaseClient() as client:
        try:
            client.storage.from_(get_bucket_name()).remove([key])
        except Exception as e:
            raise StorageError(f"Failed to delete {key}: {e}")

"""Error handling utilities."""

from typing import Optional


class OriginsError(Exception):
    """Base exception for Origins backend."""
    pass


class SupabaseError(OriginsError):
    """Supabase operation error."""
    pass


class StorageError(OriginsError):
    """Object storage (signed URL, upload, download) error."""
    pass


class TelegramError(OriginsError):
    """Telegram Bot API error."""

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        description: Optional[str] = None
    ):
        super().__init__(message)
        self.error_code = error_code
        self.description = description


class ReportGenerationError(OriginsError):
    """PDF report could not be built."""
    pass


class TaskNotFoundError(OriginsError):
    """Task does not exist."""
    pass


class TaskPermissionError(OriginsError):
    """Caller's role does not allow the task operation."""

    def __init__(self, message: str, error_type: Optional[str] = None):
        super().__init__(message)
        self.error_type = error_type


class UserNotFoundError(OriginsError):
    """User does not exist."""
    pass


class MediaNotFoundError(OriginsError):
    """Media item does not exist on the task."""
    pass


class FeedbackPermissionError(OriginsError):
    """Caller's role does not allow giving feedback."""
    pass

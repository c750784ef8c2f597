"""Task models."""

from enum import Enum
from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    """Task lifecycle status."""
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class TaskPriority(str, Enum):
    """Task priority, lowest to highest."""
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def rank(self) -> int:
        return list(TaskPriority).index(self)


class UserRef(BaseModel):
    """Embedded user projection on task rows."""
    id: str
    name: Optional[str] = None


class Task(BaseModel):
    """Task model - one row of the tasks table with its embedded users."""
    id: str = Field(..., description="Task ID")
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    progress: int = Field(default=0, ge=0, le=100, description="Progress percentage (0-100)")
    status: TaskStatus = Field(default=TaskStatus.NOT_STARTED, description="Task status")
    priority: TaskPriority = Field(default=TaskPriority.NORMAL, description="Task priority")
    notes: Optional[str] = Field(None, description="Staff notes")
    due_date: Optional[date] = Field(None, description="Due date")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = None
    staff_id: Optional[str] = Field(None, description="Assignee user ID")
    assigned_by_id: Optional[str] = Field(None, description="Assigner user ID (set when a manager assigned it)")
    continued_from_task_id: Optional[str] = Field(None, description="Predecessor task this one continues")
    staff: Optional[UserRef] = Field(None, description="Assignee")
    assigned_by: Optional[UserRef] = Field(None, description="Assigner")

    @property
    def assignee_name(self) -> Optional[str]:
        return self.staff.name if self.staff else None

    @property
    def assigner_name(self) -> Optional[str]:
        return self.assigned_by.name if self.assigned_by else None


class MediaAttachment(BaseModel):
    """A file uploaded through a presigned URL, as sent by the client."""
    url: str = Field(..., min_length=1, description="Public URL or private /api/files path")
    filename: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1, description="MIME type")
    caption: Optional[str] = None
    key: Optional[str] = Field(None, description="Object storage key; set for private files")


class TaskMedia(MediaAttachment):
    """File attached to a task."""
    id: str
    task_id: str


def parse_media(items: Optional[list]) -> list[MediaAttachment]:
    """Validate client-supplied media entries; raises pydantic ValidationError."""
    return [MediaAttachment.model_validate(item) for item in items or []]

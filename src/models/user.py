"""User model - staff, managers and bookkeepers."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """Application roles."""
    STAFF = "staff"
    MANAGER = "manager"
    BK = "bk"


class User(BaseModel):
    """User model."""
    id: str = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: Optional[str] = Field(None, description="Email address")
    role: UserRole = Field(default=UserRole.STAFF, description="Role: staff, manager, bk")
    telegram_chat_id: Optional[str] = Field(None, description="Linked Telegram chat ID")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

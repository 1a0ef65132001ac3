from pydantic import Field
from typing import Optional
from datetime import datetime

from app.core.schemas import CamelModel


class UserSummary(CamelModel):
    id: str = Field(alias="_id")
    name: str
    email: str
    profile_image_url: Optional[str] = None


class UserResponse(CamelModel):
    id: str = Field(alias="_id")
    name: str
    email: str
    role: str
    profile_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserWithTaskCounts(UserResponse):
    pending_tasks: int = 0
    in_progress_tasks: int = 0
    completed_tasks: int = 0

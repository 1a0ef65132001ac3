from pydantic import Field
from typing import List, Literal, Optional
from datetime import datetime

from app.core.schemas import CamelModel
from app.modules.users.schemas import UserSummary

TaskStatus = Literal["pending", "in_progress", "completed"]
TaskPriority = Literal["low", "medium", "high"]


class ChecklistItem(CamelModel):
    text: str
    completed: bool = False


class TaskCreate(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = ""
    priority: TaskPriority = "medium"
    due_date: datetime
    assigned_to: List[str] = []
    attachments: List[str] = []
    todo_checklist: List[ChecklistItem] = []


class TaskUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[List[str]] = None
    attachments: Optional[List[str]] = None
    todo_checklist: Optional[List[ChecklistItem]] = None
    status: Optional[TaskStatus] = None


class StatusUpdate(CamelModel):
    status: TaskStatus


class ChecklistUpdate(CamelModel):
    todo_checklist: List[ChecklistItem]


class TaskResponse(CamelModel):
    id: str = Field(alias="_id")
    title: str
    description: Optional[str] = None
    priority: str
    status: str
    due_date: Optional[datetime] = None
    assigned_to: List[UserSummary] = []
    attachments: List[str] = []
    todo_checklist: List[ChecklistItem] = []
    progress: int = 0
    completed_todo_count: int = 0
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StatusSummary(CamelModel):
    all: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0


class TaskListResponse(CamelModel):
    tasks: List[TaskResponse]
    status_summary: StatusSummary


class TaskMessageResponse(CamelModel):
    message: str
    task: TaskResponse


class MessageResponse(CamelModel):
    message: str

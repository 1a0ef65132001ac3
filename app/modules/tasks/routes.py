from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.tasks.schemas import (
    TaskCreate, TaskUpdate, TaskResponse, TaskListResponse, TaskStatus,
    StatusUpdate, ChecklistUpdate, TaskMessageResponse, MessageResponse
)
from app.modules.tasks.service import TaskService
from app.modules.reports.schemas import DashboardResponse
from app.modules.reports.service import ReportService
from app.core.dependencies import require_permission, get_current_user_id
from supabase import Client
from typing import Dict, Optional

router = APIRouter(prefix="/tasks", tags=["tasks"])


def get_task_service(supabase: Client = Depends(get_supabase)) -> TaskService:
    return TaskService(supabase)


def get_report_service(supabase: Client = Depends(get_supabase)) -> ReportService:
    return ReportService(supabase)


# Dashboard routes are declared before /{task_id} so they are not captured by it
@router.get("/dashboard-data", response_model=DashboardResponse)
async def dashboard_data(
    user_data: Dict = Depends(require_permission("reports:read_all")),
    service: ReportService = Depends(get_report_service)
):
    """Counts across all tasks plus total users (admin only)"""
    return service.dashboard_summary(user_data)


@router.get("/user-dashboard-data", response_model=DashboardResponse)
async def user_dashboard_data(
    user_data: Dict = Depends(get_current_user_id),
    service: ReportService = Depends(get_report_service)
):
    """Counts over the tasks assigned to the current user"""
    return service.dashboard_summary(user_data, assigned_only=True)


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    status: Optional[TaskStatus] = None,
    user_data: Dict = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service)
):
    """List tasks (admin: all, member: assigned), optionally filtered by status"""
    return service.list_tasks(user_data, status=status)


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    task_data: TaskCreate,
    user_data: Dict = Depends(require_permission("tasks:create")),
    service: TaskService = Depends(get_task_service)
):
    """Create a new task (admin only)"""
    return service.create_task(user_data, task_data)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service)
):
    """Get task by ID (admin or assignee)"""
    return service.get_task(user_data, task_id)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service)
):
    """Update task details; assignees may only change status and checklist"""
    return service.update_task(user_data, task_id, task_data)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    user_data: Dict = Depends(require_permission("tasks:delete")),
    service: TaskService = Depends(get_task_service)
):
    """Delete task (admin only)"""
    service.delete_task(user_data, task_id)
    return MessageResponse(message="Task deleted successfully")


@router.put("/{task_id}/status", response_model=TaskMessageResponse)
async def update_task_status(
    task_id: str,
    status_data: StatusUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service)
):
    """Set task status; completing a task checks every checklist item"""
    task = service.update_status(user_data, task_id, status_data.status)
    return TaskMessageResponse(message="Task status updated", task=task)


@router.put("/{task_id}/todo", response_model=TaskMessageResponse)
async def update_task_checklist(
    task_id: str,
    checklist_data: ChecklistUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service)
):
    """Replace the checklist; progress and status are derived from it"""
    task = service.update_checklist(user_data, task_id, checklist_data.todo_checklist)
    return TaskMessageResponse(message="Task checklist updated", task=task)

from pydantic import Field
from typing import List, Optional
from datetime import datetime

from app.core.schemas import CamelModel


class DashboardStatistics(CamelModel):
    total_tasks: int = 0
    pending_tasks: int = 0
    in_progress_tasks: int = 0
    completed_tasks: int = 0
    overdue_tasks: int = 0
    total_users: Optional[int] = None  # only on the admin-wide dashboard


class TaskDistribution(CamelModel):
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    all: int = 0


class TaskPriorityLevels(CamelModel):
    low: int = 0
    medium: int = 0
    high: int = 0


class DashboardCharts(CamelModel):
    task_distribution: TaskDistribution
    task_priority_levels: TaskPriorityLevels


class RecentTask(CamelModel):
    id: str = Field(alias="_id")
    title: str
    status: str
    priority: str
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class DashboardResponse(CamelModel):
    statistics: DashboardStatistics
    charts: DashboardCharts
    recent_tasks: List[RecentTask]

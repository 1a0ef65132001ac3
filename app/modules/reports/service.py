from supabase import Client
from app.modules.reports.schemas import (
    DashboardResponse, DashboardStatistics, DashboardCharts,
    TaskDistribution, TaskPriorityLevels, RecentTask,
)
from app.modules.tasks import lifecycle
from app.modules.tasks.service import TaskService
from app.modules.users.service import UserService
from app.core.permissions import can_perform, ensure_can_perform
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

RECENT_TASKS_LIMIT = 10

# See app/modules/reports/models.py
TASK_EXPORT_VIEW = "task_export_rows"

TASK_EXPORT_COLUMNS = [
    "Task ID", "Title", "Description", "Priority", "Status",
    "Progress (%)", "Due Date", "Assigned To", "Checklist",
]
USER_EXPORT_COLUMNS = [
    "User Name", "Email", "Role", "Total Assigned Tasks",
    "Pending Tasks", "In Progress Tasks", "Completed Tasks",
]


def _format_date(value: Any) -> str:
    parsed = lifecycle.parse_datetime(value)
    return parsed.date().isoformat() if parsed else ""


class ReportService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.users = UserService(supabase)
        self.tasks = TaskService(supabase)

    def dashboard_summary(
        self,
        actor: Dict[str, Any],
        assigned_only: bool = False,
        now: Optional[datetime] = None,
    ) -> DashboardResponse:
        """
        Status/priority counts, overdue count and the most recent tasks.
        Admins get the whole store plus the user count; members (or any caller
        with assigned_only) only see tasks assigned to them.
        """
        ensure_can_perform(actor, "reports:read")
        scoped = assigned_only or not can_perform(actor, "reports:read_all")
        rows = self.tasks.list_visible_task_rows(actor, assigned_only=scoped)

        now = now or datetime.now(timezone.utc)
        by_status = lifecycle.status_counts(rows)
        by_priority = lifecycle.priority_counts(rows)
        overdue = sum(1 for row in rows if lifecycle.is_overdue(row, now))

        statistics = DashboardStatistics(
            total_tasks=by_status["all"],
            pending_tasks=by_status[lifecycle.PENDING],
            in_progress_tasks=by_status[lifecycle.IN_PROGRESS],
            completed_tasks=by_status[lifecycle.COMPLETED],
            overdue_tasks=overdue,
            total_users=None if scoped else self.users.count_users(),
        )
        return DashboardResponse(
            statistics=statistics,
            charts=DashboardCharts(
                task_distribution=TaskDistribution(**by_status),
                task_priority_levels=TaskPriorityLevels(**by_priority),
            ),
            recent_tasks=[RecentTask(**row) for row in rows[:RECENT_TASKS_LIMIT]],
        )

    def export_tasks(self, actor: Dict[str, Any]) -> List[Dict[str, Any]]:
        """One flattened row per task, assignees rendered as 'Name (email)'"""
        ensure_can_perform(actor, "reports:export")
        tasks = self.supabase.table(TASK_EXPORT_VIEW)\
            .select("*")\
            .order("created_at", desc=True)\
            .execute().data or []

        rows = []
        for task in tasks:
            assignees = [f"{user['name']} ({user['email']})" for user in task.get("assignees") or []]
            checklist = task.get("todo_checklist") or []
            rows.append({
                "Task ID": task["id"],
                "Title": task.get("title", ""),
                "Description": task.get("description") or "",
                "Priority": task.get("priority", ""),
                "Status": task.get("status", ""),
                "Progress (%)": task.get("progress", 0),
                "Due Date": _format_date(task.get("due_date")),
                "Assigned To": ", ".join(assignees) or "Unassigned",
                "Checklist": f"{lifecycle.completed_count(task)}/{len(checklist)}",
            })
        logger.info("Exported %d task(s) for %s", len(rows), actor.get("id"))
        return rows

    def export_users(self, actor: Dict[str, Any]) -> List[Dict[str, Any]]:
        """One row per user with assigned task counts by status"""
        ensure_can_perform(actor, "reports:export")
        users = self.users.list_users_with_task_counts()

        rows = []
        for user in users:
            rows.append({
                "User Name": user.get("name", ""),
                "Email": user.get("email", ""),
                "Role": user.get("role", ""),
                "Total Assigned Tasks": user.get("total_tasks", 0),
                "Pending Tasks": user.get("pending_tasks", 0),
                "In Progress Tasks": user.get("in_progress_tasks", 0),
                "Completed Tasks": user.get("completed_tasks", 0),
            })
        logger.info("Exported %d user(s) for %s", len(rows), actor.get("id"))
        return rows

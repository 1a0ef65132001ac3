from supabase import Client
from app.modules.tasks.schemas import (
    TaskCreate, TaskUpdate, TaskResponse, TaskListResponse, StatusSummary,
    ChecklistItem,
)
from app.modules.tasks import lifecycle
from app.modules.users.schemas import UserSummary
from app.modules.users.service import UserService, is_valid_id
from app.core.errors import InvalidAssignee, NotFound
from app.core.permissions import can_perform, ensure_can_perform
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

# Permission needed to change each field through update_task; anything else needs tasks:update
FIELD_PERMISSIONS = {
    "status": "tasks:update_status",
    "todo_checklist": "tasks:update_checklist",
    "assigned_to": "tasks:assign",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TaskService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.users = UserService(supabase)

    # Store helpers

    def get_task_row(self, task_id: str) -> Dict[str, Any]:
        if not is_valid_id(task_id):
            raise NotFound("Task not found")
        result = self.supabase.table("tasks")\
            .select("*")\
            .eq("id", task_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise NotFound("Task not found")
        return result.data[0]

    def list_visible_task_rows(self, actor: Dict[str, Any], assigned_only: bool = False) -> List[Dict[str, Any]]:
        """Tasks the actor may see, newest first; assigned_only limits even admins to their own"""
        query = self.supabase.table("tasks").select("*")
        if assigned_only or not can_perform(actor, "tasks:read_all"):
            query = query.contains("assigned_to", [actor["id"]])
        result = query.order("created_at", desc=True).execute()
        return result.data or []

    def _save(self, task_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        result = self.supabase.table("tasks")\
            .update({**changes, "updated_at": _now()})\
            .eq("id", task_id)\
            .execute()
        if not result.data:
            raise NotFound("Task not found")
        return result.data[0]

    def _validate_assignees(self, user_ids: Optional[List[str]]) -> List[str]:
        ids = list(dict.fromkeys(user_ids or []))
        if not ids:
            raise InvalidAssignee("assignedTo must be a non-empty list of user IDs")
        found = {user["id"] for user in self.users.get_users_by_ids(ids)}
        missing = [user_id for user_id in ids if user_id not in found]
        if missing:
            raise InvalidAssignee(f"Unknown assignee(s): {', '.join(missing)}")
        return ids

    def _to_responses(self, rows: List[Dict[str, Any]]) -> List[TaskResponse]:
        """Populate assignees (one users query for the whole batch)"""
        user_ids = [user_id for row in rows for user_id in row.get("assigned_to") or []]
        users = {user["id"]: user for user in self.users.get_users_by_ids(user_ids)}
        responses = []
        for row in rows:
            assignees = [
                UserSummary(**users[user_id])
                for user_id in row.get("assigned_to") or []
                if user_id in users
            ]
            responses.append(TaskResponse(
                **{**row, "assigned_to": assignees},
                completed_todo_count=lifecycle.completed_count(row),
            ))
        return responses

    def _to_response(self, row: Dict[str, Any]) -> TaskResponse:
        return self._to_responses([row])[0]

    def _log_transition(self, before: Dict[str, Any], after: Dict[str, Any], actor: Dict[str, Any]) -> None:
        if before.get("status") != after.get("status"):
            logger.info(
                "Task %s status %s -> %s (progress %s%%) by %s",
                before.get("id"), before.get("status"), after.get("status"),
                after.get("progress"), actor.get("id"),
            )

    # Operations

    def create_task(self, actor: Dict[str, Any], task_data: TaskCreate) -> TaskResponse:
        """Create a task; checklist items start unchecked, so progress is 0 and status pending"""
        ensure_can_perform(actor, "tasks:create")
        assigned_to = self._validate_assignees(task_data.assigned_to)
        checklist = [
            {"text": item.text, "completed": False}
            for item in task_data.todo_checklist
        ]
        result = self.supabase.table("tasks").insert({
            "title": task_data.title,
            "description": task_data.description or "",
            "priority": task_data.priority,
            "status": lifecycle.PENDING,
            "due_date": task_data.due_date.isoformat(),
            "assigned_to": assigned_to,
            "attachments": task_data.attachments,
            "todo_checklist": checklist,
            "progress": 0,
            "created_by": actor["id"],
        }).execute()
        row = result.data[0]
        logger.info("Task %s created by %s for %d assignee(s)", row.get("id"), actor["id"], len(assigned_to))
        return self._to_response(row)

    def get_task(self, actor: Dict[str, Any], task_id: str) -> TaskResponse:
        task = self.get_task_row(task_id)
        ensure_can_perform(actor, "tasks:read", task)
        return self._to_response(task)

    def update_task(self, actor: Dict[str, Any], task_id: str, task_data: TaskUpdate) -> TaskResponse:
        """
        Partial update. Admins may change any field; assignees only status and
        todo_checklist. A checklist is applied before an explicit status, so the
        explicit status wins for this call.
        """
        task = self.get_task_row(task_id)
        ensure_can_perform(actor, "tasks:read", task)

        fields = {k: v for k, v in task_data.model_dump(exclude_unset=True).items() if v is not None}
        for field in fields:
            ensure_can_perform(actor, FIELD_PERMISSIONS.get(field, "tasks:update"), task)

        changes: Dict[str, Any] = {}
        for field in ("title", "description", "priority", "attachments"):
            if field in fields:
                changes[field] = fields[field]
        if "due_date" in fields:
            changes["due_date"] = task_data.due_date.isoformat()
        if "assigned_to" in fields:
            changes["assigned_to"] = self._validate_assignees(fields["assigned_to"])

        working = {**task, **changes}
        if "todo_checklist" in fields:
            changes.update(lifecycle.apply_checklist(working, task_data.todo_checklist))
            working.update(changes)
        if "status" in fields:
            changes.update(lifecycle.apply_status(working, fields["status"]))

        if not changes:
            return self._to_response(task)
        updated = self._save(task_id, changes)
        self._log_transition(task, updated, actor)
        return self._to_response(updated)

    def update_status(self, actor: Dict[str, Any], task_id: str, status: str) -> TaskResponse:
        task = self.get_task_row(task_id)
        ensure_can_perform(actor, "tasks:update_status", task)
        updated = self._save(task_id, lifecycle.apply_status(task, status))
        self._log_transition(task, updated, actor)
        return self._to_response(updated)

    def update_checklist(self, actor: Dict[str, Any], task_id: str, items: List[ChecklistItem]) -> TaskResponse:
        task = self.get_task_row(task_id)
        ensure_can_perform(actor, "tasks:update_checklist", task)
        updated = self._save(task_id, lifecycle.apply_checklist(task, items))
        self._log_transition(task, updated, actor)
        return self._to_response(updated)

    def delete_task(self, actor: Dict[str, Any], task_id: str) -> None:
        ensure_can_perform(actor, "tasks:delete")
        self.get_task_row(task_id)
        self.supabase.table("tasks")\
            .delete()\
            .eq("id", task_id)\
            .execute()
        logger.info("Task %s deleted by %s", task_id, actor["id"])

    def list_tasks(self, actor: Dict[str, Any], status: Optional[str] = None) -> TaskListResponse:
        """Admins see every task, members only those assigned to them"""
        ensure_can_perform(actor, "tasks:read")
        rows = self.list_visible_task_rows(actor)
        summary = lifecycle.status_counts(rows)
        if status:
            rows = [row for row in rows if row.get("status") == status]
        return TaskListResponse(
            tasks=self._to_responses(rows),
            status_summary=StatusSummary(**summary),
        )

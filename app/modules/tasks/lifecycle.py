"""
Task lifecycle rules: progress computation and status transitions.

Functions here operate on plain task rows (dicts as stored in the `tasks`
table) and return the column updates to persist; they never touch the store.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

PENDING = "pending"
IN_PROGRESS = "in_progress"
COMPLETED = "completed"
TASK_STATUSES = (PENDING, IN_PROGRESS, COMPLETED)

PRIORITIES = ("low", "medium", "high")


def normalize_checklist(items: Iterable[Any]) -> List[Dict[str, Any]]:
    """Accept dicts or pydantic items; return [{"text", "completed"}] rows."""
    rows = []
    for item in items or []:
        if hasattr(item, "model_dump"):
            item = item.model_dump()
        rows.append({"text": item.get("text", ""), "completed": bool(item.get("completed", False))})
    return rows


def compute_progress(items: Iterable[Dict[str, Any]]) -> int:
    """Percentage of done items, rounded half up; 0 for an empty checklist."""
    items = list(items or [])
    total = len(items)
    if total == 0:
        return 0
    done = sum(1 for item in items if item.get("completed"))
    return (200 * done + total) // (2 * total)


def completed_count(task: Dict[str, Any]) -> int:
    return sum(1 for item in task.get("todo_checklist") or [] if item.get("completed"))


def apply_checklist(task: Dict[str, Any], items: Iterable[Any]) -> Dict[str, Any]:
    """Replace the checklist and derive progress and status from it.

    Any checklist edit moves the task to in_progress unless every item is
    done, in which case it becomes completed.
    """
    checklist = normalize_checklist(items)
    progress = compute_progress(checklist)
    if progress == 100:
        status = COMPLETED
    else:
        status = IN_PROGRESS
    return {"todo_checklist": checklist, "progress": progress, "status": status}


def apply_status(task: Dict[str, Any], status: str) -> Dict[str, Any]:
    """Explicit status write. Completing checks every item; any other status
    keeps the checklist as is and recomputes progress from it."""
    if status not in TASK_STATUSES:
        raise ValueError(f"Unknown task status: {status}")
    checklist = normalize_checklist(task.get("todo_checklist"))
    if status == COMPLETED:
        checklist = [{**item, "completed": True} for item in checklist]
        return {"todo_checklist": checklist, "progress": 100, "status": COMPLETED}
    return {"todo_checklist": checklist, "progress": compute_progress(checklist), "status": status}


def parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def is_overdue(task: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    due = parse_datetime(task.get("due_date"))
    if due is None or task.get("status") == COMPLETED:
        return False
    return due < (now or datetime.now(timezone.utc))


def status_counts(tasks: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    counts = {"all": 0, PENDING: 0, IN_PROGRESS: 0, COMPLETED: 0}
    for task in tasks:
        counts["all"] += 1
        if task.get("status") in counts:
            counts[task["status"]] += 1
    return counts


def priority_counts(tasks: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    counts = {priority: 0 for priority in PRIORITIES}
    for task in tasks:
        if task.get("priority") in counts:
            counts[task["priority"]] += 1
    return counts

# tests/test_reports.py

from __future__ import annotations

import io
from datetime import datetime, timezone

import pandas as pd
import pytest

from app.core.errors import Forbidden
from app.modules.reports.service import TASK_EXPORT_COLUMNS, USER_EXPORT_COLUMNS
from app.modules.reports.spreadsheet import to_xlsx
from app.modules.tasks.schemas import ChecklistItem

NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)


@pytest.fixture()
def seeded(task_service, make_task, member, other_member):
    overdue = make_task([member], title="overdue", priority="high", due_date=datetime(2026, 5, 1, tzinfo=timezone.utc))
    progressing = make_task([member, other_member], title="progressing", checklist=2)
    task_service.update_checklist(member, progressing.id, [
        ChecklistItem(text="step 1", completed=True), ChecklistItem(text="step 2"),
    ])
    finished = make_task([other_member], title="finished", priority="low", checklist=1)
    task_service.update_status(other_member, finished.id, "completed")
    return {"overdue": overdue, "progressing": progressing, "finished": finished}


def test_admin_dashboard_covers_everything(report_service, admin, seeded) -> None:
    summary = report_service.dashboard_summary(admin, now=NOW)
    stats = summary.statistics
    assert (stats.total_tasks, stats.pending_tasks, stats.in_progress_tasks, stats.completed_tasks) == (3, 1, 1, 1)
    assert stats.overdue_tasks == 1
    assert stats.total_users == 3
    assert summary.charts.task_priority_levels.model_dump() == {"low": 1, "medium": 1, "high": 1}
    assert summary.charts.task_distribution.all == 3
    assert [t.title for t in summary.recent_tasks] == ["finished", "progressing", "overdue"]


def test_member_dashboard_is_scoped(report_service, member, seeded) -> None:
    summary = report_service.dashboard_summary(member, now=NOW)
    stats = summary.statistics
    assert (stats.total_tasks, stats.pending_tasks, stats.in_progress_tasks, stats.completed_tasks) == (2, 1, 1, 0)
    assert stats.total_users is None
    assert {t.title for t in summary.recent_tasks} == {"overdue", "progressing"}


def test_assigned_only_scopes_admin_to_own_tasks(report_service, admin, seeded) -> None:
    summary = report_service.dashboard_summary(admin, assigned_only=True, now=NOW)
    assert summary.statistics.total_tasks == 0
    assert summary.statistics.total_users is None


def test_dashboard_serializes_camel_case(report_service, admin, seeded) -> None:
    payload = report_service.dashboard_summary(admin, now=NOW).model_dump(by_alias=True)
    assert set(payload["statistics"]) >= {"totalTasks", "overdueTasks", "totalUsers"}
    assert set(payload["charts"]["taskDistribution"]) == {"pending", "inProgress", "completed", "all"}
    assert "_id" in payload["recentTasks"][0]


def test_export_tasks_rows(report_service, admin, seeded) -> None:
    rows = {row["Title"]: row for row in report_service.export_tasks(admin)}
    progressing = rows["progressing"]
    assert progressing["Assigned To"] == "Mel Member (mel@example.com), Otto Other (otto@example.com)"
    assert progressing["Progress (%)"] == 50
    assert progressing["Checklist"] == "1/2"
    assert progressing["Status"] == "in_progress"
    assert rows["overdue"]["Due Date"] == "2026-05-01"
    assert list(progressing) == TASK_EXPORT_COLUMNS


def test_export_users_counts(report_service, admin, member, other_member, seeded) -> None:
    rows = {row["Email"]: row for row in report_service.export_users(admin)}
    mel = rows["mel@example.com"]
    assert (mel["Total Assigned Tasks"], mel["Pending Tasks"], mel["In Progress Tasks"], mel["Completed Tasks"]) == (2, 1, 1, 0)
    otto = rows["otto@example.com"]
    assert (otto["Total Assigned Tasks"], otto["In Progress Tasks"], otto["Completed Tasks"]) == (2, 1, 1)
    assert rows["ada@example.com"]["Total Assigned Tasks"] == 0


def test_exports_are_admin_only(report_service, member) -> None:
    with pytest.raises(Forbidden):
        report_service.export_tasks(member)
    with pytest.raises(Forbidden):
        report_service.export_users(member)


def test_to_xlsx_round_trips_through_pandas(report_service, admin, seeded) -> None:
    content = to_xlsx(report_service.export_users(admin), USER_EXPORT_COLUMNS, "User Task Report")
    frame = pd.read_excel(io.BytesIO(content), sheet_name="User Task Report")
    assert list(frame.columns) == USER_EXPORT_COLUMNS
    assert len(frame) == 3


def test_to_xlsx_with_no_rows_keeps_headers() -> None:
    frame = pd.read_excel(io.BytesIO(to_xlsx([], TASK_EXPORT_COLUMNS, "Tasks Report")))
    assert list(frame.columns) == TASK_EXPORT_COLUMNS
    assert frame.empty


def test_each_export_is_a_single_read(report_service, admin, seeded, fake_supabase) -> None:
    fake_supabase.calls.clear()
    report_service.export_tasks(admin)
    assert fake_supabase.calls == [("task_export_rows", "select")]

    fake_supabase.calls.clear()
    report_service.export_users(admin)
    assert fake_supabase.calls == [("user_task_counts", "select")]


def test_export_tasks_skips_unknown_assignees(report_service, admin, member, make_task, fake_supabase) -> None:
    task = make_task([member])
    fake_supabase.tables["users"] = [u for u in fake_supabase.tables["users"] if u["id"] != member["id"]]
    rows = {row["Task ID"]: row for row in report_service.export_tasks(admin)}
    assert rows[task.id]["Assigned To"] == "Unassigned"

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from app.database.supabase_client import get_supabase
from app.modules.reports.service import ReportService, TASK_EXPORT_COLUMNS, USER_EXPORT_COLUMNS
from app.modules.reports.spreadsheet import XLSX_MEDIA_TYPE, to_xlsx
from app.core.dependencies import require_permission
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/reports", tags=["reports"])


def get_report_service(supabase: Client = Depends(get_supabase)) -> ReportService:
    return ReportService(supabase)


def _xlsx_download(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/export/tasks")
async def export_tasks(
    user_data: Dict = Depends(require_permission("reports:export")),
    service: ReportService = Depends(get_report_service)
):
    """Download every task as an Excel workbook (admin only)"""
    rows = service.export_tasks(user_data)
    return _xlsx_download(to_xlsx(rows, TASK_EXPORT_COLUMNS, "Tasks Report"), "tasks_report.xlsx")


@router.get("/export/users")
async def export_users(
    user_data: Dict = Depends(require_permission("reports:export")),
    service: ReportService = Depends(get_report_service)
):
    """Download users with their task counts as an Excel workbook (admin only)"""
    rows = service.export_users(user_data)
    return _xlsx_download(to_xlsx(rows, USER_EXPORT_COLUMNS, "User Task Report"), "users_report.xlsx")

from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.users.schemas import UserResponse, UserWithTaskCounts
from app.modules.users.service import UserService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


@router.get("", response_model=List[UserWithTaskCounts])
async def list_users(
    user_data: Dict = Depends(require_permission("users:read")),
    service: UserService = Depends(get_user_service),
):
    """List members with their task counts by status (admin only)"""
    return service.list_members_with_task_counts()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    user_data: Dict = Depends(require_permission("users:read")),
    service: UserService = Depends(get_user_service),
):
    """Get user by ID (admin only)"""
    return service.get_user_by_id(user_id)

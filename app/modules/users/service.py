from supabase import Client
from postgrest.exceptions import APIError
from app.modules.users.schemas import UserResponse, UserWithTaskCounts
from app.core.errors import DuplicateEmail, NotFound
from app.config.permissions_config import MEMBER_ROLE
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
import logging
import uuid

logger = logging.getLogger(__name__)

# Everything except password_hash
PUBLIC_COLUMNS = "id, name, email, role, profile_image_url, created_at, updated_at"

UNIQUE_VIOLATION = "23505"

# Users joined with per-status counts of their assigned tasks, see app/modules/reports/models.py
TASK_COUNTS_VIEW = "user_task_counts"


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def is_valid_id(value: Any) -> bool:
    """Row ids are uuid columns; anything else would fail the cast in Postgres"""
    try:
        uuid.UUID(str(value))
    except (TypeError, ValueError):
        return False
    return True


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_row(self, user_id: str) -> Optional[Dict[str, Any]]:
        """User row without the password hash, or None"""
        if not is_valid_id(user_id):
            return None
        result = self.supabase.table("users")\
            .select(PUBLIC_COLUMNS)\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def get_user_by_id(self, user_id: str) -> UserResponse:
        """Get user profile by ID"""
        row = self.get_user_row(user_id)
        if not row:
            raise NotFound("User not found")
        return UserResponse(**row)

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Full user row including password_hash, for credential checks"""
        result = self.supabase.table("users")\
            .select("*")\
            .eq("email", normalize_email(email))\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def email_exists(self, email: str, exclude_user_id: Optional[str] = None) -> bool:
        query = self.supabase.table("users")\
            .select("id")\
            .eq("email", normalize_email(email))
        if exclude_user_id and is_valid_id(exclude_user_id):
            query = query.neq("id", exclude_user_id)
        result = query.limit(1).execute()
        return bool(result.data)

    def create_user(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            result = self.supabase.table("users").insert(user_data).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise DuplicateEmail()
            raise
        row = dict(result.data[0])
        row.pop("password_hash", None)
        logger.info("Created user %s with role %s", row.get("id"), row.get("role"))
        return row

    def update_user(self, user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        if not is_valid_id(user_id):
            raise NotFound("User not found")
        update_data = {**changes, "updated_at": datetime.now(timezone.utc).isoformat()}
        try:
            result = self.supabase.table("users")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise DuplicateEmail()
            raise
        if not result.data:
            raise NotFound("User not found")
        row = dict(result.data[0])
        row.pop("password_hash", None)
        return row

    def get_users_by_ids(self, user_ids: Iterable[str]) -> List[Dict[str, Any]]:
        ids = [user_id for user_id in dict.fromkeys(user_ids) if is_valid_id(user_id)]
        if not ids:
            return []
        result = self.supabase.table("users")\
            .select(PUBLIC_COLUMNS)\
            .in_("id", ids)\
            .execute()
        return result.data or []

    def count_users(self) -> int:
        result = self.supabase.table("users").select("id", count="exact").execute()
        return result.count if result.count is not None else len(result.data or [])

    def list_users_with_task_counts(self, role: Optional[str] = None) -> List[Dict[str, Any]]:
        """Users with total_tasks and per-status counts, read in one query"""
        query = self.supabase.table(TASK_COUNTS_VIEW).select("*")
        if role:
            query = query.eq("role", role)
        result = query.order("created_at", desc=True).execute()
        return result.data or []

    def list_members_with_task_counts(self) -> List[UserWithTaskCounts]:
        """Members (role=member) with how many of their assigned tasks sit in each status"""
        return [UserWithTaskCounts(**row) for row in self.list_users_with_task_counts(role=MEMBER_ROLE)]

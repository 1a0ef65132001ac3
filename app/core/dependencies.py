"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config import settings
from app.database.supabase_client import get_supabase
from app.modules.auth.service import AuthConfig, AuthService
from app.core.errors import Unauthorized
from app.core.permissions import ensure_can_perform
from supabase import Client
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# auto_error off so a missing header surfaces as 401 rather than 403
security = HTTPBearer(auto_error=False)


def get_auth_config() -> AuthConfig:
    return AuthConfig.from_settings(settings)


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    config: AuthConfig = Depends(get_auth_config),
) -> AuthService:
    return AuthService(supabase, config)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Resolve the bearer token to the acting user (id, role, ...)"""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Not authorized, no token")
    return auth_service.get_current_user(credentials.credentials)


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    def check_permission(user_data: dict = Depends(get_current_user_id)) -> dict:
        """Dependency to check if user has required permission"""
        ensure_can_perform(user_data, required_permission)
        return user_data
    return check_permission

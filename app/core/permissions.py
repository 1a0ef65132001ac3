"""
Authorization predicate consulted by every mutating operation.
"""

from typing import Any, Dict, Optional
import logging

from app.config.permissions_config import (
    ADMIN_ROLE, ASSIGNEE_SCOPED_PERMISSIONS, PERMISSION_MATRIX,
)
from app.core.errors import Forbidden

logger = logging.getLogger(__name__)


def is_admin(actor: Dict[str, Any]) -> bool:
    return actor.get("role") == ADMIN_ROLE


def get_role_permissions(role: Optional[str]) -> set:
    return set(PERMISSION_MATRIX["roles"].get(role or "", []))


def is_assignee(actor: Dict[str, Any], task: Dict[str, Any]) -> bool:
    return actor.get("id") in (task.get("assigned_to") or [])


def can_perform(actor: Dict[str, Any], action: str, resource: Optional[Dict[str, Any]] = None) -> bool:
    """True if actor's role grants `action`; for assignee-scoped actions on a
    given task, non-admins must also be assigned to it."""
    if action not in get_role_permissions(actor.get("role")):
        return False
    if resource is not None and action in ASSIGNEE_SCOPED_PERMISSIONS and not is_admin(actor):
        return is_assignee(actor, resource)
    return True


def ensure_can_perform(actor: Dict[str, Any], action: str, resource: Optional[Dict[str, Any]] = None) -> None:
    if not can_perform(actor, action, resource):
        logger.warning("Denied %s for user %s (role=%s)", action, actor.get("id"), actor.get("role"))
        raise Forbidden(f"Insufficient permissions. Required: {action}")

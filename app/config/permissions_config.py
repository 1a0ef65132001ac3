"""
Permissions and Roles Configuration
This config defines the permission matrix for all modules and the two user roles.
Consulted by app.core.permissions for every authorization decision.
"""

# Define modules and their actions
MODULES = {
    "tasks": {
        "resource": "tasks",
        "actions": [
            "create", "read", "read_all", "update", "delete",
            "assign", "update_status", "update_checklist",
        ],
        "description": "Task management"
    },
    "users": {
        "resource": "users",
        "actions": ["read"],
        "description": "User directory"
    },
    "reports": {
        "resource": "reports",
        "actions": ["read", "read_all", "export"],
        "description": "Dashboards and spreadsheet exports"
    }
}

ADMIN_ROLE = "admin"
MEMBER_ROLE = "member"

# Role definitions; "*" grants every action of every module
ROLE_TYPES = {
    ADMIN_ROLE: {
        "permissions": ["*"],
        "description": "Full access to every task, user and report"
    },
    MEMBER_ROLE: {
        "permissions": [
            "tasks:read",
            "tasks:update_status",
            "tasks:update_checklist",
            "reports:read",
        ],
        "description": "Works on tasks they are assigned to"
    }
}

# Permissions that a member only holds for tasks they are assigned to
ASSIGNEE_SCOPED_PERMISSIONS = {
    "tasks:read",
    "tasks:update_status",
    "tasks:update_checklist",
}


def get_permission_matrix():
    """
    Returns a dictionary with all permissions and the permissions of each role
    Format: {
        "permissions": [
            {"name": "tasks:create", "resource": "tasks", "action": "create", "description": "..."},
            ...
        ],
        "roles": {
            "admin": ["reports:export", "tasks:create", ...],
            "member": ["reports:read", "tasks:read", ...]
        }
    }
    """
    permissions = []
    for module_config in MODULES.values():
        resource = module_config["resource"]
        for action in module_config["actions"]:
            permissions.append({
                "name": f"{resource}:{action}",
                "resource": resource,
                "action": action,
                "description": f"{action.replace('_', ' ').capitalize()} {resource}"
            })

    all_names = sorted(p["name"] for p in permissions)
    roles = {}
    for role, role_config in ROLE_TYPES.items():
        if "*" in role_config["permissions"]:
            roles[role] = all_names
        else:
            roles[role] = sorted(role_config["permissions"])

    return {
        "permissions": permissions,
        "roles": roles
    }


PERMISSION_MATRIX = get_permission_matrix()

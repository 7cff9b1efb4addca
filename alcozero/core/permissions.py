"""Role -> permission mapping carried in access tokens as ``module.action`` strings."""
from enum import Enum
from typing import List


class RoleEnum(str, Enum):
    ADMIN = "admin"
    OPERATOR = "operator"
    VIEWER = "viewer"


# Every account may manage its own profile, preferences and security settings
SELF_SERVICE = [
    "security.read",
    "security.update",
    "settings.read",
    "settings.update",
]

READ_ONLY = [
    "device.read",
    "log.read",
    "alert.read",
    "analytics.read",
    "monitor.read",
]

ROLE_PERMISSIONS = {
    RoleEnum.VIEWER: READ_ONLY + SELF_SERVICE,
    RoleEnum.OPERATOR: READ_ONLY + SELF_SERVICE + [
        "device.update",
        "log.create",
        "alert.create",
        "alert.update",
        "monitor.update",
        "telemetry.create",
    ],
    RoleEnum.ADMIN: READ_ONLY + SELF_SERVICE + [
        "device.create",
        "device.update",
        "device.delete",
        "log.create",
        "alert.create",
        "alert.update",
        "monitor.update",
        "telemetry.create",
        "settings.delete",
        "contact.read",
        "maintenance.run",
        "seed.create",
    ],
}


def normalize_role(role: str) -> str:
    return (role or "").strip().lower()


def permissions_for_role(role: str) -> List[str]:
    try:
        return list(ROLE_PERMISSIONS[RoleEnum(normalize_role(role))])
    except ValueError:
        return []

from fastapi import Depends, HTTPException, status
from typing import List
import logging

from alcozero.core.permissions import normalize_role
from alcozero.utils.response_utils import ResponseWrapper

from .token_validation import validate_bearer_token

logger = logging.getLogger("uvicorn")


class PermissionChecker:
    def __init__(self, required_permissions: List[str]):
        self.required_permissions = required_permissions

    async def __call__(self, user_data=Depends(validate_bearer_token(use_cache=True))):
        user_permissions = user_data.get("permissions", [])

        if not any(p in user_permissions for p in self.required_permissions):
            logger.warning(f"Permission denied. Required: {self.required_permissions}, user {user_data.get('user_id')} has: {user_permissions}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=ResponseWrapper.error(
                    message="Insufficient permissions",
                    error_code="FORBIDDEN",
                ),
            )

        return user_data


class RoleChecker:
    """Case-insensitive role gate; the caller must hold one of ``allowed_roles``"""

    def __init__(self, allowed_roles: List[str]):
        self.allowed_roles = {normalize_role(r) for r in allowed_roles}

    async def __call__(self, user_data=Depends(validate_bearer_token(use_cache=True))):
        if normalize_role(user_data.get("role")) not in self.allowed_roles:
            logger.warning(f"Role denied. Allowed: {sorted(self.allowed_roles)}, user {user_data.get('user_id')} has: {user_data.get('role')}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=ResponseWrapper.error(
                    message="Access restricted to roles: " + ", ".join(sorted(self.allowed_roles)),
                    error_code="FORBIDDEN",
                ),
            )
        return user_data

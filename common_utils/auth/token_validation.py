import json
import logging
import time
from typing import Dict, Optional

import redis
from cachetools import TTLCache
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from alcozero.config import settings
from alcozero.utils.response_utils import ResponseWrapper
from .utils import verify_token

logger = logging.getLogger("uvicorn")

# Create a security instance
security = HTTPBearer(auto_error=False)


class RedisRevocationStore:
    """Revoked token ids kept in Redis until the token would have expired"""
    prefix = "revoked_token:"

    def __init__(self):
        self.client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            password=settings.REDIS_PASSWORD or None,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        self.client.ping()

    def revoke(self, jti: str, payload: Dict, ttl: int) -> None:
        self.client.setex(f"{self.prefix}{jti}", max(int(ttl), 1), json.dumps({"user_id": payload.get("user_id")}))

    def is_revoked(self, jti: str) -> bool:
        return bool(self.client.exists(f"{self.prefix}{jti}"))


class MemoryRevocationStore:
    """In-process revocation list; entries expire with the longest token lifetime"""

    def __init__(self, maxsize: int = 10000):
        self.cache = TTLCache(maxsize=maxsize, ttl=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60)

    def revoke(self, jti: str, payload: Dict, ttl: int) -> None:
        self.cache[jti] = payload.get("user_id")

    def is_revoked(self, jti: str) -> bool:
        return jti in self.cache


class TokenRevocationList:
    _instance = None

    def __new__(cls):
        if not cls._instance:
            cls._instance = super(TokenRevocationList, cls).__new__(cls)
            cls._instance._store = None
        return cls._instance

    @property
    def store(self):
        if self._store is None:
            if settings.USE_REDIS:
                try:
                    self._store = RedisRevocationStore()
                    logger.info("Using Redis for token revocation")
                except Exception as e:
                    logger.error(f"Failed to connect to Redis, using in-memory revocation list: {e}")
                    self._store = MemoryRevocationStore()
            else:
                self._store = MemoryRevocationStore()
        return self._store

    def revoke(self, payload: Dict) -> bool:
        jti = payload.get("jti")
        if not jti:
            return False
        ttl = int(payload.get("exp", time.time() + 3600) - time.time())
        self.store.revoke(jti, payload, ttl)
        return True

    def is_revoked(self, payload: Dict) -> bool:
        jti = payload.get("jti")
        return bool(jti) and self.store.is_revoked(jti)


revocation_list = TokenRevocationList()


def _unauthorized(message: str, error_code: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=ResponseWrapper.error(message=message, error_code=error_code),
    )


def validate_bearer_token(use_cache: bool = True):
    async def get_token_data(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> Dict:
        if credentials is None or not credentials.credentials:
            raise _unauthorized("Not authenticated", "NOT_AUTHENTICATED")

        payload = verify_token(credentials.credentials)

        if payload.get("token_type") != "access":
            raise _unauthorized("Invalid authentication token", "INVALID_TOKEN")

        if use_cache and revocation_list.is_revoked(payload):
            raise _unauthorized("Session has been signed out", "TOKEN_REVOKED")

        user_id = payload.get("user_id")
        if not user_id:
            raise _unauthorized("Invalid authentication token", "INVALID_TOKEN")

        return {
            "user_id": user_id,
            "user_type": payload.get("user_type"),
            "email": payload.get("email"),
            "role": payload.get("role"),
            "permissions": payload.get("permissions", []),
            "token_payload": payload,
        }

    return get_token_data

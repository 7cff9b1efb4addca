from datetime import datetime, timedelta, timezone
import hashlib
import hmac
import uuid
from typing import Optional, Dict
import jwt
from fastapi import HTTPException, status
from alcozero.config import settings
from alcozero.utils.response_utils import ResponseWrapper

# Configuration - use centralized settings
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

def create_access_token(
    user_id: str,
    user_type: str = "admin",
    custom_claims: Optional[Dict] = None,  # role, email, permissions, ...
    expires_delta: Optional[timedelta] = None
) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        "user_id": str(user_id),
        "token_type": "access",
        "user_type": user_type,
        "jti": uuid.uuid4().hex,
    }

    if custom_claims:
        to_encode.update(custom_claims)

    to_encode = {k: v for k, v in to_encode.items() if v is not None}

    expire = now + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "iat": now})

    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> Dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])

    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ResponseWrapper.error("Token expired", "TOKEN_EXPIRED"),
        )

    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ResponseWrapper.error("Invalid authentication token", "INVALID_TOKEN"),
        )

def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode('utf-8')).hexdigest()

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return hmac.compare_digest(hash_password(plain_password), hashed_password or "")

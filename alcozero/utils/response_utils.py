import re
from typing import Any, Dict, List, Optional, Tuple
from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder
from alcozero.schemas.base import (
    create_success_response,
    create_error_response,
    create_paginated_response
)
from alcozero.core.logging_config import get_logger

logger = get_logger(__name__)


class ResponseWrapper:
    """Utility class for wrapping responses in standard format"""

    @staticmethod
    def success(data: Any = None, message: str = "Success") -> Dict[str, Any]:
        return create_success_response(data, message)

    @staticmethod
    def error(
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Wrap error response and make it JSON-safe"""
        raw = create_error_response(message, error_code, details)
        return jsonable_encoder(raw)

    @staticmethod
    def paginated(
        items: List[Any],
        total: int,
        page: int = 1,
        per_page: int = 10,
        message: str = "Success"
    ) -> Dict[str, Any]:
        return create_paginated_response(items, total, page, per_page, message)

    @staticmethod
    def created(data: Any = None, message: str = "Resource created successfully") -> Dict[str, Any]:
        return create_success_response(data, message)

    @staticmethod
    def updated(data: Any = None, message: str = "Resource updated successfully") -> Dict[str, Any]:
        return create_success_response(data, message)

    @staticmethod
    def deleted(message: str = "Resource deleted successfully") -> Dict[str, Any]:
        return create_success_response(None, message)


def error_exception(status_code: int, message: str, error_code: str, details: Optional[Dict[str, Any]] = None) -> HTTPException:
    """Shorthand for an HTTPException carrying the error envelope"""
    return HTTPException(
        status_code=status_code,
        detail=ResponseWrapper.error(message=message, error_code=error_code, details=details),
    )


def _conflicting_fields(error_msg: str) -> Dict[str, str]:
    match = re.search(r"Key \((.*?)\)=\((.*?)\)", error_msg)
    if not match:
        return {}
    columns = match.group(1).split(", ")
    values = match.group(2).split(", ")
    return {col: val for col, val in zip(columns, values)}


def handle_db_error(error: Exception) -> HTTPException:
    """Convert database errors to HTTP exceptions with detailed info"""
    error_msg = str(error).strip().replace("\n", " ")
    lowered = error_msg.lower()

    # postgres says "duplicate key", sqlite says "unique constraint failed"
    if "duplicate key" in lowered or "unique constraint" in lowered:
        return error_exception(
            status.HTTP_409_CONFLICT,
            "Resource already exists with the same values",
            "DUPLICATE_RESOURCE",
            {"db_error": error_msg, "conflicting_fields": _conflicting_fields(error_msg)},
        )

    if "foreign key" in lowered:
        return error_exception(
            status.HTTP_404_NOT_FOUND,
            "Referenced resource not found",
            "FOREIGN_KEY_VIOLATION",
            {"db_error": error_msg, "conflicting_fields": _conflicting_fields(error_msg)},
        )

    return error_exception(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Database operation failed",
        "DATABASE_ERROR",
        {"db_error": error_msg},
    )


def handle_http_error(error: Exception) -> HTTPException:
    """Convert HTTP and generic exceptions into structured ResponseWrapper format"""
    if isinstance(error, HTTPException):
        detail = getattr(error, "detail", str(error))
        if isinstance(detail, dict) and detail.get("success") is not None:
            return error

        return error_exception(
            error.status_code,
            str(detail),
            "HTTP_ERROR",
            {"original_error": detail},
        )

    logger.exception(f"Unexpected HTTP error: {error}")
    return error_exception(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Unexpected server error",
        "INTERNAL_SERVER_ERROR",
        {"original_error": str(error)},
    )


def validate_pagination_params(skip: int, limit: int) -> Tuple[int, int]:
    """Normalize skip/limit into (page, per_page)"""
    if skip < 0:
        skip = 0
    if limit <= 0 or limit > 100:
        limit = 10

    page = (skip // limit) + 1
    per_page = limit
    return page, per_page

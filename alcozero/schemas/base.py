from typing import Any, Dict, List, Optional
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _stamp() -> str:
    return _utcnow().strftime("%Y-%m-%d %H:%M:%S")


# Utility functions for creating consistent responses
def create_success_response(data: Any = None, message: str = "Success") -> Dict[str, Any]:
    return {
        "success": True,
        "message": message,
        "data": data,
        "timestamp": _stamp()
    }

def create_error_response(message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "error_code": error_code,
        "details": details,
        "timestamp": _stamp()
    }

def create_paginated_response(
    items: List[Any],
    total: int,
    page: int,
    per_page: int,
    message: str = "Success"
) -> Dict[str, Any]:
    total_pages = (total + per_page - 1) // per_page if per_page else 0

    return {
        "success": True,
        "message": message,
        "data": items,
        "meta": {
            "total": total,
            "page": page,
            "per_page": per_page,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1
        },
        "timestamp": _stamp()
    }

from typing import Optional, Dict, Any
from fastapi import Request
from sqlalchemy.orm import Session

from alcozero.core.logging_config import get_logger
from alcozero.core.severity import Severity
from alcozero.crud.security_log import security_log_crud
from alcozero.crud.user_settings import user_settings_crud
from alcozero.models.security_log import SecurityLog

logger = get_logger(__name__)


class AuditService:
    """
    Security event log for sign-in, account and data changes
    """

    @staticmethod
    def log_event(
        db: Session,
        admin_id: Optional[int],
        event: str,
        message: str,
        severity: Severity = Severity.INFO,
        user_email: Optional[str] = None,
        audit_data: Optional[Dict[str, Any]] = None,
        request: Optional[Request] = None,
        force: bool = False,
    ) -> Optional[SecurityLog]:
        """
        Record a security event for the admin, unless their security settings
        turn ``audit_logging`` off. ``force`` records regardless.

        The entry is flushed, not committed: it lands with the caller's
        transaction.
        """
        if admin_id is not None and not force:
            security = user_settings_crud.security_for(db, admin_id=admin_id)
            if not security.audit_logging:
                logger.debug(f"[Audit] Audit logging disabled for admin {admin_id}; skipping {event}")
                return None

        ip_address = None
        user_agent = None
        if request:
            ip_address = request.client.host if request.client else None
            user_agent = request.headers.get("user-agent", None)

        return security_log_crud.create(
            db,
            admin_id=admin_id,
            event=event,
            message=message,
            severity=severity,
            user_email=user_email,
            audit_data=audit_data,
            ip_address=ip_address,
            user_agent=user_agent,
        )

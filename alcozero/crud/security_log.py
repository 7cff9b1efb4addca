from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session

from alcozero.core.severity import Severity
from alcozero.models.security_log import SecurityLog


class CRUDSecurityLog:
    def create(
        self,
        db: Session,
        *,
        admin_id: Optional[int],
        event: str,
        message: str,
        severity: Severity = Severity.INFO,
        user_email: Optional[str] = None,
        audit_data: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> SecurityLog:
        """Flushes only; the log commits with the action it records."""
        entry = SecurityLog(
            admin_id=admin_id,
            event=event,
            message=message,
            severity=severity,
            user_email=user_email,
            audit_data=audit_data,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        db.add(entry)
        db.flush()
        return entry

    def get_for_admin(self, db: Session, *, admin_id: int, limit: int = 50) -> List[SecurityLog]:
        return (
            db.query(SecurityLog)
            .filter(SecurityLog.admin_id == admin_id)
            .order_by(SecurityLog.timestamp.desc(), SecurityLog.log_id.desc())
            .limit(limit)
            .all()
        )


security_log_crud = CRUDSecurityLog()

from datetime import datetime
from typing import Iterable, List, Optional
from sqlalchemy import and_
from sqlalchemy.orm import Session

from alcozero.core.severity import AlertPriority, Severity, CRITICAL_THRESHOLD, WARNING_THRESHOLD
from alcozero.models.alert import Alert, AlertTypeEnum, AlertStatusEnum
from common_utils import utcnow


def severity_clause(severity: Optional[str]):
    """SQL filter equivalent of the severity policy; None for ``all``"""
    if not severity or severity == "all":
        return None
    severity = Severity(severity)
    if severity == Severity.CRITICAL:
        return Alert.alcohol_level > CRITICAL_THRESHOLD
    if severity == Severity.WARNING:
        return and_(Alert.alcohol_level > WARNING_THRESHOLD, Alert.alcohol_level <= CRITICAL_THRESHOLD)
    return Alert.alcohol_level <= WARNING_THRESHOLD


def create_alert(
    db: Session,
    *,
    device_id: str,
    alcohol_level: float,
    engine: str,
    alert_type: AlertTypeEnum,
    message: str,
    priority: Optional[AlertPriority] = None,
    triggered_by: Optional[int] = None,
    timestamp: Optional[datetime] = None,
) -> Alert:
    """Flushes only; the caller commits."""
    alert = Alert(
        device_id=device_id,
        alcohol_level=float(alcohol_level or 0),
        engine=engine or "UNKNOWN",
        alert_type=alert_type,
        message=message,
        status=AlertStatusEnum.NEW,
        priority=priority,
        triggered_by=triggered_by,
        timestamp=timestamp or utcnow(),
    )
    db.add(alert)
    db.flush()
    return alert


def get_alerts(
    db: Session,
    *,
    limit: int = 20,
    severity: Optional[str] = None,
    status: Optional[AlertStatusEnum] = None,
    device_id: Optional[str] = None,
    device_ids: Optional[Iterable[str]] = None,
    since: Optional[datetime] = None,
) -> List[Alert]:
    """Newest first."""
    query = db.query(Alert)

    clause = severity_clause(severity)
    if clause is not None:
        query = query.filter(clause)
    if status:
        query = query.filter(Alert.status == status)
    if device_id:
        query = query.filter(Alert.device_id == device_id)
    if device_ids is not None:
        query = query.filter(Alert.device_id.in_(list(device_ids)))
    if since is not None:
        query = query.filter(Alert.timestamp >= since)

    return query.order_by(Alert.timestamp.desc(), Alert.alert_id.desc()).limit(limit).all()


def count_since(db: Session, *, since: datetime, end: Optional[datetime] = None) -> int:
    query = db.query(Alert).filter(Alert.timestamp >= since)
    if end is not None:
        query = query.filter(Alert.timestamp < end)
    return query.count()


def get_alert(db: Session, alert_id: int) -> Optional[Alert]:
    return db.query(Alert).filter(Alert.alert_id == alert_id).first()


def update_alert_status(db: Session, *, alert: Alert, status: AlertStatusEnum) -> Alert:
    alert.status = status
    alert.status_updated_at = utcnow()
    db.add(alert)
    db.flush()
    return alert

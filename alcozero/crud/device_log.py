from datetime import datetime
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session

from alcozero.core.severity import LogStatus
from alcozero.models.device_log import DeviceLog
from common_utils import utcnow


def create_log(
    db: Session,
    *,
    device_id: str,
    alcohol_level: float,
    engine: str,
    status: LogStatus,
    source: str = "manual",
    timestamp: Optional[datetime] = None,
) -> DeviceLog:
    """Flushes only; the caller commits."""
    log = DeviceLog(
        device_id=device_id,
        alcohol_level=float(alcohol_level or 0),
        engine=engine or "UNKNOWN",
        status=status,
        source=source,
        timestamp=timestamp or utcnow(),
    )
    db.add(log)
    db.flush()
    return log


def get_logs(
    db: Session,
    *,
    limit: int = 50,
    device_id: Optional[str] = None,
    device_ids: Optional[Iterable[str]] = None,
    since: Optional[datetime] = None,
) -> List[DeviceLog]:
    """Newest first."""
    query = db.query(DeviceLog)
    if device_id:
        query = query.filter(DeviceLog.device_id == device_id)
    if device_ids is not None:
        query = query.filter(DeviceLog.device_id.in_(list(device_ids)))
    if since is not None:
        query = query.filter(DeviceLog.timestamp >= since)
    return query.order_by(DeviceLog.timestamp.desc(), DeviceLog.log_id.desc()).limit(limit).all()


def get_logs_between(
    db: Session, *, start: datetime, end: Optional[datetime] = None, device_id: Optional[str] = None
) -> List[DeviceLog]:
    query = db.query(DeviceLog).filter(DeviceLog.timestamp >= start)
    if device_id:
        query = query.filter(DeviceLog.device_id == device_id)
    if end is not None:
        query = query.filter(DeviceLog.timestamp < end)
    return query.all()


def delete_older_than(db: Session, *, cutoff: datetime) -> int:
    return (
        db.query(DeviceLog)
        .filter(DeviceLog.timestamp < cutoff)
        .delete(synchronize_session=False)
    )

from typing import List, Optional
from sqlalchemy.orm import Session

from alcozero.models.engine_log import EngineLog


def create_engine_log(db: Session, *, device_id: str, previous_status: Optional[str], new_status: str, action: str) -> EngineLog:
    entry = EngineLog(
        device_id=device_id,
        previous_status=previous_status,
        new_status=new_status,
        action=action,
    )
    db.add(entry)
    db.flush()
    return entry


def get_engine_logs(db: Session, *, device_id: str, limit: int = 50) -> List[EngineLog]:
    return (
        db.query(EngineLog)
        .filter(EngineLog.device_id == device_id)
        .order_by(EngineLog.timestamp.desc(), EngineLog.engine_log_id.desc())
        .limit(limit)
        .all()
    )

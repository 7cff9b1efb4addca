from datetime import date
from typing import Any, Dict, List
from sqlalchemy.orm import Session

from alcozero.models.statistics import DailyStatistic


def upsert_daily_statistic(db: Session, *, stat_date: date, values: Dict[str, Any]) -> DailyStatistic:
    row = db.query(DailyStatistic).filter(DailyStatistic.stat_date == stat_date).first()
    if row is None:
        row = DailyStatistic(stat_date=stat_date)
    for key, value in values.items():
        setattr(row, key, value)
    db.add(row)
    db.flush()
    return row


def get_recent_statistics(db: Session, *, limit: int = 30) -> List[DailyStatistic]:
    return db.query(DailyStatistic).order_by(DailyStatistic.stat_date.desc()).limit(limit).all()

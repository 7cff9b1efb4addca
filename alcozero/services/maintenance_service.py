"""
Scheduled housekeeping: log retention and daily statistics.
"""
import asyncio
from datetime import datetime, timedelta
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session

from alcozero.config import settings
from alcozero.core.logging_config import get_logger
from alcozero.crud.alert import count_since
from alcozero.crud.device_log import delete_older_than, get_logs_between
from alcozero.crud.statistics import upsert_daily_statistic
from alcozero.database.session import SessionLocal
from alcozero.models.statistics import DailyStatistic
from common_utils import start_of_day, utcnow

logger = get_logger(__name__)


def cleanup_old_logs(db: Session, retention_days: Optional[int] = None, now: Optional[datetime] = None) -> int:
    """Delete device logs older than the retention window; returns the count."""
    retention_days = retention_days or settings.LOG_RETENTION_DAYS
    cutoff = (now or utcnow()) - timedelta(days=retention_days)
    deleted = delete_older_than(db, cutoff=cutoff)
    db.commit()
    logger.info(f"[Maintenance] Deleted {deleted} old log entries (before {cutoff.isoformat()})")
    return deleted


def generate_daily_statistics(db: Session, now: Optional[datetime] = None) -> DailyStatistic:
    """Aggregate today's logs and alerts into one stored row per date."""
    now = now or utcnow()
    since = start_of_day(now)

    logs = get_logs_between(db, start=since)
    levels = [log.alcohol_level or 0 for log in logs]

    values: Dict[str, Any] = {
        "total_logs": len(logs),
        "total_alerts": count_since(db, since=since),
        "average_alcohol_level": sum(levels) / len(levels) if levels else 0.0,
        "max_alcohol_level": max(levels) if levels else 0.0,
        "device_count": len({log.device_id for log in logs}),
        "generated_at": now,
    }
    row = upsert_daily_statistic(db, stat_date=since.date(), values=values)
    db.commit()
    logger.info(f"[Maintenance] Daily stats for {row.stat_date}: {values['total_logs']} logs, {values['total_alerts']} alerts")
    return row


class MaintenanceScheduler:
    """Runs both jobs every MAINTENANCE_INTERVAL_HOURS on the event loop"""

    def __init__(self, interval_hours: Optional[float] = None):
        self.interval_seconds = (interval_hours or settings.MAINTENANCE_INTERVAL_HOURS) * 3600
        self._task: Optional[asyncio.Task] = None

    def run_once(self) -> Dict[str, Any]:
        db = SessionLocal()
        try:
            deleted = cleanup_old_logs(db)
            stats = generate_daily_statistics(db)
            return {"deleted_logs": deleted, "stat_date": stats.stat_date.isoformat()}
        finally:
            db.close()

    async def _loop(self):
        while True:
            try:
                await asyncio.to_thread(self.run_once)
            except Exception as e:
                logger.exception(f"[Maintenance] Scheduled run failed: {e}")
            await asyncio.sleep(self.interval_seconds)

    def start(self):
        if self._task is None:
            logger.info(f"[Maintenance] Scheduler started, every {self.interval_seconds / 3600:g}h")
            self._task = asyncio.create_task(self._loop())

    async def stop(self):
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("[Maintenance] Scheduler stopped")


maintenance_scheduler = MaintenanceScheduler()

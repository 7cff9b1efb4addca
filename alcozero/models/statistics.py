from sqlalchemy import Column, Integer, Float, Date, DateTime
from alcozero.database.session import Base
from common_utils import utcnow


class DailyStatistic(Base):
    __tablename__ = "daily_statistics"
    __table_args__ = {"extend_existing": True}

    stat_date = Column(Date, primary_key=True)
    total_logs = Column(Integer, nullable=False, default=0)
    total_alerts = Column(Integer, nullable=False, default=0)
    average_alcohol_level = Column(Float, nullable=False, default=0.0)
    max_alcohol_level = Column(Float, nullable=False, default=0.0)
    device_count = Column(Integer, nullable=False, default=0)
    generated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

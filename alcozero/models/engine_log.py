from sqlalchemy import Column, Integer, String, DateTime
from alcozero.database.session import Base
from common_utils import utcnow


class EngineLog(Base):
    __tablename__ = "engine_logs"
    __table_args__ = {"extend_existing": True}

    engine_log_id = Column(Integer, primary_key=True, index=True)
    device_id = Column(String(100), nullable=False, index=True)
    previous_status = Column(String(20), nullable=True)
    new_status = Column(String(20), nullable=False)
    action = Column(String(20), nullable=False)  # LOCKED / UNLOCKED
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)

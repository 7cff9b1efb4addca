from sqlalchemy import Column, Integer, String, Float, DateTime, Index, Enum as SQLEnum
from alcozero.database.session import Base
from alcozero.core.severity import LogStatus
from common_utils import utcnow


class DeviceLog(Base):
    __tablename__ = "device_logs"
    __table_args__ = (
        Index("ix_device_logs_device_timestamp", "device_id", "timestamp"),
        {"extend_existing": True},
    )

    log_id = Column(Integer, primary_key=True, index=True)
    device_id = Column(String(100), nullable=False, index=True)
    alcohol_level = Column(Float, nullable=False, default=0.0)
    engine = Column(String(20), nullable=False, default="UNKNOWN")
    status = Column(SQLEnum(LogStatus, native_enum=False), nullable=False, default=LogStatus.SAFE)
    source = Column(String(20), nullable=False, default="manual")  # manual, telemetry, seed, import
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)

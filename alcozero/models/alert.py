from sqlalchemy import Column, Integer, String, Float, Text, DateTime, ForeignKey, Index, Enum as SQLEnum
from enum import Enum
from alcozero.database.session import Base
from alcozero.core.severity import AlertPriority
from common_utils import utcnow


class AlertTypeEnum(str, Enum):
    AUTO = "AUTO"      # raised by the telemetry pipeline
    MANUAL = "MANUAL"  # raised from the dashboard


class AlertStatusEnum(str, Enum):
    NEW = "new"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


class Alert(Base):
    """
    A flagged reading. Display severity is derived from ``alcohol_level``
    through the severity policy and never stored; ``priority`` is only set on
    AUTO alerts.
    """
    __tablename__ = "alerts"
    __table_args__ = (
        Index("ix_alerts_device_timestamp", "device_id", "timestamp"),
        {"extend_existing": True},
    )

    alert_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    device_id = Column(String(100), nullable=False, index=True)
    alcohol_level = Column(Float, nullable=False, default=0.0)
    engine = Column(String(20), nullable=False, default="UNKNOWN")
    alert_type = Column(SQLEnum(AlertTypeEnum, native_enum=False), nullable=False, default=AlertTypeEnum.MANUAL)
    message = Column(Text, nullable=True)
    status = Column(SQLEnum(AlertStatusEnum, native_enum=False), nullable=False, default=AlertStatusEnum.NEW)
    priority = Column(SQLEnum(AlertPriority, native_enum=False), nullable=True)
    triggered_by = Column(Integer, ForeignKey("admins.admin_id", ondelete="SET NULL"), nullable=True)
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)
    status_updated_at = Column(DateTime, nullable=True)

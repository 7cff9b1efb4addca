from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Index, Enum as SQLEnum
from alcozero.database.session import Base
from alcozero.core.severity import Severity
from common_utils import utcnow


class SecurityLog(Base):
    __tablename__ = "security_logs"
    __table_args__ = (
        Index("ix_security_logs_admin_timestamp", "admin_id", "timestamp"),
        {"extend_existing": True},
    )

    log_id = Column(Integer, primary_key=True, index=True)
    admin_id = Column(Integer, ForeignKey("admins.admin_id", ondelete="CASCADE"), nullable=True, index=True)
    user_email = Column(String(150), nullable=True)
    event = Column(String(50), nullable=False, index=True)  # 'login', 'device_create', ...
    message = Column(String(255), nullable=False)
    severity = Column(SQLEnum(Severity, native_enum=False), nullable=False, default=Severity.INFO)
    audit_data = Column(JSON, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(255), nullable=True)
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)

from sqlalchemy import Column, Integer, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from alcozero.database.session import Base
from common_utils import utcnow


class UserSettings(Base):
    __tablename__ = "user_settings"
    __table_args__ = {"extend_existing": True}

    admin_id = Column(Integer, ForeignKey("admins.admin_id", ondelete="CASCADE"), primary_key=True)
    security = Column(JSON, nullable=False, default=dict)
    preferences = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    admin = relationship("Admin", back_populates="settings")

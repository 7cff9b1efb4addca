from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from alcozero.database.session import Base
from common_utils import utcnow


class Admin(Base):
    __tablename__ = "admins"
    __table_args__ = {"extend_existing": True}

    admin_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    email = Column(String(150), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    organization = Column(String(150), nullable=True)
    role = Column(String(30), nullable=False, default="admin")
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    devices = relationship("Device", back_populates="admin", cascade="all, delete-orphan")
    settings = relationship("UserSettings", back_populates="admin", uselist=False, cascade="all, delete-orphan")

    @property
    def device_ids(self):
        return [device.device_id for device in self.devices]

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
from enum import Enum
from alcozero.database.session import Base
from common_utils import utcnow


class DeviceStatusEnum(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"
    OFFLINE = "offline"


class Device(Base):
    __tablename__ = "devices"
    __table_args__ = (
        UniqueConstraint("admin_id", "device_id", name="uq_device_admin_hardware_id"),
        {"extend_existing": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    admin_id = Column(Integer, ForeignKey("admins.admin_id", ondelete="CASCADE"), nullable=False, index=True)
    device_id = Column(String(100), nullable=False, index=True)  # hardware id, e.g. ALCH-001
    name = Column(String(150), nullable=False)
    location = Column(String(255), nullable=True)
    status = Column(SQLEnum(DeviceStatusEnum, native_enum=False), nullable=False, default=DeviceStatusEnum.ACTIVE)
    battery_level = Column(Integer, nullable=False, default=100)
    firmware_version = Column(String(20), nullable=False, default="1.0.0")
    last_seen = Column(DateTime, nullable=True)
    curr_location = Column(JSON, nullable=True)  # {"lat": .., "lng": ..}

    # Driver
    driver_id = Column(String(30), nullable=True, index=True)
    driver_name = Column(String(150), nullable=True)
    driver_age = Column(Integer, nullable=True)
    driver_photo = Column(String(500), nullable=True)
    license_no = Column(String(50), nullable=True)
    contact_number = Column(String(20), nullable=True)

    # Vehicle
    vehicle_name = Column(String(150), nullable=True)
    vehicle_number = Column(String(30), nullable=True)

    captured_images = Column(JSON, nullable=False, default=list)  # newest first

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    admin = relationship("Admin", back_populates="devices")

from sqlalchemy import Column, Integer, String, DateTime
from alcozero.database.session import Base
from common_utils import utcnow


class Counter(Base):
    """Named monotonic counters (e.g. the driver id sequence)"""
    __tablename__ = "counters"
    __table_args__ = {"extend_existing": True}

    name = Column(String(50), primary_key=True)
    current = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

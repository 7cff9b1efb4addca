from sqlalchemy import Column, Integer, String, Text, DateTime
from alcozero.database.session import Base
from common_utils import utcnow


class ContactMessage(Base):
    __tablename__ = "contact_messages"
    __table_args__ = {"extend_existing": True}

    contact_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    email = Column(String(150), nullable=False)
    phone = Column(String(30), nullable=True)
    message = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="new")
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)

"""NotificationLog model - audit trail of sent expiry notifications."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Date, DateTime

from ..database import Base


class NotificationLog(Base):
    """Record of one multicast sent for one pension to one user."""

    __tablename__ = "notification_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    user_email = Column(String, nullable=True)
    pension_id = Column(Integer, nullable=False)
    pension_name = Column(String, nullable=False)  # "<person> - <company>"
    expiration_date = Column(Date, nullable=False)
    sent_at = Column(DateTime, default=datetime.utcnow)
    success_count = Column(Integer, default=0)
    failure_count = Column(Integer, default=0)
    message = Column(String, nullable=True)

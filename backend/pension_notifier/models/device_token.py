"""DeviceToken model - stores the FCM registration token for each user."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime

from ..database import Base


class DeviceToken(Base):
    """Registered push address for a user.

    A user has at most one token; registering again overwrites it.
    """

    __tablename__ = "user_tokens"

    user_id = Column(String, primary_key=True)
    token = Column(String, nullable=True, index=True)  # NULL after logout
    email = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    platform = Column(String, nullable=True)
    language = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

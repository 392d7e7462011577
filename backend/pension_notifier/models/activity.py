"""UserActivity model - last time each user was seen in the client."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Boolean

from ..database import Base


class UserActivity(Base):
    """Heartbeat record, updated whenever the client loads or is used."""

    __tablename__ = "user_activity"

    user_id = Column(String, primary_key=True)
    email = Column(String, nullable=True)
    last_active_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    user_agent = Column(String, nullable=True)
    online = Column(Boolean, default=True)

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from groupgrade.database import Base
from groupgrade.time_utils import utcnow

TYPE_PRESSURE_ALERT = "PRESSURE_ALERT"

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(String(1000), nullable=False)
    notification_type = Column(String, nullable=False, default=TYPE_PRESSURE_ALERT)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

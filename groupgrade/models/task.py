from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from groupgrade.database import Base
from groupgrade.time_utils import utcnow

STATUS_NOT_STARTED = "not_started"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"
INCOMPLETE_STATUSES = (STATUS_NOT_STARTED, STATUS_IN_PROGRESS)

class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    assignee_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    difficulty = Column(Integer, nullable=True)  # 1 easy, 2 medium, 3 hard
    deadline = Column(Date, nullable=True)
    status = Column(String, nullable=False, default=STATUS_NOT_STARTED)  # not_started, in_progress, completed
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    group = relationship("Group", lazy="joined")

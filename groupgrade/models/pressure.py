from sqlalchemy import Column, Integer, DateTime, ForeignKey, Index
from groupgrade.database import Base
from groupgrade.time_utils import utcnow

class PressureScoreHistory(Base):
    """Append-only; rows are never updated or deleted by the engine."""
    __tablename__ = "pressure_score_history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    score = Column(Integer, nullable=False)  # % of project threshold, 0-100
    recorded_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_pressure_history_user_project_recorded", "user_id", "project_id", "recorded_at"),
    )

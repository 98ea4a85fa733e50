from sqlalchemy import Column, Integer, Float, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from groupgrade.database import Base
from groupgrade.time_utils import utcnow

class ContributionScore(Base):
    __tablename__ = "contribution_scores"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)

    # Normalized components (0-10 within the project cohort)
    task_completion_score = Column(Float, default=0.0)
    peer_review_score = Column(Float, default=0.0)
    code_contribution_score = Column(Float, default=0.0)

    # Raw audit values
    total_additions = Column(Integer, default=0)
    total_deletions = Column(Integer, default=0)
    late_task_count = Column(Integer, default=0)

    calculated_score = Column(Float, nullable=False, default=0.0)  # system truth, 0-10
    adjusted_score = Column(Float, nullable=True)                  # only set by manual adjustment
    adjustment_reason = Column(String(500), nullable=True)
    is_final = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    user = relationship("User", lazy="joined")
    project = relationship("Project", lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "project_id", name="uq_contribution_user_project"),
    )

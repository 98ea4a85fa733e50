from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List

class ScoreAdjustmentRequest(BaseModel):
    # range is enforced again by the service so direct callers get the same rule
    adjusted_score: float = Field(..., ge=0.0, le=10.0)
    adjustment_reason: Optional[str] = Field(None, max_length=500)

class ContributionScoreResponse(BaseModel):
    id: int
    user_id: int
    username: str
    full_name: Optional[str]
    email: str
    project_id: int
    project_name: str

    task_completion_score: float
    peer_review_score: float
    code_contribution_score: float
    late_task_count: int
    total_additions: int   # lines added across valid commits (capped per commit)
    total_deletions: int   # lines deleted across valid commits (capped per commit)

    calculated_score: float
    adjusted_score: Optional[float]
    adjustment_reason: Optional[str]
    is_final: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_score(cls, score) -> "ContributionScoreResponse":
        return cls(
            id=score.id,
            user_id=score.user.id,
            username=score.user.username,
            full_name=score.user.full_name,
            email=score.user.email,
            project_id=score.project.id,
            project_name=score.project.name,
            task_completion_score=score.task_completion_score or 0.0,
            peer_review_score=score.peer_review_score or 0.0,
            code_contribution_score=score.code_contribution_score or 0.0,
            late_task_count=score.late_task_count or 0,
            total_additions=score.total_additions or 0,
            total_deletions=score.total_deletions or 0,
            calculated_score=score.calculated_score,
            adjusted_score=score.adjusted_score,
            adjustment_reason=score.adjustment_reason,
            is_final=bool(score.is_final),
            created_at=score.created_at,
            updated_at=score.updated_at,
        )

class ContributionScoreListResponse(BaseModel):
    count: int
    scores: List[ContributionScoreResponse]

class MessageResponse(BaseModel):
    message: str

from pydantic import BaseModel
from datetime import datetime
from enum import Enum
from typing import Optional, List

class PressureStatus(str, Enum):
    SAFE = "SAFE"
    AT_RISK = "AT_RISK"
    OVERLOADED = "OVERLOADED"

    @property
    def description(self) -> str:
        return {
            PressureStatus.SAFE: "Workload is within a manageable range",
            PressureStatus.AT_RISK: "Workload is approaching the project threshold",
            PressureStatus.OVERLOADED: "Workload exceeds the project threshold",
        }[self]

class PressureScoreResponse(BaseModel):
    user_id: int
    username: str
    full_name: Optional[str]
    pressure_score: float
    status: PressureStatus
    status_description: str
    task_count: int
    threshold: int
    threshold_percentage: float  # pressure / threshold * 100
    project_id: Optional[int] = None
    project_name: Optional[str] = None

class PressureHistoryPoint(BaseModel):
    recorded_at: datetime
    score: int
    is_synthetic: bool = False

class PressureHistoryResponse(BaseModel):
    user_id: int
    project_id: int
    is_synthetic: bool  # True when any point was backfilled rather than recorded
    points: List[PressureHistoryPoint]  # newest first

class PressureScoreListResponse(BaseModel):
    count: int
    scores: List[PressureScoreResponse]

class GroupPressureResponse(PressureScoreListResponse):
    group_id: int
    group_name: str

class SweepResponse(BaseModel):
    projects: int
    users: int
    overloaded: int

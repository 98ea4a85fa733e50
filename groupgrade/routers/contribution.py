from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from groupgrade.database import get_db
from groupgrade.core.auth import get_current_user, get_current_instructor
from groupgrade.models.user import User, ROLE_ADMIN, ROLE_INSTRUCTOR, ROLE_STUDENT
from groupgrade.schemas.contribution import (
    ContributionScoreListResponse, ContributionScoreResponse, MessageResponse, ScoreAdjustmentRequest
)
from groupgrade.services import contribution
from groupgrade.services.cohort import get_project_groups
from groupgrade.services.lookups import get_group, get_project, get_user

router = APIRouter(prefix="/contribution-scores", tags=["contribution-scores"])

def _to_list(scores) -> ContributionScoreListResponse:
    items = [ContributionScoreResponse.from_score(s) for s in scores]
    return ContributionScoreListResponse(count=len(items), scores=items)

async def can_view_score(db: AsyncSession, current_user: User, target_user: User, project_id: int) -> bool:
    """Own score, instructors/admins, or the leader of a group the target belongs to."""
    if current_user.id == target_user.id:
        return True
    if current_user.has_role(ROLE_INSTRUCTOR, ROLE_ADMIN):
        return True
    for group in await get_project_groups(db, project_id):
        if group.leader_id == current_user.id and any(m.id == target_user.id for m in group.members):
            return True
    return False

@router.post("/calculate", response_model=MessageResponse)
async def calculate_scores(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    instructor = Depends(get_current_instructor)
):
    project = await get_project(db, project_id)
    await contribution.calculate_scores_for_project(db, project)
    return MessageResponse(message="Contribution scores calculated successfully")

@router.get("/projects/{project_id}", response_model=ContributionScoreListResponse)
async def get_scores_by_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    instructor = Depends(get_current_instructor)
):
    project = await get_project(db, project_id)
    return _to_list(await contribution.get_scores_by_project(db, project))

@router.get("/projects/{project_id}/users/{user_id}", response_model=ContributionScoreResponse)
async def get_score_by_user_and_project(
    project_id: int,
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    project = await get_project(db, project_id)
    user = await get_user(db, user_id)
    if not await can_view_score(db, current_user, user, project_id):
        raise HTTPException(403, "You don't have permission to view this score")

    score = await contribution.get_score_by_user_and_project(db, user, project)
    return ContributionScoreResponse.from_score(score)

@router.get("/groups/{group_id}", response_model=ContributionScoreListResponse)
async def get_scores_by_group(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    group = await get_group(db, group_id)
    if not current_user.has_role(ROLE_INSTRUCTOR, ROLE_ADMIN):
        # students only see their own group
        if not current_user.has_role(ROLE_STUDENT) or current_user.id not in {u.id for u in group.participants()}:
            raise HTTPException(403, "You don't have permission to view this group's scores")

    return _to_list(await contribution.get_scores_by_group(db, group_id))

@router.put("/{score_id}/adjust", response_model=ContributionScoreResponse)
async def adjust_score(
    score_id: int,
    request: ScoreAdjustmentRequest,
    db: AsyncSession = Depends(get_db),
    instructor = Depends(get_current_instructor)
):
    score = await contribution.adjust_score(db, score_id, request.adjusted_score, request.adjustment_reason)
    return ContributionScoreResponse.from_score(score)

@router.put("/projects/{project_id}/finalize", response_model=ContributionScoreListResponse)
async def finalize_scores(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    instructor = Depends(get_current_instructor)
):
    return _to_list(await contribution.finalize_scores(db, project_id))

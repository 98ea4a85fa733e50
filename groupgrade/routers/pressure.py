from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from groupgrade.database import get_db
from groupgrade.core.auth import get_current_user, get_current_admin
from groupgrade.models.user import ROLE_ADMIN, ROLE_INSTRUCTOR
from groupgrade.schemas.pressure import (
    GroupPressureResponse, PressureHistoryResponse, PressureScoreListResponse,
    PressureScoreResponse, SweepResponse
)
from groupgrade.services import pressure
from groupgrade.services.lookups import get_group

router = APIRouter(prefix="/pressure-scores", tags=["pressure-scores"])

def _is_staff(user) -> bool:
    return user.has_role(ROLE_INSTRUCTOR, ROLE_ADMIN)

@router.get("/me", response_model=PressureScoreResponse)
async def get_my_pressure_score(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return await pressure.evaluate_pressure_status(db, current_user.id)

@router.get("/users/{user_id}", response_model=PressureScoreResponse)
async def get_user_pressure_score(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    if current_user.id != user_id and not _is_staff(current_user):
        raise HTTPException(403, "You can only view your own pressure score")
    return await pressure.evaluate_pressure_status(db, user_id)

@router.get("/projects/{project_id}", response_model=PressureScoreListResponse)
async def get_project_pressure_scores(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    scores = await pressure.get_project_pressure_scores(db, project_id)
    return PressureScoreListResponse(count=len(scores), scores=scores)

@router.get("/groups/{group_id}", response_model=GroupPressureResponse)
async def get_group_pressure_scores(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    group = await get_group(db, group_id)
    group_name = group.name
    if not _is_staff(current_user) and current_user.id not in {u.id for u in group.participants()}:
        raise HTTPException(403, "You don't have permission to view this group's pressure scores")

    scores = await pressure.get_group_pressure_scores(db, group_id)
    return GroupPressureResponse(group_id=group_id, group_name=group_name, count=len(scores), scores=scores)

@router.get("/users/{user_id}/projects/{project_id}/history", response_model=PressureHistoryResponse)
async def get_pressure_history(
    user_id: int,
    project_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    if current_user.id != user_id and not _is_staff(current_user):
        raise HTTPException(403, "You can only view your own pressure history")
    return await pressure.get_pressure_score_history(db, user_id, project_id)

@router.post("/update", response_model=SweepResponse)
async def run_pressure_update(
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    summary = await pressure.update_all_pressure_scores(db)
    return SweepResponse(projects=summary.projects, users=summary.users, overloaded=summary.overloaded)

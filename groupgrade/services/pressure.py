"""Workload pressure: how close a user's open tasks bring them to the project threshold.

pressure = sum(difficulty * urgency(days until deadline)) over open tasks

This is an advisory signal for alerting. Evaluation problems degrade to SAFE
or skip the user instead of failing the request or the sweep.
"""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from groupgrade.config import settings
from groupgrade.models.pressure import PressureScoreHistory
from groupgrade.models.project import Project
from groupgrade.models.task import Task
from groupgrade.models.user import User
from groupgrade.schemas.pressure import (
    PressureHistoryPoint,
    PressureHistoryResponse,
    PressureScoreResponse,
    PressureStatus,
)
from groupgrade.services import cohort, tasks as task_queries
from groupgrade.services.lookups import get_group, get_project, get_user
from groupgrade.services.notifications import notify_user
from groupgrade.services.urgency import days_until, task_pressure_score, urgency_factor
from groupgrade.time_utils import utcnow

logger = logging.getLogger(__name__)

SYNTHETIC_WEEKLY_STEP = 5
SYNTHETIC_WEEKS = 3


@dataclass(frozen=True)
class PressureLimits:
    risk_fraction: float
    overload_fraction: float
    default_threshold: int
    history_limit: int

    @classmethod
    def from_settings(cls) -> "PressureLimits":
        return cls(
            risk_fraction=settings.PRESSURE_RISK_FRACTION,
            overload_fraction=settings.PRESSURE_OVERLOAD_FRACTION,
            default_threshold=settings.DEFAULT_PRESSURE_THRESHOLD,
            history_limit=settings.PRESSURE_HISTORY_LIMIT,
        )


@dataclass(frozen=True)
class SweepSummary:
    projects: int = 0
    users: int = 0
    overloaded: int = 0


def classify(fraction: float, limits: PressureLimits) -> PressureStatus:
    """`fraction` is pressure / threshold, not a percentage."""
    if fraction >= limits.overload_fraction:
        return PressureStatus.OVERLOADED
    elif fraction >= limits.risk_fraction:
        return PressureStatus.AT_RISK
    return PressureStatus.SAFE


def sum_task_pressure(open_tasks: Sequence[Task], today: date) -> Tuple[float, int]:
    """Total pressure and the number of tasks that contributed to it.

    Tasks without a difficulty or a deadline are skipped.
    """
    total = 0.0
    scored = 0
    for task in open_tasks:
        if task.difficulty is None or task.deadline is None:
            logger.warning("Task ID %s has no difficulty or deadline, skipping", task.id)
            continue
        days_remaining = days_until(task.deadline, today)
        urgency = urgency_factor(days_remaining)
        score = task_pressure_score(task.difficulty, urgency)
        logger.debug("Task ID %s: DW=%s, days=%s, TUF=%s, TPS=%s",
                     task.id, task.difficulty, days_remaining, urgency, score)
        total += score
        scored += 1
    return total, scored


def _threshold_for(project: Project, limits: PressureLimits) -> int:
    if project.pressure_threshold is None or project.pressure_threshold <= 0:
        logger.warning("Project %s has no usable pressure threshold, using %s",
                       project.id, limits.default_threshold)
        return limits.default_threshold
    return project.pressure_threshold


def _history_score(threshold_percentage: float) -> int:
    # halves round up: 12.5 -> 13
    return max(0, min(100, int(math.floor(threshold_percentage + 0.5))))


def _safe_default(user: User, description: str) -> PressureScoreResponse:
    return PressureScoreResponse(
        user_id=user.id,
        username=user.username,
        full_name=user.full_name,
        pressure_score=0.0,
        status=PressureStatus.SAFE,
        status_description=description,
        task_count=0,
        threshold=0,
        threshold_percentage=0.0,
    )


async def get_pressure_score_for_user(
    db: AsyncSession,
    user: User,
    project: Project,
    today: Optional[date] = None,
    limits: Optional[PressureLimits] = None,
) -> PressureScoreResponse:
    """Pressure of one user's open tasks within one project."""
    today = today or utcnow().date()
    limits = limits or PressureLimits.from_settings()

    open_tasks = await task_queries.open_tasks_for_user_in_project(db, user.id, project.id)
    pressure, task_count = sum_task_pressure(open_tasks, today)

    threshold = _threshold_for(project, limits)
    fraction = pressure / threshold
    status = classify(fraction, limits)

    return PressureScoreResponse(
        user_id=user.id,
        username=user.username,
        full_name=user.full_name,
        pressure_score=pressure,
        status=status,
        status_description=status.description,
        task_count=task_count,
        threshold=threshold,
        threshold_percentage=fraction * 100.0,
        project_id=project.id,
        project_name=project.name,
    )


async def evaluate_pressure_status(
    db: AsyncSession,
    user_id: int,
    today: Optional[date] = None,
    limits: Optional[PressureLimits] = None,
) -> PressureScoreResponse:
    """Pressure across all of a user's projects; the project nearest its threshold wins."""
    today = today or utcnow().date()
    limits = limits or PressureLimits.from_settings()
    user = await get_user(db, user_id)

    try:
        groups = await cohort.get_user_groups(db, user.id)
        if not groups:
            return _safe_default(user, PressureStatus.SAFE.description + " - No groups found for this user")

        projects: Dict[int, Project] = {
            g.project_id: g.project for g in groups if g.project is not None
        }
        if not projects:
            logger.warning("User %s is in groups but no valid projects found", user.username)
            return _safe_default(user, PressureStatus.SAFE.description + " - No valid projects found")

        tasks_by_project: Dict[int, List[Task]] = defaultdict(list)
        for task in await task_queries.incomplete_tasks_for_user(db, user.id):
            if task.group is None:
                logger.warning("Task ID %s has no group, skipping", task.id)
                continue
            tasks_by_project[task.group.project_id].append(task)

        best_fraction = 0.0
        best_pressure = 0.0
        best_project: Optional[Project] = None
        total_task_count = 0

        for project_id, project_tasks in tasks_by_project.items():
            project = projects.get(project_id)
            if project is None:
                logger.warning("Project %s not among the groups of user %s", project_id, user.username)
                continue

            pressure, _ = sum_task_pressure(project_tasks, today)
            total_task_count += len(project_tasks)

            if project.pressure_threshold is None or project.pressure_threshold <= 0:
                logger.warning("Project %s has no usable pressure threshold", project.id)
                continue
            fraction = pressure / project.pressure_threshold
            if fraction > best_fraction:
                best_fraction = fraction
                best_pressure = pressure
                best_project = project

        status = classify(best_fraction, limits)
        return PressureScoreResponse(
            user_id=user.id,
            username=user.username,
            full_name=user.full_name,
            pressure_score=best_pressure,
            status=status,
            status_description=status.description,
            task_count=total_task_count,
            threshold=best_project.pressure_threshold if best_project else 0,
            threshold_percentage=best_fraction * 100.0,
            project_id=best_project.id if best_project else None,
            project_name=best_project.name if best_project else None,
        )
    except Exception:
        logger.exception("Error evaluating pressure status for user %s", user_id)
        return _safe_default(user, "Error calculating pressure status - defaulting to SAFE")


async def get_project_pressure_scores(
    db: AsyncSession,
    project_id: int,
    today: Optional[date] = None,
    limits: Optional[PressureLimits] = None,
) -> List[PressureScoreResponse]:
    project = await get_project(db, project_id)
    user_ids = [u.id for u in await cohort.get_project_users(db, project)]
    if not user_ids:
        logger.warning("No users found in project %s", project.name)
        return []

    responses = []
    for user_id in user_ids:
        try:
            # re-read by id: a rollback after a failed user expires loaded objects
            project = await get_project(db, project_id)
            user = await get_user(db, user_id)
            responses.append(await get_pressure_score_for_user(db, user, project, today, limits))
        except Exception:
            logger.exception("Error getting pressure score for user %s in project %s",
                             user_id, project_id)
            await db.rollback()
    return responses


async def get_group_pressure_scores(
    db: AsyncSession,
    group_id: int,
    today: Optional[date] = None,
    limits: Optional[PressureLimits] = None,
) -> List[PressureScoreResponse]:
    group = await get_group(db, group_id)
    user_ids = [u.id for u in group.participants()]
    return [await evaluate_pressure_status(db, uid, today, limits) for uid in user_ids]


async def _calculate_and_record(
    db: AsyncSession,
    user: User,
    project: Project,
    today: Optional[date],
    limits: Optional[PressureLimits],
) -> Tuple[PressureScoreResponse, PressureScoreHistory]:
    pressure = await get_pressure_score_for_user(db, user, project, today, limits)
    history = PressureScoreHistory(
        user_id=user.id,
        project_id=project.id,
        score=_history_score(pressure.threshold_percentage),
        recorded_at=utcnow(),
    )
    db.add(history)
    await db.commit()
    logger.debug("Saved pressure history: user=%s, project=%s, score=%s",
                 user.username, project.name, history.score)
    return pressure, history


async def calculate_pressure_score(
    db: AsyncSession,
    user_id: int,
    project_id: int,
    today: Optional[date] = None,
    limits: Optional[PressureLimits] = None,
) -> int:
    """Current pressure as a 0-100 share of the project threshold; appended to history."""
    user = await get_user(db, user_id)
    project = await get_project(db, project_id)
    _, history = await _calculate_and_record(db, user, project, today, limits)
    return history.score


async def get_pressure_score_history(
    db: AsyncSession,
    user_id: int,
    project_id: int,
    today: Optional[date] = None,
    limits: Optional[PressureLimits] = None,
) -> PressureHistoryResponse:
    """Newest-first history. Without recorded rows, three earlier weekly points are
    backfilled below the current score and flagged as synthetic."""
    limits = limits or PressureLimits.from_settings()
    user = await get_user(db, user_id)
    project = await get_project(db, project_id)

    result = await db.execute(
        select(PressureScoreHistory)
        .where(PressureScoreHistory.user_id == user.id)
        .where(PressureScoreHistory.project_id == project.id)
        .order_by(PressureScoreHistory.recorded_at.desc(), PressureScoreHistory.id.desc())
        .limit(limits.history_limit)
    )
    rows = result.scalars().all()

    if rows:
        points = [PressureHistoryPoint(recorded_at=r.recorded_at, score=r.score) for r in rows]
        return PressureHistoryResponse(
            user_id=user_id, project_id=project_id, is_synthetic=False, points=points
        )

    _, current = await _calculate_and_record(db, user, project, today, limits)
    points = [PressureHistoryPoint(recorded_at=current.recorded_at, score=current.score)]
    for week in range(1, SYNTHETIC_WEEKS + 1):
        points.append(PressureHistoryPoint(
            recorded_at=current.recorded_at - timedelta(weeks=week),
            score=max(0, min(100, current.score - SYNTHETIC_WEEKLY_STEP * week)),
            is_synthetic=True,
        ))
    return PressureHistoryResponse(
        user_id=user_id, project_id=project_id, is_synthetic=True, points=points
    )


def _overload_alerts(
    user: User, project: Project, leaders: Sequence[Tuple[User, str]], pressure: PressureScoreResponse
) -> List[Tuple[int, str, str]]:
    """(recipient_id, title, message) for the user, their group leaders and the instructor."""
    name = user.full_name or user.username
    score = pressure.pressure_score
    threshold = float(pressure.threshold)

    alerts = [(
        user.id,
        "Warning: workload overloaded",
        "Your workload pressure score is %.2f, above the allowed threshold (%.2f) in project '%s'. "
        "You are currently overloaded with tasks; please contact your group leader for support."
        % (score, threshold, project.name),
    )]
    for leader, group_name in leaders:
        alerts.append((
            leader.id,
            "Warning: group member overloaded",
            "Member %s (%s) in group '%s' is overloaded. Pressure score is %.2f, above the allowed "
            "threshold (%.2f). Consider rebalancing this member's tasks."
            % (name, user.username, group_name, score, threshold),
        ))
    if project.instructor_id is not None:
        alerts.append((
            project.instructor_id,
            "Warning: overloaded member in project",
            "Member %s (%s) is overloaded in project '%s'. Pressure score is %.2f, above the allowed "
            "threshold (%.2f)."
            % (name, user.username, project.name, score, threshold),
        ))
    return alerts


async def _notify_overload(
    db: AsyncSession, user: User, project: Project, pressure: PressureScoreResponse
) -> None:
    groups = await cohort.get_member_groups(db, user.id, project.id)
    leaders = [
        (g.leader, g.name) for g in groups
        if g.leader is not None and g.leader.id != user.id
    ]
    # build every message up front; a failed notification rolls the session back
    for recipient_id, title, message in _overload_alerts(user, project, leaders, pressure):
        try:
            await notify_user(db, recipient_id, title, message)
        except Exception:
            logger.exception("Failed to send overload alert to user %s", recipient_id)
            await db.rollback()


async def update_project_pressure_scores(
    db: AsyncSession,
    project: Project,
    today: Optional[date] = None,
    limits: Optional[PressureLimits] = None,
) -> SweepSummary:
    logger.info("Updating pressure scores for project %s", project.name)
    project_id = project.id
    user_ids = [u.id for u in await cohort.get_project_users(db, project)]

    evaluated = 0
    overloaded = 0
    for user_id in user_ids:
        try:
            # re-read by id: a failed notification may have expired loaded objects
            project = await get_project(db, project_id)
            user = await get_user(db, user_id)
            pressure, _ = await _calculate_and_record(db, user, project, today, limits)
        except Exception:
            logger.exception("Skipping pressure update for user %s in project %s", user_id, project_id)
            await db.rollback()
            continue

        evaluated += 1
        logger.info("User %s: pressure score = %.2f, status = %s",
                    user.username, pressure.pressure_score, pressure.status.value)

        if pressure.status == PressureStatus.OVERLOADED:
            overloaded += 1
            logger.warning("User %s is OVERLOADED with pressure score %.2f in project %s",
                           user.username, pressure.pressure_score, project.name)
            try:
                await _notify_overload(db, user, project, pressure)
            except Exception:
                logger.exception("Failed to send overload alerts for user %s", user_id)
                await db.rollback()

    return SweepSummary(projects=1, users=evaluated, overloaded=overloaded)


async def update_all_pressure_scores(
    db: AsyncSession,
    today: Optional[date] = None,
    limits: Optional[PressureLimits] = None,
) -> SweepSummary:
    """Record pressure for every participant of every active project and alert on overload."""
    logger.info("Starting pressure score update for all active projects")
    result = await db.execute(
        select(Project.id).where(Project.is_finalized.is_(False)).order_by(Project.id)
    )
    project_ids = list(result.scalars().all())

    projects = users = overloaded = 0
    for project_id in project_ids:
        try:
            project = await get_project(db, project_id)
            summary = await update_project_pressure_scores(db, project, today, limits)
        except Exception:
            logger.exception("Skipping pressure update for project %s", project_id)
            await db.rollback()
            continue
        projects += 1
        users += summary.users
        overloaded += summary.overloaded

    logger.info("Completed pressure score update for %d active projects", projects)
    return SweepSummary(projects=projects, users=users, overloaded=overloaded)

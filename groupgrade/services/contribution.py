"""Contribution scores for every participant of a project.

final = clamp(W1 * task + W2 * peer + W3 * code - W4 * late_tasks, 0, 10)

task, peer and code are Min-Max normalized across the whole project cohort,
so even a single user's score needs every participant's raw metrics.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from groupgrade.config import settings
from groupgrade.core.exceptions import (
    InvalidAdjustmentError,
    NotFoundError,
    ScoreConfigurationError,
)
from groupgrade.models.contribution import ContributionScore
from groupgrade.models.project import Project
from groupgrade.models.task import Task, STATUS_COMPLETED
from groupgrade.models.user import User
from groupgrade.services import cohort, commits, peer_reviews, tasks as task_queries
from groupgrade.services.commits import CodeContributionStats
from groupgrade.services.locks import project_lock
from groupgrade.services.lookups import get_group, get_project
from groupgrade.services.normalizer import calculate_stats, normalize_scores
from groupgrade.time_utils import start_of_day, to_utc, utcnow

logger = logging.getLogger(__name__)

WEIGHT_SUM_TOLERANCE = 1e-3
MIN_SCORE = 0.0
MAX_SCORE = 10.0


@dataclass(frozen=True)
class ContributionConfig:
    commit_line_cap: int
    addition_weight: float
    deletion_weight: float

    @classmethod
    def from_settings(cls) -> "ContributionConfig":
        return cls(
            commit_line_cap=settings.MAX_COMMIT_LINES_CAP,
            addition_weight=settings.CODE_ADDITION_WEIGHT,
            deletion_weight=settings.CODE_DELETION_WEIGHT,
        )


@dataclass(frozen=True)
class ScoreWeights:
    task_completion: Optional[float]
    peer_review: Optional[float]
    code_contribution: Optional[float]
    late_penalty: Optional[float]

    @classmethod
    def from_project(cls, project: Project) -> "ScoreWeights":
        return cls(project.weight_w1, project.weight_w2, project.weight_w3, project.weight_w4)

    def validate(self) -> None:
        components = (self.task_completion, self.peer_review, self.code_contribution)
        if any(w is None for w in components):
            raise ScoreConfigurationError("Project weights W1, W2 and W3 must all be set")
        total = sum(components)
        if abs(total - 1.0) >= WEIGHT_SUM_TOLERANCE:
            raise ScoreConfigurationError(
                "Project weights invalid: W1(%.3f) + W2(%.3f) + W3(%.3f) = %.3f != 1.0"
                % (self.task_completion, self.peer_review, self.code_contribution, total)
            )
        if self.late_penalty is None or self.late_penalty < 0.0:
            raise ScoreConfigurationError(
                "Project penalty weight W4 must be non-negative: %s" % self.late_penalty
            )


@dataclass(frozen=True)
class RawContribution:
    user: User
    task_completion: float
    peer_review: float
    code_stats: CodeContributionStats
    code_contribution: float
    late_task_count: int


@dataclass(frozen=True)
class CohortScore:
    raw: RawContribution
    task_completion: float
    peer_review: float
    code_contribution: float
    final_score: float


def weighted_final_score(
    weights: ScoreWeights,
    task_completion: float,
    peer_review: float,
    code_contribution: float,
    late_task_count: int,
) -> float:
    weighted_sum = (
        weights.task_completion * task_completion
        + weights.peer_review * peer_review
        + weights.code_contribution * code_contribution
    )
    final_score = weighted_sum - weights.late_penalty * late_task_count
    return max(MIN_SCORE, min(MAX_SCORE, final_score))


def score_cohort(raw_scores: Sequence[RawContribution], weights: ScoreWeights) -> List[CohortScore]:
    """Normalize each metric across the cohort and combine them, position by position."""
    task_scores = [r.task_completion for r in raw_scores]
    peer_scores = [r.peer_review for r in raw_scores]
    code_scores = [r.code_contribution for r in raw_scores]

    normalized_task = normalize_scores(task_scores)
    normalized_peer = normalize_scores(peer_scores)
    normalized_code = normalize_scores(code_scores)

    logger.info("Task scores normalization: %s -> %s",
                calculate_stats(task_scores), calculate_stats(normalized_task))

    results = []
    for i, raw in enumerate(raw_scores):
        final_score = weighted_final_score(
            weights, normalized_task[i], normalized_peer[i], normalized_code[i], raw.late_task_count
        )
        results.append(CohortScore(
            raw=raw,
            task_completion=normalized_task[i],
            peer_review=normalized_peer[i],
            code_contribution=normalized_code[i],
            final_score=final_score,
        ))
    return results


def completed_difficulty(user_tasks: Sequence[Task]) -> float:
    """Sum of difficulty over completed tasks."""
    score = 0.0
    for task in user_tasks:
        if task.status != STATUS_COMPLETED:
            continue
        if task.difficulty is None:
            logger.warning("Task ID %s has no difficulty, skipping", task.id)
            continue
        score += task.difficulty
    return score


def is_late(task: Task, now: datetime) -> bool:
    """Completed after the deadline, or still open once the deadline has passed.

    The deadline is a date and counts from the start of that day.
    """
    due = start_of_day(task.deadline)
    if task.status == STATUS_COMPLETED:
        return task.completed_at is not None and to_utc(task.completed_at) > due
    return now > due


def count_late_tasks(user_tasks: Sequence[Task], now: datetime) -> int:
    late = 0
    for task in user_tasks:
        if task.deadline is None:
            logger.warning("Task ID %s has no deadline, skipping late check", task.id)
            continue
        if is_late(task, now):
            late += 1
    return late


async def extract_raw_contribution(
    db: AsyncSession,
    user: User,
    project: Project,
    config: ContributionConfig,
    now: datetime,
) -> RawContribution:
    user_tasks = await task_queries.tasks_for_user_in_project(db, user.id, project.id)

    task_completion = completed_difficulty(user_tasks)
    peer_review = await peer_reviews.average_review_score(db, user.id, project.id)
    code_stats = await commits.aggregate_code_contribution(
        db, [t.id for t in user_tasks], config.commit_line_cap
    )
    late_task_count = count_late_tasks(user_tasks, now)

    raw = RawContribution(
        user=user,
        task_completion=task_completion,
        peer_review=peer_review,
        code_stats=code_stats,
        code_contribution=code_stats.contribution_score(config.addition_weight, config.deletion_weight),
        late_task_count=late_task_count,
    )
    logger.debug("Raw scores for user %s: task=%s, peer=%s, code=%s, late=%s",
                 user.username, raw.task_completion, raw.peer_review,
                 raw.code_contribution, raw.late_task_count)
    return raw


async def compute_cohort(
    db: AsyncSession,
    project: Project,
    config: Optional[ContributionConfig] = None,
    now: Optional[datetime] = None,
) -> List[CohortScore]:
    """Raw and normalized scores for every participant, in cohort order."""
    config = config or ContributionConfig.from_settings()
    now = to_utc(now) if now else utcnow()
    weights = ScoreWeights.from_project(project)
    weights.validate()

    users = await cohort.get_project_users(db, project)
    raw_scores = []
    for user in users:
        raw_scores.append(await extract_raw_contribution(db, user, project, config, now))
    return score_cohort(raw_scores, weights)


async def _find_score(db: AsyncSession, user_id: int, project_id: int) -> Optional[ContributionScore]:
    result = await db.execute(
        select(ContributionScore)
        .where(ContributionScore.user_id == user_id)
        .where(ContributionScore.project_id == project_id)
    )
    return result.scalar_one_or_none()


async def _save_contribution_score(
    db: AsyncSession, project: Project, scored: CohortScore
) -> ContributionScore:
    """Find-or-create and overwrite computed fields. Adjustments are left untouched."""
    user = scored.raw.user
    score = await _find_score(db, user.id, project.id)
    if score is None:
        score = ContributionScore(user=user, project=project, created_at=utcnow())
        db.add(score)

    score.task_completion_score = scored.task_completion
    score.peer_review_score = scored.peer_review
    score.code_contribution_score = scored.code_contribution
    score.late_task_count = scored.raw.late_task_count
    score.total_additions = scored.raw.code_stats.total_additions
    score.total_deletions = scored.raw.code_stats.total_deletions
    score.calculated_score = scored.final_score
    score.is_final = False  # a recomputation always needs re-finalizing
    score.updated_at = utcnow()

    logger.info("User %s: normalized task=%.2f, peer=%.2f, code=%.2f, final=%.2f",
                user.username, scored.task_completion, scored.peer_review,
                scored.code_contribution, scored.final_score)
    return score


async def calculate_score(
    db: AsyncSession,
    user: User,
    project: Project,
    config: Optional[ContributionConfig] = None,
    now: Optional[datetime] = None,
) -> ContributionScore:
    """Recompute one user's score; the whole cohort is still read to normalize."""
    logger.info("Calculating contribution score for user %s in project %s",
                user.username, project.name)
    ScoreWeights.from_project(project).validate()

    user_id, project_id = user.id, project.id
    try:
        async with project_lock(db, project_id):
            cohort_scores = await compute_cohort(db, project, config, now)
            scored = next((s for s in cohort_scores if s.raw.user.id == user_id), None)
            if scored is None:
                raise NotFoundError(
                    f"User {user_id} is not a participant of project {project_id}"
                )
            score = await _save_contribution_score(db, project, scored)
            await db.commit()
    except Exception:
        await db.rollback()
        raise
    return score


async def calculate_scores_for_project(
    db: AsyncSession,
    project: Project,
    config: Optional[ContributionConfig] = None,
    now: Optional[datetime] = None,
) -> List[ContributionScore]:
    """Recompute and persist every participant's score in one commit."""
    logger.info("Calculating contribution scores for all users in project %s", project.name)
    ScoreWeights.from_project(project).validate()

    try:
        async with project_lock(db, project.id):
            cohort_scores = await compute_cohort(db, project, config, now)
            saved = []
            for scored in cohort_scores:
                saved.append(await _save_contribution_score(db, project, scored))
            await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Completed contribution score calculation for %d users in project %s",
                len(saved), project.name)
    return saved


async def get_score_by_user_and_project(
    db: AsyncSession, user: User, project: Project
) -> ContributionScore:
    """Stored score, calculated on first read when missing."""
    score = await _find_score(db, user.id, project.id)
    if score is not None:
        return score

    await calculate_score(db, user, project)
    score = await _find_score(db, user.id, project.id)
    if score is None:
        raise NotFoundError("Failed to calculate contribution score")
    return score


async def get_scores_by_project(db: AsyncSession, project: Project) -> List[ContributionScore]:
    result = await db.execute(
        select(ContributionScore)
        .where(ContributionScore.project_id == project.id)
        .order_by(ContributionScore.id)
    )
    return list(result.scalars().unique().all())


async def get_scores_by_group(db: AsyncSession, group_id: int) -> List[ContributionScore]:
    group = await get_group(db, group_id)
    project = group.project
    return [
        await get_score_by_user_and_project(db, user, project)
        for user in group.participants()
    ]


async def adjust_score(
    db: AsyncSession, score_id: int, adjusted_score: float, adjustment_reason: Optional[str]
) -> ContributionScore:
    score = await db.get(ContributionScore, score_id)
    if score is None:
        raise NotFoundError(f"Contribution score not found with id: {score_id}")

    if adjusted_score is None or not MIN_SCORE <= adjusted_score <= MAX_SCORE:
        raise InvalidAdjustmentError("Adjusted score must be between 0.0 and 10.0")

    logger.info("Score adjustment: user %s in project %s: %s -> %.2f (reason: %s)",
                score.user.username, score.project.name,
                score.adjusted_score, adjusted_score, adjustment_reason)

    score.adjusted_score = adjusted_score
    score.adjustment_reason = adjustment_reason
    score.updated_at = utcnow()
    score.is_final = False  # adjustments need re-finalizing
    await db.commit()
    return score


async def finalize_scores(db: AsyncSession, project_id: int) -> List[ContributionScore]:
    project = await get_project(db, project_id)
    scores = await get_scores_by_project(db, project)
    for score in scores:
        score.is_final = True
    await db.commit()

    logger.info("Finalized %d contribution scores in project %s", len(scores), project.name)
    return scores

"""Tests for cohort contribution scoring."""

from datetime import date, datetime, timezone

import pytest
from sqlalchemy import func, select

from groupgrade.core.exceptions import (
    InvalidAdjustmentError,
    NotFoundError,
    ScoreConfigurationError,
)
from groupgrade.models.contribution import ContributionScore
from groupgrade.models.task import Task, STATUS_COMPLETED, STATUS_IN_PROGRESS
from groupgrade.services import contribution
from groupgrade.services.contribution import (
    ContributionConfig,
    ScoreWeights,
    count_late_tasks,
    weighted_final_score,
)

from conftest import NOW

CONFIG = ContributionConfig(commit_line_cap=1000, addition_weight=1.0, deletion_weight=1.25)


async def _score_rows(db) -> int:
    result = await db.execute(select(func.count()).select_from(ContributionScore))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_project_scores_follow_task_completion(db, factory):
    instructor = await factory.instructor()
    project = await factory.project(instructor)
    a, b, c = await factory.user(), await factory.user(), await factory.user()
    group = await factory.group(project, members=[a, b, c])
    await factory.completed_task(group, a, difficulty=2)
    await factory.completed_task(group, b, difficulty=3)
    await factory.completed_task(group, b, difficulty=1)
    await factory.completed_task(group, c, difficulty=3)
    await factory.completed_task(group, c, difficulty=3)

    scores = await contribution.calculate_scores_for_project(db, project, CONFIG, NOW)

    assert [s.user_id for s in scores] == [a.id, b.id, c.id]
    assert [s.task_completion_score for s in scores] == pytest.approx([0.0, 5.0, 10.0])
    # identical peer and code metrics all normalize to the maximum
    assert [s.peer_review_score for s in scores] == [10.0, 10.0, 10.0]
    assert [s.code_contribution_score for s in scores] == [10.0, 10.0, 10.0]
    assert [s.calculated_score for s in scores] == pytest.approx([5.0, 7.5, 10.0])
    assert all(s.is_final is False for s in scores)
    assert await _score_rows(db) == 3


@pytest.mark.asyncio
async def test_invalid_weights_write_nothing(db, factory):
    instructor = await factory.instructor()
    project = await factory.project(instructor, weight_w3=0.15)  # sums to 0.95
    student = await factory.user()
    await factory.group(project, members=[student])

    with pytest.raises(ScoreConfigurationError):
        await contribution.calculate_scores_for_project(db, project, CONFIG, NOW)
    with pytest.raises(ScoreConfigurationError):
        await contribution.calculate_score(db, student, project, CONFIG, NOW)

    assert await _score_rows(db) == 0


def test_weights_reject_negative_penalty_and_missing_values():
    with pytest.raises(ScoreConfigurationError):
        ScoreWeights(0.5, 0.3, 0.2, -0.1).validate()
    with pytest.raises(ScoreConfigurationError):
        ScoreWeights(0.5, None, 0.5, 0.1).validate()
    ScoreWeights(0.5, 0.3, 0.2, 0.0).validate()
    ScoreWeights(0.3334, 0.3333, 0.3333, 0.1).validate()


def test_final_score_is_clamped():
    weights = ScoreWeights(0.5, 0.3, 0.2, 2.0)
    assert weighted_final_score(weights, 10.0, 10.0, 10.0, 0) == 10.0
    assert weighted_final_score(weights, 1.0, 1.0, 1.0, 3) == 0.0
    assert weighted_final_score(weights, 10.0, 10.0, 10.0, 1) == pytest.approx(8.0)


@pytest.mark.asyncio
async def test_lone_participant_gets_maximum_components(db, factory):
    instructor = await factory.instructor()
    project = await factory.project(instructor)
    student = await factory.user()
    await factory.group(project, members=[student])

    score = await contribution.calculate_score(db, student, project, CONFIG, NOW)

    assert score.task_completion_score == 10.0
    assert score.peer_review_score == 10.0
    assert score.code_contribution_score == 10.0
    assert score.calculated_score == 10.0


def _task(status, deadline, completed_at=None, task_id=1):
    return Task(id=task_id, title="t", group_id=1, difficulty=1,
                status=status, deadline=deadline, completed_at=completed_at)


def test_late_task_counting():
    tasks = [
        # completed after the deadline day started
        _task(STATUS_COMPLETED, date(2026, 3, 1), datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)),
        # completed before the deadline
        _task(STATUS_COMPLETED, date(2026, 3, 5), datetime(2026, 3, 4, 23, 0, tzinfo=timezone.utc)),
        # open and overdue
        _task(STATUS_IN_PROGRESS, date(2026, 3, 9)),
        # open, not yet due
        _task(STATUS_IN_PROGRESS, date(2026, 3, 20)),
        # no deadline
        _task(STATUS_IN_PROGRESS, None),
        # naive completion timestamps are read as UTC
        _task(STATUS_COMPLETED, date(2026, 3, 2), datetime(2026, 3, 2, 0, 0)),
    ]
    assert count_late_tasks(tasks, NOW) == 2


@pytest.mark.asyncio
async def test_late_tasks_reduce_final_score(db, factory):
    instructor = await factory.instructor()
    project = await factory.project(instructor, weight_w4=0.5)
    student = await factory.user()
    group = await factory.group(project, members=[student])
    await factory.task(group, student, deadline=date(2026, 3, 1))
    await factory.task(group, student, deadline=date(2026, 3, 2))

    score = await contribution.calculate_score(db, student, project, CONFIG, NOW)

    assert score.late_task_count == 2
    assert score.calculated_score == pytest.approx(9.0)


@pytest.mark.asyncio
async def test_code_contribution_caps_each_commit(db, factory):
    instructor = await factory.instructor()
    project = await factory.project(instructor)
    a, b = await factory.user(), await factory.user()
    group = await factory.group(project, members=[a, b])
    task_a = await factory.task(group, a)
    task_b = await factory.task(group, b)
    await factory.commit_record(group, task_a, a, additions=5000, deletions=10)
    await factory.commit_record(group, task_a, a, additions=20, deletions=0)
    await factory.commit_record(group, task_a, a, additions=900, deletions=900, valid=False)
    await factory.commit_record(group, None, a, additions=300, deletions=300)
    await factory.commit_record(group, task_b, b, additions=100, deletions=40)

    scores = await contribution.calculate_scores_for_project(db, project, CONFIG, NOW)
    by_user = {s.user_id: s for s in scores}

    assert (by_user[a.id].total_additions, by_user[a.id].total_deletions) == (1020, 10)
    assert (by_user[b.id].total_additions, by_user[b.id].total_deletions) == (100, 40)
    assert by_user[a.id].code_contribution_score == 10.0
    assert by_user[b.id].code_contribution_score == 0.0


@pytest.mark.asyncio
async def test_peer_reviews_only_count_completed_valid(db, factory):
    instructor = await factory.instructor()
    project = await factory.project(instructor)
    a, b, c = await factory.user(), await factory.user(), await factory.user()
    await factory.group(project, members=[a, b, c])
    await factory.review(project, b, a, 8.0)
    await factory.review(project, c, a, 6.0)
    await factory.review(project, a, b, 9.0, completed=False)
    await factory.review(project, a, c, 10.0, valid=False)
    await factory.review(project, b, c, 4.0)

    scores = await contribution.calculate_scores_for_project(db, project, CONFIG, NOW)

    # raw averages: a=7.0, b=0.0, c=4.0
    assert [s.peer_review_score for s in scores] == pytest.approx([10.0, 0.0, 40.0 / 7.0])


@pytest.mark.asyncio
async def test_leader_is_part_of_cohort(db, factory):
    instructor = await factory.instructor()
    project = await factory.project(instructor)
    leader, member = await factory.user(), await factory.user()
    group = await factory.group(project, members=[member], leader=leader)
    await factory.completed_task(group, leader, difficulty=3)

    scores = await contribution.calculate_scores_for_project(db, project, CONFIG, NOW)

    assert [s.user_id for s in scores] == [member.id, leader.id]
    assert scores[1].task_completion_score == 10.0
    assert scores[0].task_completion_score == 0.0


@pytest.mark.asyncio
async def test_recalculation_resets_finalization_and_keeps_adjustment(db, factory):
    instructor = await factory.instructor()
    project = await factory.project(instructor)
    student = await factory.user()
    await factory.group(project, members=[student])

    score = await contribution.calculate_score(db, student, project, CONFIG, NOW)
    await contribution.adjust_score(db, score.id, 7.5, "Carried the final demo")
    finalized = await contribution.finalize_scores(db, project.id)
    assert [s.is_final for s in finalized] == [True]

    again = await contribution.calculate_score(db, student, project, CONFIG, NOW)

    assert again.id == score.id
    assert again.is_final is False
    assert again.adjusted_score == 7.5
    assert again.adjustment_reason == "Carried the final demo"
    assert again.calculated_score == 10.0
    assert await _score_rows(db) == 1


@pytest.mark.asyncio
async def test_adjustment_validation(db, factory):
    instructor = await factory.instructor()
    project = await factory.project(instructor)
    student = await factory.user()
    await factory.group(project, members=[student])
    score = await contribution.calculate_score(db, student, project, CONFIG, NOW)

    with pytest.raises(InvalidAdjustmentError):
        await contribution.adjust_score(db, score.id, 10.5, "too high")
    with pytest.raises(InvalidAdjustmentError):
        await contribution.adjust_score(db, score.id, -1.0, "too low")
    with pytest.raises(NotFoundError):
        await contribution.adjust_score(db, 999, 5.0, "missing")


@pytest.mark.asyncio
async def test_non_participant_cannot_be_scored(db, factory):
    instructor = await factory.instructor()
    project = await factory.project(instructor)
    student, outsider = await factory.user(), await factory.user()
    await factory.group(project, members=[student])

    with pytest.raises(NotFoundError):
        await contribution.calculate_score(db, outsider, project, CONFIG, NOW)
    assert await _score_rows(db) == 0


@pytest.mark.asyncio
async def test_missing_score_is_calculated_on_read(db, factory):
    instructor = await factory.instructor()
    project = await factory.project(instructor)
    a, b = await factory.user(), await factory.user()
    group = await factory.group(project, members=[a, b])
    await factory.completed_task(group, b, difficulty=2)

    score = await contribution.get_score_by_user_and_project(db, a, project)
    assert score.user_id == a.id
    assert score.task_completion_score == 0.0
    assert await _score_rows(db) == 1

    same = await contribution.get_score_by_user_and_project(db, a, project)
    assert same.id == score.id

    group_scores = await contribution.get_scores_by_group(db, group.id)
    assert [s.user_id for s in group_scores] == [a.id, b.id]
    assert await _score_rows(db) == 2

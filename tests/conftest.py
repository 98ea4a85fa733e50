"""Pytest configuration for the GroupGrade test suite."""

import os
from datetime import date, datetime, timezone


def _ensure_test_env() -> None:
    """Seed required environment variables before groupgrade.config is imported."""
    os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    os.environ.setdefault("SECRET_KEY", "test-secret")


_ensure_test_env()

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from groupgrade.database import Base
import groupgrade.models  # noqa: F401
from groupgrade.models.commit import CommitRecord
from groupgrade.models.group import Group
from groupgrade.models.peer_review import PeerReview
from groupgrade.models.project import Project
from groupgrade.models.task import Task, STATUS_COMPLETED, STATUS_NOT_STARTED
from groupgrade.models.user import User, ROLE_INSTRUCTOR


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


class Factory:
    """Small builders for the rows the scoring services read."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    async def user(self, username=None, roles="student", full_name=None) -> User:
        n = self._next()
        username = username or f"user{n}"
        user = User(
            username=username,
            full_name=full_name or username.title(),
            email=f"{username}@example.edu",
            roles=roles,
        )
        self.session.add(user)
        await self.session.commit()
        return user

    async def instructor(self, username=None) -> User:
        return await self.user(username or f"prof{self._next()}", roles=ROLE_INSTRUCTOR)

    async def project(self, instructor: User, **overrides) -> Project:
        values = dict(
            name=f"Project {self._next()}",
            instructor=instructor,
            weight_w1=0.5,
            weight_w2=0.3,
            weight_w3=0.2,
            weight_w4=0.1,
            pressure_threshold=15,
        )
        values.update(overrides)
        project = Project(**values)
        self.session.add(project)
        await self.session.commit()
        return project

    async def group(self, project: Project, members=(), leader=None, name=None) -> Group:
        group = Group(
            name=name or f"Group {self._next()}",
            project=project,
            leader=leader,
        )
        group.members = list(members)
        self.session.add(group)
        await self.session.commit()
        return group

    async def task(
        self,
        group: Group,
        assignee: User,
        difficulty=1,
        deadline=None,
        status=STATUS_NOT_STARTED,
        completed_at=None,
    ) -> Task:
        task = Task(
            title=f"Task {self._next()}",
            group=group,
            assignee_id=assignee.id if assignee else None,
            difficulty=difficulty,
            deadline=deadline,
            status=status,
            completed_at=completed_at,
        )
        self.session.add(task)
        await self.session.commit()
        return task

    async def completed_task(self, group: Group, assignee: User, difficulty=1, deadline=None, completed_at=None) -> Task:
        return await self.task(
            group, assignee, difficulty=difficulty, deadline=deadline,
            status=STATUS_COMPLETED, completed_at=completed_at,
        )

    async def commit_record(self, group: Group, task: Task, author: User, additions=0, deletions=0, valid=True):
        record = CommitRecord(
            commit_id=f"c{self._next():07x}",
            author_name=author.username,
            author_email=author.email,
            timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
            group_id=group.id,
            task_id=task.id if task else None,
            valid=valid,
            additions=additions,
            deletions=deletions,
        )
        self.session.add(record)
        await self.session.commit()
        return record

    async def review(self, project: Project, reviewer: User, reviewee: User, score, completed=True, valid=True):
        review = PeerReview(
            project_id=project.id,
            reviewer_id=reviewer.id,
            reviewee_id=reviewee.id,
            score=score,
            is_completed=completed,
            is_valid=valid,
        )
        self.session.add(review)
        await self.session.commit()
        return review


@pytest_asyncio.fixture
async def factory(db):
    return Factory(db)


TODAY = date(2026, 3, 10)
NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)

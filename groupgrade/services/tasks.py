from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from groupgrade.models.group import Group
from groupgrade.models.task import Task, STATUS_COMPLETED, INCOMPLETE_STATUSES

async def tasks_for_user_in_project(db: AsyncSession, user_id: int, project_id: int) -> List[Task]:
    result = await db.execute(
        select(Task)
        .join(Group, Group.id == Task.group_id)
        .where(Task.assignee_id == user_id)
        .where(Group.project_id == project_id)
        .order_by(Task.id)
    )
    return list(result.scalars().unique().all())

async def open_tasks_for_user_in_project(db: AsyncSession, user_id: int, project_id: int) -> List[Task]:
    result = await db.execute(
        select(Task)
        .join(Group, Group.id == Task.group_id)
        .where(Task.assignee_id == user_id)
        .where(Group.project_id == project_id)
        .where(Task.status != STATUS_COMPLETED)
        .order_by(Task.id)
    )
    return list(result.scalars().unique().all())

async def incomplete_tasks_for_user(db: AsyncSession, user_id: int) -> List[Task]:
    """Not-started and in-progress tasks across every project."""
    result = await db.execute(
        select(Task)
        .where(Task.assignee_id == user_id)
        .where(Task.status.in_(INCOMPLETE_STATUSES))
        .order_by(Task.id)
    )
    return list(result.scalars().unique().all())

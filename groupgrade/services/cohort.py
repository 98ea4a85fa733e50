import logging
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from groupgrade.models.group import Group, group_members
from groupgrade.models.project import Project
from groupgrade.models.user import User

logger = logging.getLogger(__name__)

async def get_project_groups(db: AsyncSession, project_id: int) -> List[Group]:
    result = await db.execute(
        select(Group)
        .where(Group.project_id == project_id)
        .order_by(Group.id)
    )
    return list(result.scalars().unique().all())

async def get_project_users(db: AsyncSession, project: Project) -> List[User]:
    """Members and leaders of every group in the project, de-duplicated, in a stable order."""
    groups = await get_project_groups(db, project.id)
    seen = set()
    users = []
    for group in groups:
        for user in group.participants():
            if user.id not in seen:
                seen.add(user.id)
                users.append(user)

    logger.debug("Found %d unique users across %d groups in project %s",
                 len(users), len(groups), project.name)
    return users

async def get_user_groups(db: AsyncSession, user_id: int, project_id: int = None) -> List[Group]:
    """Groups the user leads or belongs to, optionally within one project."""
    member_of = select(group_members.c.group_id).where(group_members.c.user_id == user_id)
    query = (
        select(Group)
        .where(or_(Group.leader_id == user_id, Group.id.in_(member_of)))
        .order_by(Group.id)
    )
    if project_id is not None:
        query = query.where(Group.project_id == project_id)
    result = await db.execute(query)
    return list(result.scalars().unique().all())

async def get_member_groups(db: AsyncSession, user_id: int, project_id: int) -> List[Group]:
    """Groups in the project that list the user as a member (leadership alone does not count)."""
    member_of = select(group_members.c.group_id).where(group_members.c.user_id == user_id)
    result = await db.execute(
        select(Group)
        .where(Group.project_id == project_id)
        .where(Group.id.in_(member_of))
        .order_by(Group.id)
    )
    return list(result.scalars().unique().all())

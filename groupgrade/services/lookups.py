from sqlalchemy.ext.asyncio import AsyncSession
from groupgrade.core.exceptions import NotFoundError
from groupgrade.models.group import Group
from groupgrade.models.project import Project
from groupgrade.models.user import User

async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User not found with id: {user_id}")
    return user

async def get_project(db: AsyncSession, project_id: int) -> Project:
    project = await db.get(Project, project_id)
    if project is None:
        raise NotFoundError(f"Project not found with id: {project_id}")
    return project

async def get_group(db: AsyncSession, group_id: int) -> Group:
    group = await db.get(Group, group_id)
    if group is None:
        raise NotFoundError(f"Group not found with id: {group_id}")
    return group

# groupgrade/core/auth.py
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from groupgrade.database import get_db
from groupgrade.models.user import User, ROLE_ADMIN, ROLE_INSTRUCTOR
from groupgrade.config import settings

reusable_oauth2 = HTTPBearer()

async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: HTTPAuthorizationCredentials = Depends(reusable_oauth2)
):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(
            token.credentials,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
        user_id: str = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == int(user_id)))
    user = result.scalar_one_or_none()
    if user is None:
        raise credentials_exception
    return user


async def get_current_instructor(
    current_user = Depends(get_current_user)
):
    if not current_user.has_role(ROLE_INSTRUCTOR, ROLE_ADMIN):
        raise HTTPException(403, "Instructor or admin access required")
    return current_user


async def get_current_admin(
    current_user = Depends(get_current_user)
):
    if not current_user.has_role(ROLE_ADMIN):
        raise HTTPException(403, "Admin access required")
    return current_user

# galaxion/state_manager.py
from sqlalchemy.future import select
from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.user import User
from galaxion.models.enums import UserRole
from galaxion.utils.config import settings
from galaxion.utils.db import get_db
from galaxion.utils.logger import logger


SESSION_USER_KEY = "user"


async def get_user_or_create(session: AsyncSession, username: str, display_name: str | None = None) -> User:
    """
    Fetches a user by username or creates a new one and adds it to the session.
    The calling function is responsible for committing the transaction.
    """
    result = await session.execute(select(User).filter_by(username=username))
    user = result.scalars().first()
    if not user:
        logger.info(f"Adding new user '{username}' to session.")
        role = UserRole.ADMIN.value if username in settings.admin_usernames else UserRole.STUDENT.value
        user = User(username=username, display_name=display_name, role=role)
        session.add(user)
    elif display_name and display_name != user.display_name:
        user.display_name = display_name
    return user


async def get_user_or_404(session: AsyncSession, user_id: int) -> User:
    result = await session.execute(select(User).filter_by(id=user_id))
    user = result.scalars().first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def session_payload(user: User) -> dict:
    """The user snapshot kept in the session cookie."""
    return {
        "id": user.id,
        "username": user.username,
        "display_name": user.display_name,
        "role": user.role,
    }


def get_session_user(request: Request) -> dict | None:
    return request.session.get(SESSION_USER_KEY)


async def get_optional_user(request: Request, db: AsyncSession = Depends(get_db)) -> User | None:
    """Resolves the logged-in user, or None for anonymous requests."""
    payload = get_session_user(request)
    if not payload:
        return None
    result = await db.execute(select(User).filter_by(id=payload["id"]))
    user = result.scalars().first()
    if not user:
        # Session refers to a user that no longer exists
        logger.warning(f"Dropping stale session for user id {payload['id']}")
        request.session.pop(SESSION_USER_KEY, None)
    return user


async def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.ADMIN.value:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def ensure_self_or_admin(user: User, user_id: int) -> None:
    """Users may only read or change their own private data; admins may access anyone's."""
    if user.id != user_id and user.role != UserRole.ADMIN.value:
        logger.warning(f"User {user.id} denied access to data of user {user_id}")
        raise HTTPException(status_code=403, detail="Access to another user's data is forbidden")

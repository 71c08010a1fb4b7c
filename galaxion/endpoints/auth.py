# galaxion/endpoints/auth.py
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.user import User
from galaxion.state_manager import (
    SESSION_USER_KEY,
    get_current_user,
    get_user_or_create,
    session_payload,
)
from galaxion.utils.db import get_db
from galaxion.utils.logger import logger

router = APIRouter()

class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    display_name: str | None = None

@router.post("/login", response_model=dict)
async def login(body: LoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    """
    Demo login without a password: finds or creates the user and stores it in the session.
    """
    username = body.username.strip()
    if not username:
        raise HTTPException(status_code=400, detail="Username must not be blank")
    user = await get_user_or_create(db, username, body.display_name)
    await db.flush()
    await db.refresh(user)
    await db.commit()

    request.session[SESSION_USER_KEY] = session_payload(user)
    logger.info(f"User '{username}' logged in (id={user.id}, role={user.role})")
    return {"user": session_payload(user)}

@router.post("/logout", response_model=dict)
async def logout(request: Request):
    request.session.clear()
    return {"message": "Logged out"}

@router.get("/me", response_model=dict)
async def me(user: User = Depends(get_current_user)):
    return {"user": session_payload(user)}

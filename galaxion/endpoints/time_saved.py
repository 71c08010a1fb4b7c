# galaxion/endpoints/time_saved.py
from datetime import date
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.user import User
from galaxion.services.time_saved_service import time_saved_service
from galaxion.state_manager import get_current_user, get_user_or_404, ensure_self_or_admin
from galaxion.utils.db import get_db
from galaxion.utils.logger import logger

router = APIRouter()

class GoalCreate(BaseModel):
    target_minutes_monthly: int
    target_date: date

async def _authorized_target(db: AsyncSession, user: User, user_id: int) -> User:
    ensure_self_or_admin(user, user_id)
    return await get_user_or_404(db, user_id)

@router.get("/summary/{user_id}", response_model=dict)
async def get_summary(user_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    await _authorized_target(db, user, user_id)
    summary = await time_saved_service.get_summary(db, user_id)
    await db.commit()
    return summary

@router.post("/recalculate/{user_id}", response_model=dict)
async def recalculate(user_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    await _authorized_target(db, user, user_id)
    logger.debug(f"Forced time saved recalculation for user {user_id}")
    summary = await time_saved_service.calculate(db, user_id)
    await db.commit()
    return summary

@router.get("/history/{user_id}", response_model=List[dict])
async def get_history(
    user_id: int,
    limit: int | None = Query(None, ge=1, le=365),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await _authorized_target(db, user, user_id)
    return await time_saved_service.get_history(db, user_id, limit)

@router.post("/goals", response_model=dict, status_code=201)
async def create_goal(body: GoalCreate, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    try:
        goal = await time_saved_service.create_goal(db, user.id, body.target_minutes_monthly, body.target_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await db.commit()
    return goal

@router.get("/goals/{user_id}", response_model=List[dict])
async def list_goals(user_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    await _authorized_target(db, user, user_id)
    goals = await time_saved_service.list_goals(db, user_id)
    await db.commit()
    return goals

# galaxion/endpoints/gap_analysis.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.user import User
from galaxion.services.gap_analysis_service import gap_analysis_service
from galaxion.state_manager import get_current_user, get_user_or_404, ensure_self_or_admin
from galaxion.utils.db import get_db

router = APIRouter()

@router.get("/gaps/{user_id}", response_model=List[dict])
async def get_gaps(user_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    ensure_self_or_admin(user, user_id)
    await get_user_or_404(db, user_id)
    return await gap_analysis_service.get_gaps(db, user_id)

@router.post("/analyze/{user_id}", response_model=List[dict])
async def analyze(user_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    ensure_self_or_admin(user, user_id)
    await get_user_or_404(db, user_id)
    gaps = await gap_analysis_service.perform_analysis(db, user_id)
    await db.commit()
    return gaps

@router.get("/recommendations/{user_id}", response_model=List[dict])
async def recommendations(user_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    ensure_self_or_admin(user, user_id)
    await get_user_or_404(db, user_id)
    ranked = await gap_analysis_service.recommend_courses(db, user_id)
    await db.commit()
    return ranked

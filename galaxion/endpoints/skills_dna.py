# galaxion/endpoints/skills_dna.py
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.user import User
from galaxion.services.skills_dna_service import skills_dna_service, history_to_dict
from galaxion.state_manager import get_current_user, get_user_or_404, ensure_self_or_admin
from galaxion.utils.db import get_db

router = APIRouter()

@router.get("/", response_model=List[dict])
async def list_competencies(db: AsyncSession = Depends(get_db)):
    """The Skills DNA competency catalog."""
    competencies = await skills_dna_service.list_competencies(db)
    return [
        {"id": dna.id, "name": dna.name, "category": dna.category, "description": dna.description}
        for dna in competencies
    ]

@router.get("/history/{user_id}", response_model=List[dict])
async def progress_history(
    user_id: int,
    dna_id: int | None = None,
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Skills DNA progress changes of a user, newest first."""
    ensure_self_or_admin(user, user_id)
    await get_user_or_404(db, user_id)
    entries = await skills_dna_service.list_history(db, user_id, dna_id, limit)
    return [history_to_dict(entry) for entry in entries]

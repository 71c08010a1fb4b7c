# galaxion/endpoints/diagnosis.py
from typing import Annotated, Dict, List
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.enums import DiagnosticType
from galaxion.models.user import User
from galaxion.services.diagnosis_service import diagnosis_service
from galaxion.services.event_service import event_service
from galaxion.state_manager import get_current_user, get_user_or_404, ensure_self_or_admin
from galaxion.utils.db import get_db
from galaxion.utils.logger import logger

router = APIRouter()

SkillValue = Annotated[float, Field(ge=0, le=100)]

class DiagnosisResults(BaseModel):
    user_id: int | None = None  # defaults to the caller
    skills: Dict[str, SkillValue] = Field(..., min_length=1)
    diagnostic_type: DiagnosticType = DiagnosticType.QUICK

@router.post("/results", response_model=dict)
async def save_results(body: DiagnosisResults, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    target_id = body.user_id if body.user_id is not None else user.id
    ensure_self_or_admin(user, target_id)
    target = await get_user_or_404(db, target_id)

    logger.debug(f"Saving {body.diagnostic_type.value} diagnosis for user {target_id}: {body.skills}")
    try:
        result = await diagnosis_service.save_results(db, target, body.skills, body.diagnostic_type.value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    await event_service.record_event(
        db, event_type="diagnosis.complete", user_id=target_id, entity_type="diagnosis",
        data={"type": body.diagnostic_type.value, "matched": result["matched"]},
    )
    await db.commit()
    return result

@router.get("/progress/{user_id}", response_model=List[dict])
async def get_progress(user_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    ensure_self_or_admin(user, user_id)
    await get_user_or_404(db, user_id)
    return await diagnosis_service.get_progress(db, user_id)

@router.get("/summary/{user_id}", response_model=dict)
async def get_summary(user_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    ensure_self_or_admin(user, user_id)
    target = await get_user_or_404(db, user_id)
    return await diagnosis_service.get_summary(db, target)

# galaxion/endpoints/events.py
from typing import Any, Dict, List
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.enums import UserRole
from galaxion.models.user import User
from galaxion.services.event_service import event_service, event_to_dict
from galaxion.state_manager import get_current_user, get_optional_user, ensure_self_or_admin
from galaxion.utils.db import get_db

router = APIRouter()

class EventCreate(BaseModel):
    event_type: str = Field(..., min_length=1, max_length=64)
    entity_type: str | None = None
    entity_id: int | None = None
    data: Dict[str, Any] | None = None
    duration: float | None = Field(None, ge=0)
    session_id: str | None = None

@router.post("/", response_model=dict, status_code=201)
async def create_event(body: EventCreate, db: AsyncSession = Depends(get_db), user: User | None = Depends(get_optional_user)):
    event = await event_service.record_event(
        db,
        event_type=body.event_type,
        user_id=user.id if user else None,
        entity_type=body.entity_type,
        entity_id=body.entity_id,
        data=body.data,
        duration=body.duration,
        session_id=body.session_id,
    )
    await db.commit()
    return {"message": "Event recorded", "id": event.id, "timestamp": event.created_at.isoformat()}

@router.get("/stats", response_model=dict)
async def get_stats(db: AsyncSession = Depends(get_db)):
    return await event_service.get_stats(db)

@router.get("/", response_model=List[dict])
async def list_events(
    user_id: int | None = None,
    event_type: str | None = None,
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    # Students only ever see their own events
    if user.role != UserRole.ADMIN.value:
        if user_id is not None:
            ensure_self_or_admin(user, user_id)
        user_id = user.id
    events = await event_service.list_events(db, user_id, event_type, limit)
    return [event_to_dict(event) for event in events]

# galaxion/services/event_service.py
from datetime import timedelta
from typing import Any
from sqlalchemy import func
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.user import LearningEvent
from galaxion.utils.db import utcnow
from galaxion.utils.logger import logger

TOP_EVENT_TYPES = 5
RECENT_WINDOW = timedelta(hours=24)


def event_to_dict(event: LearningEvent) -> dict:
    return {
        "id": event.id,
        "user_id": event.user_id,
        "event_type": event.event_type,
        "entity_type": event.entity_type,
        "entity_id": event.entity_id,
        "data": event.data,
        "duration": event.duration,
        "session_id": event.session_id,
        "created_at": event.created_at.isoformat() if event.created_at else None,
    }


class EventService:
    """Append-only store of learning telemetry."""

    async def record_event(
        self,
        session: AsyncSession,
        event_type: str,
        user_id: int | None = None,
        entity_type: str | None = None,
        entity_id: int | None = None,
        data: dict[str, Any] | None = None,
        duration: float | None = None,
        session_id: str | None = None,
    ) -> LearningEvent:
        event = LearningEvent(
            user_id=user_id,
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            data=data,
            duration=duration,
            session_id=session_id,
            created_at=utcnow(),
        )
        session.add(event)
        await session.flush()
        logger.debug(f"Recorded event '{event_type}' (id={event.id}) for user {user_id}")
        return event

    async def list_events(
        self,
        session: AsyncSession,
        user_id: int | None = None,
        event_type: str | None = None,
        limit: int = 100,
    ) -> list[LearningEvent]:
        query = select(LearningEvent)
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
        if event_type:
            query = query.filter_by(event_type=event_type)
        query = query.order_by(LearningEvent.created_at.desc(), LearningEvent.id.desc()).limit(limit)
        result = await session.execute(query)
        return list(result.scalars().all())

    async def get_stats(self, session: AsyncSession) -> dict:
        total = (await session.execute(select(func.count(LearningEvent.id)))).scalar_one()
        since = utcnow() - RECENT_WINDOW
        recent = (await session.execute(
            select(func.count(LearningEvent.id)).where(LearningEvent.created_at >= since)
        )).scalar_one()

        count_col = func.count(LearningEvent.id).label("count")
        result = await session.execute(
            select(LearningEvent.event_type, count_col)
            .group_by(LearningEvent.event_type)
            .order_by(count_col.desc(), LearningEvent.event_type)
            .limit(TOP_EVENT_TYPES)
        )
        top_types = [{"event_type": row[0], "count": row[1]} for row in result.all()]

        return {
            "total_events": total,
            "recent_events": recent,
            "top_event_types": top_types,
        }

event_service = EventService()

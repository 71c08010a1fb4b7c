# galaxion/services/notes_service.py
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.course import Lesson
from galaxion.models.user import LessonNote
from galaxion.utils.db import utcnow
from galaxion.utils.logger import logger


def note_to_dict(note: LessonNote, lesson_title: str | None = None) -> dict:
    data = {
        "id": note.id,
        "lesson_id": note.lesson_id,
        "content": note.content,
        "created_at": note.created_at.isoformat() if note.created_at else None,
        "updated_at": note.updated_at.isoformat() if note.updated_at else None,
    }
    if lesson_title is not None:
        data["lesson_title"] = lesson_title
    return data


class NotesService:
    """Private per-lesson notes. One note per user and lesson."""

    async def get_note(self, session: AsyncSession, user_id: int, lesson_id: int) -> LessonNote | None:
        result = await session.execute(select(LessonNote).filter_by(user_id=user_id, lesson_id=lesson_id))
        return result.scalars().first()

    async def save_note(self, session: AsyncSession, user_id: int, lesson_id: int, content: str) -> LessonNote | None:
        """Creates or replaces the note. Blank content deletes it and returns None. Does not commit."""
        content = content.strip()
        if not content:
            await self.delete_note(session, user_id, lesson_id)
            return None

        note = await self.get_note(session, user_id, lesson_id)
        now = utcnow()
        if note is None:
            note = LessonNote(user_id=user_id, lesson_id=lesson_id, content=content, created_at=now, updated_at=now)
            session.add(note)
        else:
            note.content = content
            note.updated_at = now
        await session.flush()
        logger.debug(f"Saved note for user {user_id} on lesson {lesson_id} ({len(content)} chars)")
        return note

    async def delete_note(self, session: AsyncSession, user_id: int, lesson_id: int) -> bool:
        note = await self.get_note(session, user_id, lesson_id)
        if note is None:
            return False
        await session.delete(note)
        await session.flush()
        return True

    async def list_user_notes(self, session: AsyncSession, user_id: int) -> list[dict]:
        result = await session.execute(
            select(LessonNote, Lesson.title)
            .join(Lesson, LessonNote.lesson_id == Lesson.id)
            .where(LessonNote.user_id == user_id)
            .order_by(LessonNote.updated_at.desc(), LessonNote.id.desc())
        )
        return [note_to_dict(note, title) for note, title in result.all()]

notes_service = NotesService()

# galaxion/endpoints/notes.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.user import User
from galaxion.services.course_service import course_service
from galaxion.services.notes_service import notes_service, note_to_dict
from galaxion.state_manager import get_current_user
from galaxion.utils.config import settings
from galaxion.utils.db import get_db

router = APIRouter()

class NoteBody(BaseModel):
    content: str = Field(..., max_length=settings.note_max_length)

async def _lesson_or_404(db: AsyncSession, lesson_id: int):
    lesson = await course_service.get_lesson(db, lesson_id)
    if not lesson:
        raise HTTPException(status_code=404, detail="Lesson not found")
    return lesson

@router.get("/lessons/{lesson_id}/notes", response_model=dict)
async def get_note(lesson_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    await _lesson_or_404(db, lesson_id)
    note = await notes_service.get_note(db, user.id, lesson_id)
    return note_to_dict(note) if note else {"lesson_id": lesson_id, "content": ""}

@router.post("/lessons/{lesson_id}/notes", response_model=dict)
async def save_note(lesson_id: int, body: NoteBody, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Saves the note; an empty note deletes it."""
    await _lesson_or_404(db, lesson_id)
    note = await notes_service.save_note(db, user.id, lesson_id, body.content)
    await db.commit()
    if note is None:
        return {"message": "Note deleted"}
    return note_to_dict(note)

@router.delete("/lessons/{lesson_id}/notes", response_model=dict)
async def delete_note(lesson_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    deleted = await notes_service.delete_note(db, user.id, lesson_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Note not found")
    await db.commit()
    return {"message": "Note deleted successfully"}

@router.get("/user/notes", response_model=List[dict])
async def list_notes(db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    return await notes_service.list_user_notes(db, user.id)

# galaxion/endpoints/progress.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.enums import LessonStatus
from galaxion.models.user import User
from galaxion.services.course_service import course_service
from galaxion.services.event_service import event_service
from galaxion.services.progress_service import progress_service, course_progress_to_dict
from galaxion.state_manager import get_current_user
from galaxion.utils.db import get_db
from galaxion.utils.logger import logger

router = APIRouter()

class LessonProgressRequest(BaseModel):
    status: LessonStatus
    position: int = Field(0, ge=0)

@router.post("/lessons/{lesson_id}/progress", response_model=dict)
async def update_lesson_progress(
    lesson_id: int,
    body: LessonProgressRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    lesson = await course_service.get_lesson(db, lesson_id)
    if not lesson:
        raise HTTPException(status_code=404, detail="Lesson not found")

    logger.debug(f"User {user.id} posts status '{body.status.value}' for lesson {lesson_id} at {body.position}")
    result = await progress_service.mark_lesson_progress(db, user.id, lesson, body.status.value, body.position)
    if result["newly_completed"]:
        await event_service.record_event(
            db, event_type="lesson.complete", user_id=user.id, entity_type="lesson", entity_id=lesson_id,
            data={"earned_xp": result["earned_xp"]},
        )
    await db.commit()
    return result

@router.post("/user/courses/{course_id}/start", response_model=dict)
async def start_course(course_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    course = await course_service.get_course(db, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    row = await progress_service.start_course(db, user.id, course.id)
    await db.commit()
    return course_progress_to_dict(row)

@router.get("/user/courses", response_model=List[dict])
async def list_my_courses(db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    rows = await progress_service.list_course_progress(db, user.id)
    return [course_progress_to_dict(row) for row in rows]

@router.get("/user/courses/{course_id}/progress", response_model=dict)
async def get_my_course_progress(course_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    course = await course_service.get_course(db, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    row = await progress_service.get_course_progress(db, user.id, course.id)
    if row is None:
        raise HTTPException(status_code=404, detail="Course not started")
    return {
        **course_progress_to_dict(row),
        "lessons": await progress_service.lesson_statuses(db, user.id, course.id),
    }

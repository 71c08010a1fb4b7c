# galaxion/endpoints/quizzes.py
from typing import Dict
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.user import User
from galaxion.services.course_service import course_service
from galaxion.services.quiz_service import quiz_service
from galaxion.state_manager import get_current_user
from galaxion.utils.config import settings
from galaxion.utils.db import get_db

router = APIRouter()

class QuizSubmission(BaseModel):
    answers: Dict[int, int]  # question id -> selected option index

@router.get("/{lesson_id}/quiz", response_model=dict)
async def get_quiz(lesson_id: int, db: AsyncSession = Depends(get_db)):
    lesson = await course_service.get_lesson(db, lesson_id)
    if not lesson:
        raise HTTPException(status_code=404, detail="Lesson not found")
    questions = await quiz_service.get_questions(db, lesson_id)
    if not questions:
        raise HTTPException(status_code=404, detail="Lesson has no quiz")
    return {
        "lesson_id": lesson_id,
        "passing_score": settings.quiz_passing_score,
        "questions": [quiz_service.public_question(question) for question in questions],
    }

@router.post("/{lesson_id}/quiz/submit", response_model=dict)
async def submit_quiz(
    lesson_id: int,
    body: QuizSubmission,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    lesson = await course_service.get_lesson(db, lesson_id)
    if not lesson:
        raise HTTPException(status_code=404, detail="Lesson not found")
    try:
        result = await quiz_service.submit(db, user.id, lesson, body.answers)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    await db.commit()
    return result

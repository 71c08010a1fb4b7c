# galaxion/endpoints/tutor.py
from typing import List
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.user import User
from galaxion.services import tutor_agent
from galaxion.services.prompt_library import SUGGESTED_QUESTIONS
from galaxion.state_manager import get_current_user, get_optional_user
from galaxion.utils.db import get_db
from galaxion.utils.logger import logger

router = APIRouter()

SUGGESTION_COUNT = 4

class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)
    lesson_id: int | None = None

class ExplainRequest(BaseModel):
    concept: str = Field(..., min_length=1)
    lesson_id: int | None = None

class HelpRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    level: str = "beginner"

class TutorResponse(BaseModel):
    success: bool
    response: str

async def _answer_and_store(db: AsyncSession, user: User | None, mode: str, message: str, lesson_id: int | None = None, level: str = "beginner") -> dict:
    context = await tutor_agent.lesson_context(db, lesson_id)
    result = await tutor_agent.ask(mode, message, context=context, level=level)
    if user is not None and result["success"]:
        await tutor_agent.save_exchange(db, user.id, message, result["response"], lesson_id=lesson_id, assistant_type=mode)
        await db.commit()
    logger.info(f"Tutor {mode} request from {'user ' + str(user.id) if user else 'anonymous'}: success={result['success']}")
    return result

@router.post("/chat", response_model=TutorResponse)
async def chat(body: ChatRequest, db: AsyncSession = Depends(get_db), user: User | None = Depends(get_optional_user)):
    return await _answer_and_store(db, user, "chat", body.message, body.lesson_id)

@router.post("/explain", response_model=TutorResponse)
async def explain(body: ExplainRequest, db: AsyncSession = Depends(get_db), user: User | None = Depends(get_optional_user)):
    return await _answer_and_store(db, user, "explain", body.concept, body.lesson_id)

@router.post("/help", response_model=TutorResponse)
async def help_with_topic(body: HelpRequest, db: AsyncSession = Depends(get_db), user: User | None = Depends(get_optional_user)):
    return await _answer_and_store(db, user, "help", body.topic, level=body.level)

@router.get("/suggestions", response_model=dict)
async def suggestions():
    return {"success": True, "suggestions": SUGGESTED_QUESTIONS[:SUGGESTION_COUNT]}

@router.get("/history", response_model=List[dict])
async def history(db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    return await tutor_agent.get_history(db, user.id)

# galaxion/endpoints/courses.py
from typing import Dict, List
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.enums import MicroLessonSection
from galaxion.models.user import User
from galaxion.services.catalog_service import catalog_service
from galaxion.services.course_service import course_service, course_to_dict
from galaxion.services.skills_dna_service import skills_dna_service
from galaxion.state_manager import require_admin
from galaxion.utils.db import get_db
from galaxion.utils.logger import logger

router = APIRouter()
lesson_router = APIRouter()

class SkillLink(BaseModel):
    dna_id: int
    contribution: float = Field(1.0, gt=0)

class QuizQuestionCreate(BaseModel):
    prompt: str
    options: List[str] = Field(..., min_length=2)
    correct_option: int = Field(..., ge=0)
    points: int = Field(1, ge=1)
    explanation: str | None = None

class LessonCreate(BaseModel):
    title: str
    description: str | None = None
    type: str = "text"
    duration: int | None = Field(None, ge=0)
    difficulty: int = Field(1, ge=1, le=3)
    sections: Dict[MicroLessonSection, str] = {}
    skills: List[SkillLink] = []
    quiz: List[QuizQuestionCreate] = []

class ModuleCreate(BaseModel):
    title: str
    description: str | None = None
    lessons: List[LessonCreate] = []

class SkillRequirement(BaseModel):
    dna_id: int
    required_level: int = Field(..., ge=0, le=100)
    importance: int = Field(1, ge=1, le=5)

class SkillOutcome(BaseModel):
    dna_id: int
    level_gain: int = Field(..., gt=0)

class CourseCreate(BaseModel):
    # At least one letter, so a slug never reads as a numeric course id
    slug: str = Field(..., min_length=1, pattern=r"^[a-z0-9-]*[a-z][a-z0-9-]*$")
    title: str = Field(..., min_length=1)
    description: str = ""
    icon: str = "book"
    level: str = "basic"
    difficulty: int = Field(1, ge=1, le=5)
    access: str = "free"
    estimated_duration: int | None = None
    tags: List[str] = []
    modules: List[ModuleCreate] = []
    requirements: List[SkillRequirement] = []
    outcomes: List[SkillOutcome] = []

@router.get("/", response_model=List[dict])
async def list_courses(level: str | None = None, db: AsyncSession = Depends(get_db)):
    courses = await course_service.list_courses(db, level)
    logger.debug(f"Listing {len(courses)} courses (level={level})")
    return [course_to_dict(course) for course in courses]

@router.post("/", response_model=dict, status_code=201)
async def create_course(body: CourseCreate, db: AsyncSession = Depends(get_db), admin: User = Depends(require_admin)):
    """Creates a course with its modules and lessons. Admin only."""
    if await course_service.get_course_by_slug(db, body.slug):
        raise HTTPException(status_code=400, detail=f"Course with slug '{body.slug}' already exists")

    for lesson in (lesson for module in body.modules for lesson in module.lessons):
        for question in lesson.quiz:
            if question.correct_option >= len(question.options):
                raise HTTPException(status_code=400, detail=f"Question '{question.prompt}' has no option {question.correct_option}")

    known_dna = {dna.id for dna in await skills_dna_service.list_competencies(db)}
    referenced = {link.dna_id for link in body.requirements + body.outcomes}
    referenced |= {link.dna_id for module in body.modules for lesson in module.lessons for link in lesson.skills}
    unknown = sorted(referenced - known_dna)
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown Skills DNA ids: {unknown}")

    course = await catalog_service.add_course(db, body.model_dump(mode="json"))
    await db.commit()
    logger.info(f"Admin {admin.username} created course '{course.slug}' (id={course.id})")
    return course_to_dict(course)

@router.get("/{course_ref}", response_model=dict)
async def get_course(course_ref: str, db: AsyncSession = Depends(get_db)):
    course = await course_service.get_course(db, course_ref)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return course_to_dict(course)

@router.get("/{course_id}/outline", response_model=dict)
async def get_course_outline(course_id: int, db: AsyncSession = Depends(get_db)):
    course = await course_service.get_course(db, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return {**course_to_dict(course), "modules": await course_service.get_outline(db, course.id)}

@lesson_router.get("/{lesson_id}", response_model=dict)
async def get_lesson(lesson_id: int, db: AsyncSession = Depends(get_db)):
    lesson = await course_service.get_lesson(db, lesson_id)
    if not lesson:
        raise HTTPException(status_code=404, detail="Lesson not found")
    return await course_service.lesson_to_dict(db, lesson)

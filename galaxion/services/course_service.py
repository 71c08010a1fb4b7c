# galaxion/services/course_service.py
from sqlalchemy import func
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from galaxion.models.course import Course, Module, Lesson, QuizQuestion
from galaxion.models.enums import MicroLessonSection
from galaxion.utils.logger import logger


def course_to_dict(course: Course) -> dict:
    return {
        "id": course.id,
        "slug": course.slug,
        "title": course.title,
        "description": course.description,
        "icon": course.icon,
        "level": course.level,
        "difficulty": course.difficulty,
        "access": course.access,
        "estimated_duration": course.estimated_duration,
        "tags": course.tags or [],
    }


def lesson_summary(lesson: Lesson) -> dict:
    return {
        "id": lesson.id,
        "title": lesson.title,
        "type": lesson.type,
        "duration": lesson.duration,
        "order_index": lesson.order_index,
    }


def ordered_sections(sections: dict | None) -> list[dict]:
    """Micro-lesson sections in presentation order; sections missing from the lesson are skipped."""
    sections = sections or {}
    return [
        {"type": section.value, "content": sections[section.value]}
        for section in MicroLessonSection
        if sections.get(section.value)
    ]


class CourseService:

    async def list_courses(self, session: AsyncSession, level: str | None = None) -> list[Course]:
        query = select(Course).order_by(Course.id)
        if level:
            query = query.filter_by(level=level)
        result = await session.execute(query)
        return list(result.scalars().all())

    async def get_course(self, session: AsyncSession, course_ref: str | int) -> Course | None:
        """Looks a course up by numeric id or by slug."""
        ref = str(course_ref)
        if ref.isdigit():
            query = select(Course).filter_by(id=int(ref))
        else:
            query = select(Course).filter_by(slug=ref)
        result = await session.execute(query)
        return result.scalars().first()

    async def get_course_by_slug(self, session: AsyncSession, slug: str) -> Course | None:
        result = await session.execute(select(Course).filter_by(slug=slug))
        return result.scalars().first()

    async def get_outline(self, session: AsyncSession, course_id: int) -> list[dict]:
        result = await session.execute(
            select(Module)
            .filter_by(course_id=course_id)
            .options(selectinload(Module.lessons))
            .order_by(Module.order_index, Module.id)
        )
        modules = result.scalars().all()
        return [
            {
                "id": module.id,
                "title": module.title,
                "description": module.description,
                "order_index": module.order_index,
                "lessons": [lesson_summary(lesson) for lesson in module.lessons],
            }
            for module in modules
        ]

    async def get_lesson(self, session: AsyncSession, lesson_id: int) -> Lesson | None:
        result = await session.execute(
            select(Lesson).filter_by(id=lesson_id).options(selectinload(Lesson.module))
        )
        return result.scalars().first()

    async def get_course_lessons(self, session: AsyncSession, course_id: int) -> list[tuple[int, int]]:
        """(lesson_id, module_id) pairs of a course in learning order."""
        result = await session.execute(
            select(Lesson.id, Lesson.module_id)
            .join(Module, Lesson.module_id == Module.id)
            .where(Module.course_id == course_id)
            .order_by(Module.order_index, Module.id, Lesson.order_index, Lesson.id)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def count_quiz_questions(self, session: AsyncSession, lesson_id: int) -> int:
        result = await session.execute(
            select(func.count(QuizQuestion.id)).where(QuizQuestion.lesson_id == lesson_id)
        )
        return result.scalar_one()

    async def lesson_to_dict(self, session: AsyncSession, lesson: Lesson) -> dict:
        has_quiz = await self.count_quiz_questions(session, lesson.id) > 0
        logger.debug(f"Serializing lesson {lesson.id} (has_quiz={has_quiz})")
        return {
            "id": lesson.id,
            "module_id": lesson.module_id,
            "course_id": lesson.module.course_id if lesson.module else None,
            "title": lesson.title,
            "description": lesson.description,
            "type": lesson.type,
            "duration": lesson.duration,
            "difficulty": lesson.difficulty,
            "order_index": lesson.order_index,
            "sections": ordered_sections(lesson.sections),
            "has_quiz": has_quiz,
        }

course_service = CourseService()

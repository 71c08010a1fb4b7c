# galaxion/services/catalog_service.py
import json
from typing import Any, Dict, List, Optional
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.course import Course, Module, Lesson, QuizQuestion
from galaxion.models.skills import SkillsDna, LessonSkillDna, CourseSkillRequirement, CourseSkillOutcome
from galaxion.utils.logger import logger
from galaxion.utils.config import settings


class CatalogService:
    """
    Holds the seed catalog (competencies, courses, business cases) read from a JSON file
    and writes it into an empty database on startup.
    """
    def __init__(self):
        self.skills_dna: List[Dict[str, Any]] = []
        self.courses: List[Dict[str, Any]] = []
        self.cases: List[Dict[str, Any]] = []
        logger.info("CatalogService initialized (data loading deferred).")

    def load_catalog(self, catalog_path: Optional[str] = None):
        """Loads the catalog from the specified JSON path."""
        catalog_path = catalog_path if catalog_path is not None else settings.catalog_path
        self.skills_dna, self.courses, self.cases = [], [], []
        try:
            with open(catalog_path, mode="r", encoding="utf-8") as fh:
                raw = json.load(fh)
        except FileNotFoundError:
            logger.error(f"Catalog file not found at: {catalog_path}")
            return
        except json.JSONDecodeError as e:
            logger.error(f"Catalog file {catalog_path} is not valid JSON: {e}")
            return

        self.skills_dna = raw.get("skills_dna", [])
        self.cases = raw.get("cases", [])
        for course in raw.get("courses", []):
            if not course.get("slug") or not course.get("title"):
                logger.warning(f"Skipping catalog course without slug/title: {course}")
                continue
            self.courses.append(course)

        logger.info(
            f"Loaded catalog from {catalog_path}: {len(self.skills_dna)} competencies, "
            f"{len(self.courses)} courses, {len(self.cases)} cases."
        )

    def get_cases(self, industry: Optional[str] = None) -> List[Dict[str, Any]]:
        if not industry:
            return list(self.cases)
        return [case for case in self.cases if case.get("industry", "").lower() == industry.lower()]

    async def seed_database(self, session: AsyncSession) -> bool:
        """Inserts the loaded catalog when the database holds no courses yet. Returns True if seeding ran."""
        course_count = (await session.execute(select(func.count(Course.id)))).scalar_one()
        if course_count:
            logger.info(f"Database already holds {course_count} courses; skipping catalog seeding.")
            return False

        existing_dna = set((await session.execute(select(SkillsDna.id))).scalars().all())
        for dna in self.skills_dna:
            if dna["id"] in existing_dna:
                continue
            session.add(SkillsDna(
                id=dna["id"],
                name=dna["name"],
                category=dna.get("category", "other"),
                description=dna.get("description"),
            ))
        await session.flush()

        for course_data in self.courses:
            await self.add_course(session, course_data)

        await session.commit()
        logger.info(f"Seeded database with {len(self.courses)} courses.")
        return True

    async def add_course(self, session: AsyncSession, course_data: Dict[str, Any]) -> Course:
        """Adds a course with its modules, lessons, quizzes and skill links. Does not commit."""
        course = Course(
            slug=course_data["slug"],
            title=course_data["title"],
            description=course_data.get("description", ""),
            icon=course_data.get("icon", "book"),
            level=course_data.get("level", "basic"),
            difficulty=course_data.get("difficulty", 1),
            access=course_data.get("access", "free"),
            estimated_duration=course_data.get("estimated_duration"),
            tags=course_data.get("tags", []),
        )
        session.add(course)
        await session.flush()

        for requirement in course_data.get("requirements", []):
            session.add(CourseSkillRequirement(
                course_id=course.id,
                dna_id=requirement["dna_id"],
                required_level=requirement["required_level"],
                importance=requirement.get("importance", 1),
            ))
        for outcome in course_data.get("outcomes", []):
            session.add(CourseSkillOutcome(
                course_id=course.id,
                dna_id=outcome["dna_id"],
                level_gain=outcome["level_gain"],
            ))

        for module_index, module_data in enumerate(course_data.get("modules", [])):
            module = Module(
                course_id=course.id,
                title=module_data["title"],
                description=module_data.get("description"),
                order_index=module_data.get("order_index", module_index),
            )
            session.add(module)
            await session.flush()

            for lesson_index, lesson_data in enumerate(module_data.get("lessons", [])):
                lesson = Lesson(
                    module_id=module.id,
                    title=lesson_data["title"],
                    description=lesson_data.get("description"),
                    type=lesson_data.get("type", "text"),
                    duration=lesson_data.get("duration"),
                    difficulty=lesson_data.get("difficulty", 1),
                    order_index=lesson_data.get("order_index", lesson_index),
                    sections=lesson_data.get("sections", {}),
                )
                session.add(lesson)
                await session.flush()

                for link in lesson_data.get("skills", []):
                    session.add(LessonSkillDna(
                        lesson_id=lesson.id,
                        dna_id=link["dna_id"],
                        contribution=link.get("contribution", 1.0),
                    ))
                for question_index, question_data in enumerate(lesson_data.get("quiz", [])):
                    session.add(QuizQuestion(
                        lesson_id=lesson.id,
                        prompt=question_data["prompt"],
                        options=question_data.get("options", []),
                        correct_option=question_data["correct_option"],
                        points=question_data.get("points", 1),
                        explanation=question_data.get("explanation"),
                        order_index=question_index,
                    ))

        await session.flush()
        logger.debug(f"Added course '{course.slug}' (id={course.id}).")
        return course

# Instantiate the service globally
catalog_service = CatalogService()

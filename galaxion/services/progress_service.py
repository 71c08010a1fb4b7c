# galaxion/services/progress_service.py
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.course import Lesson
from galaxion.models.enums import LessonStatus
from galaxion.models.skills import LessonSkillDna, UserSkillsDnaProgress
from galaxion.models.user import UserLessonProgress, UserCourseProgress
from galaxion.services.course_service import course_service
from galaxion.services.skills_dna_service import skills_dna_service
from galaxion.utils.config import settings
from galaxion.utils.db import utcnow
from galaxion.utils.logger import logger
from galaxion.utils.numbers import round_half_up

STATUS_RANK = {
    LessonStatus.NOT_STARTED.value: 0,
    LessonStatus.IN_PROGRESS.value: 1,
    LessonStatus.COMPLETED.value: 2,
}


def earned_xp_for_lesson(duration: int | None) -> int:
    """XP for completing a lesson, scaled by its duration in ten-minute steps and capped."""
    if not duration:
        return settings.lesson_base_xp
    multiplier = min(settings.lesson_max_duration_multiplier, duration / 10)
    return round_half_up(settings.lesson_base_xp * multiplier)


def skill_update_to_dict(row: UserSkillsDnaProgress) -> dict:
    return {
        "dna_id": row.dna_id,
        "progress": row.progress,
        "current_level": row.current_level,
        "xp": row.xp,
    }


def lesson_progress_to_dict(row: UserLessonProgress) -> dict:
    return {
        "lesson_id": row.lesson_id,
        "status": row.status,
        "last_position": row.last_position,
        "completed_at": row.completed_at.isoformat() if row.completed_at else None,
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
    }


def course_progress_to_dict(row: UserCourseProgress) -> dict:
    return {
        "course_id": row.course_id,
        "progress": row.progress,
        "completed_modules": row.completed_modules,
        "current_lesson_id": row.current_lesson_id,
        "started_at": row.started_at.isoformat() if row.started_at else None,
        "last_accessed_at": row.last_accessed_at.isoformat() if row.last_accessed_at else None,
        "completed_at": row.completed_at.isoformat() if row.completed_at else None,
    }


class ProgressService:

    async def get_lesson_progress(self, session: AsyncSession, user_id: int, lesson_id: int) -> UserLessonProgress | None:
        result = await session.execute(
            select(UserLessonProgress).filter_by(user_id=user_id, lesson_id=lesson_id)
        )
        return result.scalars().first()

    async def get_course_progress(self, session: AsyncSession, user_id: int, course_id: int) -> UserCourseProgress | None:
        result = await session.execute(
            select(UserCourseProgress).filter_by(user_id=user_id, course_id=course_id)
        )
        return result.scalars().first()

    async def list_course_progress(self, session: AsyncSession, user_id: int) -> list[UserCourseProgress]:
        result = await session.execute(
            select(UserCourseProgress)
            .filter_by(user_id=user_id)
            .order_by(UserCourseProgress.last_accessed_at.desc(), UserCourseProgress.id.desc())
        )
        return list(result.scalars().all())

    async def start_course(self, session: AsyncSession, user_id: int, course_id: int) -> UserCourseProgress:
        """Enrolls the user in a course. Enrolling twice keeps the existing progress. Does not commit."""
        row = await self.get_course_progress(session, user_id, course_id)
        now = utcnow()
        if row is None:
            lessons = await course_service.get_course_lessons(session, course_id)
            row = UserCourseProgress(
                user_id=user_id,
                course_id=course_id,
                progress=0,
                completed_modules=0,
                current_lesson_id=lessons[0][0] if lessons else None,
                started_at=now,
                last_accessed_at=now,
            )
            logger.info(f"User {user_id} started course {course_id}")
        else:
            row.last_accessed_at = now
        session.add(row)
        await session.flush()
        return row

    async def mark_lesson_progress(
        self, session: AsyncSession, user_id: int, lesson: Lesson, status: str, position: int = 0
    ) -> dict:
        """
        Records a lesson status change for a user and rolls it up into Skills DNA and
        course progress. A completed lesson stays completed; a lower status only moves
        the position. Does not commit.
        """
        if status not in STATUS_RANK:
            raise ValueError(f"Unknown lesson status: {status}")

        row = await self.get_lesson_progress(session, user_id, lesson.id)
        now = utcnow()
        if row is None:
            row = UserLessonProgress(
                user_id=user_id,
                lesson_id=lesson.id,
                status=LessonStatus.NOT_STARTED.value,
                last_position=0,
            )
            session.add(row)

        newly_completed = False
        if row.status == LessonStatus.COMPLETED.value and status == LessonStatus.COMPLETED.value:
            logger.debug(f"Lesson {lesson.id} already completed by user {user_id}; nothing to do.")
        else:
            row.last_position = position
            if STATUS_RANK[status] > STATUS_RANK[row.status]:
                row.status = status
                if status == LessonStatus.COMPLETED.value:
                    row.completed_at = now
                    newly_completed = True
            row.updated_at = now
        await session.flush()

        earned_xp = 0
        skills_updated = []
        if newly_completed:
            earned_xp = earned_xp_for_lesson(lesson.duration)
            skills_updated = await self._award_lesson_skills(session, user_id, lesson.id, earned_xp)
            logger.info(f"User {user_id} completed lesson {lesson.id}, earned {earned_xp} XP")

        course_progress, completion_bonus = await self.update_course_progress(session, user_id, lesson)

        return {
            **lesson_progress_to_dict(row),
            "newly_completed": newly_completed,
            "earned_xp": earned_xp,
            "skills_updated": skills_updated,
            "completion_bonus": [skill_update_to_dict(skill) for skill in completion_bonus],
            "course_progress": course_progress_to_dict(course_progress) if course_progress else None,
        }

    async def _award_lesson_skills(self, session: AsyncSession, user_id: int, lesson_id: int, earned_xp: int) -> list[dict]:
        result = await session.execute(select(LessonSkillDna).filter_by(lesson_id=lesson_id))
        updated = []
        for link in result.scalars().all():
            delta = round_half_up(link.contribution * 2)
            xp = round_half_up(earned_xp * link.contribution)
            row = await skills_dna_service.apply_progress_delta(
                session, user_id, link.dna_id, delta, xp,
                source_id=lesson_id,
                description=f"Completed lesson {lesson_id}",
            )
            if row is not None:
                updated.append(skill_update_to_dict(row))
        return updated

    async def update_course_progress(
        self, session: AsyncSession, user_id: int, lesson: Lesson
    ) -> tuple[UserCourseProgress | None, list[UserSkillsDnaProgress]]:
        """
        Recomputes the course rollup for the course that owns `lesson`. The first time the
        course reaches 100% its completion bonus is granted; returns the rollup and the bonus rows.
        """
        if lesson.module is None:
            logger.warning(f"Lesson {lesson.id} has no module; skipping course progress")
            return None, []
        course_id = lesson.module.course_id
        lessons = await course_service.get_course_lessons(session, course_id)
        if not lessons:
            return None, []

        lesson_ids = [lesson_id for lesson_id, _ in lessons]
        result = await session.execute(
            select(UserLessonProgress.lesson_id)
            .where(UserLessonProgress.user_id == user_id)
            .where(UserLessonProgress.lesson_id.in_(lesson_ids))
            .where(UserLessonProgress.status == LessonStatus.COMPLETED.value)
        )
        completed = set(result.scalars().all())

        module_lessons: dict[int, list[int]] = {}
        for lesson_id, module_id in lessons:
            module_lessons.setdefault(module_id, []).append(lesson_id)
        completed_modules = sum(
            1 for ids in module_lessons.values() if all(lesson_id in completed for lesson_id in ids)
        )
        progress = round_half_up(100 * len(completed) / len(lesson_ids))

        row = await self.start_course(session, user_id, course_id)
        now = utcnow()
        row.progress = max(row.progress or 0, progress)
        row.completed_modules = completed_modules
        row.current_lesson_id = lesson.id
        row.last_accessed_at = now
        bonus = []
        if row.progress >= 100 and row.completed_at is None:
            row.completed_at = now
            logger.info(f"User {user_id} completed course {course_id}")
            course = await course_service.get_course(session, course_id)
            bonus = await skills_dna_service.award_course_completion(session, user_id, course)
        await session.flush()
        logger.debug(f"Course {course_id} progress for user {user_id}: {row.progress}% ({completed_modules} modules)")
        return row, bonus

    async def lesson_statuses(self, session: AsyncSession, user_id: int, course_id: int) -> list[dict]:
        """Per-lesson status for every lesson of a course, in learning order."""
        lessons = await course_service.get_course_lessons(session, course_id)
        lesson_ids = [lesson_id for lesson_id, _ in lessons]
        rows = {}
        if lesson_ids:
            result = await session.execute(
                select(UserLessonProgress)
                .where(UserLessonProgress.user_id == user_id)
                .where(UserLessonProgress.lesson_id.in_(lesson_ids))
            )
            rows = {row.lesson_id: row for row in result.scalars().all()}
        return [
            lesson_progress_to_dict(rows[lesson_id]) if lesson_id in rows
            else {"lesson_id": lesson_id, "status": LessonStatus.NOT_STARTED.value, "last_position": 0,
                  "completed_at": None, "updated_at": None}
            for lesson_id in lesson_ids
        ]

progress_service = ProgressService()

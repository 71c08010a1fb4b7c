# galaxion/services/skills_dna_service.py
import math
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from galaxion.models.course import Course
from galaxion.models.enums import SkillLevel
from galaxion.models.skills import CourseSkillOutcome, SkillsDna, SkillsDnaProgressHistory, UserSkillsDnaProgress
from galaxion.utils.config import settings
from galaxion.utils.db import utcnow
from galaxion.utils.logger import logger

# Upper progress bound (inclusive) for each level; anything above the last bound is expertise.
LEVEL_THRESHOLDS = [
    (20, SkillLevel.AWARENESS),
    (40, SkillLevel.KNOWLEDGE),
    (60, SkillLevel.APPLICATION),
    (80, SkillLevel.MASTERY),
]

# Bonus gains shrink as a competency matures
LEVEL_GAIN_MULTIPLIERS = {
    SkillLevel.AWARENESS.value: 1.0,
    SkillLevel.KNOWLEDGE.value: 0.8,
    SkillLevel.APPLICATION.value: 0.6,
    SkillLevel.MASTERY.value: 0.4,
    SkillLevel.EXPERTISE.value: 0.2,
}
HIGH_PROGRESS = 80
HIGH_PROGRESS_MULTIPLIER = 0.5

LESSON_COMPLETION = "lesson_completion"
COURSE_COMPLETION = "course_completion"


def level_for_progress(progress: float) -> str:
    """Maps 0-100 progress to a Skills DNA level label."""
    for upper, level in LEVEL_THRESHOLDS:
        if progress <= upper:
            return level.value
    return SkillLevel.EXPERTISE.value


def clamp_progress(value: float) -> float:
    return max(0.0, min(100.0, value))


def adjusted_gain(points: int, progress: float, level: str) -> int:
    """Scales a bonus by the current level, halved again above 80 progress, rounded up."""
    multiplier = LEVEL_GAIN_MULTIPLIERS.get(level, 1.0)
    if progress > HIGH_PROGRESS:
        multiplier *= HIGH_PROGRESS_MULTIPLIER
    return math.ceil(points * multiplier)


def history_to_dict(entry: SkillsDnaProgressHistory) -> dict:
    return {
        "id": entry.id,
        "dna_id": entry.dna_id,
        "progress_change": entry.progress_change,
        "previous_progress": entry.previous_progress,
        "new_progress": entry.new_progress,
        "source": entry.source,
        "source_id": entry.source_id,
        "description": entry.description,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }


class SkillsDnaService:

    async def list_competencies(self, session: AsyncSession) -> list[SkillsDna]:
        result = await session.execute(select(SkillsDna).order_by(SkillsDna.id))
        return list(result.scalars().all())

    async def get_user_progress_rows(self, session: AsyncSession, user_id: int) -> list[UserSkillsDnaProgress]:
        result = await session.execute(
            select(UserSkillsDnaProgress)
            .filter_by(user_id=user_id)
            .order_by(UserSkillsDnaProgress.dna_id)
        )
        return list(result.scalars().all())

    async def get_progress_row(self, session: AsyncSession, user_id: int, dna_id: int) -> UserSkillsDnaProgress | None:
        result = await session.execute(
            select(UserSkillsDnaProgress).filter_by(user_id=user_id, dna_id=dna_id)
        )
        return result.scalars().first()

    def _log_change(
        self, session: AsyncSession, user_id: int, dna_id: int, previous: float, new: float,
        source: str, source_id: int | None, description: str | None,
    ) -> None:
        if new == previous:
            return
        session.add(SkillsDnaProgressHistory(
            user_id=user_id,
            dna_id=dna_id,
            progress_change=new - previous,
            previous_progress=previous,
            new_progress=new,
            source=source,
            source_id=source_id,
            description=description,
            created_at=utcnow(),
        ))

    async def apply_progress_delta(
        self,
        session: AsyncSession,
        user_id: int,
        dna_id: int,
        delta: float,
        xp: int = 0,
        source: str = LESSON_COMPLETION,
        source_id: int | None = None,
        description: str | None = None,
    ) -> UserSkillsDnaProgress | None:
        """
        Adds `delta` progress and `xp` experience to one competency of a user.
        Every full 100 XP crossed adds one more progress point. A missing row is
        only created when the resulting increase is positive. Every change lands
        in the progress history. Does not commit.
        """
        row = await self.get_progress_row(session, user_id, dna_id)
        if row is None:
            increase = delta + math.floor(xp / 100)
            if increase <= 0:
                logger.debug(f"Skipping non-positive DNA delta {delta} for user {user_id}, dna {dna_id}")
                return None
            progress = clamp_progress(increase)
            row = UserSkillsDnaProgress(
                user_id=user_id,
                dna_id=dna_id,
                progress=progress,
                xp=max(0, xp),
                current_level=level_for_progress(progress),
                assessment_history=[],
                updated_at=utcnow(),
            )
            session.add(row)
            self._log_change(session, user_id, dna_id, 0.0, progress, source, source_id, description)
            await session.flush()
            logger.info(f"Created DNA progress for user {user_id}, dna {dna_id}: {progress} ({row.current_level})")
            return row

        previous = row.progress or 0.0
        old_xp = row.xp or 0
        new_xp = max(0, old_xp + xp)
        xp_bonus = math.floor(new_xp / 100) - math.floor(old_xp / 100)
        row.progress = clamp_progress(previous + delta + xp_bonus)
        row.xp = new_xp
        row.current_level = level_for_progress(row.progress)
        row.updated_at = utcnow()
        session.add(row)
        self._log_change(session, user_id, dna_id, previous, row.progress, source, source_id, description)
        await session.flush()
        logger.info(f"Updated DNA progress for user {user_id}, dna {dna_id}: {row.progress} ({row.current_level}), xp {row.xp}")
        return row

    async def award_course_completion(self, session: AsyncSession, user_id: int, course: Course) -> list[UserSkillsDnaProgress]:
        """
        Grants the completion bonus for every outcome of `course`: a share of the outcome's
        gain, shrunk by the learner's current level. Does not commit.
        """
        result = await session.execute(
            select(CourseSkillOutcome).filter_by(course_id=course.id).order_by(CourseSkillOutcome.dna_id)
        )
        updated = []
        for outcome in result.scalars().all():
            points = math.floor(outcome.level_gain * settings.course_completion_bonus_share)
            if points <= 0:
                continue
            current = await self.get_progress_row(session, user_id, outcome.dna_id)
            if current is not None:
                points = adjusted_gain(points, current.progress or 0, current.current_level)
            row = await self.apply_progress_delta(
                session, user_id, outcome.dna_id, points,
                source=COURSE_COMPLETION,
                source_id=course.id,
                description=f"Completed course '{course.title}'",
            )
            if row is not None:
                updated.append(row)
        logger.info(f"Course completion bonus for user {user_id}, course {course.id}: {len(updated)} skills")
        return updated

    async def record_assessment(
        self, session: AsyncSession, user_id: int, dna_id: int, value: float, source: str
    ) -> tuple[UserSkillsDnaProgress, bool]:
        """
        Stores an assessed progress value. The stored progress only ever rises; every
        assessment is appended to the row's history. Returns the row and whether progress changed.
        """
        value = clamp_progress(value)
        entry = {"value": value, "source": source, "assessed_at": utcnow().isoformat()}
        row = await self.get_progress_row(session, user_id, dna_id)
        if row is None:
            row = UserSkillsDnaProgress(
                user_id=user_id,
                dna_id=dna_id,
                progress=value,
                xp=0,
                current_level=level_for_progress(value),
                assessment_history=[entry],
                updated_at=utcnow(),
            )
            session.add(row)
            self._log_change(session, user_id, dna_id, 0.0, value, source, None, "Assessed in diagnosis")
            await session.flush()
            return row, True

        history = list(row.assessment_history or [])
        history.append(entry)
        row.assessment_history = history
        flag_modified(row, "assessment_history")

        previous = row.progress or 0.0
        changed = value > previous
        if changed:
            row.progress = value
            row.current_level = level_for_progress(value)
            row.updated_at = utcnow()
            self._log_change(session, user_id, dna_id, previous, value, source, None, "Assessed in diagnosis")
        session.add(row)
        await session.flush()
        return row, changed

    async def list_history(
        self, session: AsyncSession, user_id: int, dna_id: int | None = None, limit: int = 50
    ) -> list[SkillsDnaProgressHistory]:
        query = select(SkillsDnaProgressHistory).filter_by(user_id=user_id)
        if dna_id is not None:
            query = query.filter_by(dna_id=dna_id)
        query = query.order_by(SkillsDnaProgressHistory.created_at.desc(), SkillsDnaProgressHistory.id.desc()).limit(limit)
        result = await session.execute(query)
        return list(result.scalars().all())

# Instantiate the service globally
skills_dna_service = SkillsDnaService()

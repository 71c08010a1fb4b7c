# galaxion/services/gap_analysis_service.py
from sqlalchemy import delete
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.course import Course
from galaxion.models.enums import GapStatus
from galaxion.models.skills import (
    SkillsDna,
    UserSkillsDnaProgress,
    CourseSkillRequirement,
    CourseSkillOutcome,
    UserSkillGap,
)
from galaxion.utils.db import utcnow
from galaxion.utils.logger import logger


def merge_requirements(requirements: list[CourseSkillRequirement], current: dict[int, float]) -> dict[int, dict]:
    """
    Turns course requirements into one gap per competency. A competency required by several
    courses keeps the largest desired level, gap size and priority seen.
    """
    gaps: dict[int, dict] = {}
    for requirement in requirements:
        have = current.get(requirement.dna_id, 0.0)
        if have >= requirement.required_level:
            continue
        gap_size = requirement.required_level - have
        existing = gaps.get(requirement.dna_id)
        if existing is None:
            gaps[requirement.dna_id] = {
                "dna_id": requirement.dna_id,
                "current_level": have,
                "desired_level": requirement.required_level,
                "gap_size": gap_size,
                "priority": requirement.importance,
            }
        else:
            existing["desired_level"] = max(existing["desired_level"], requirement.required_level)
            existing["gap_size"] = max(existing["gap_size"], gap_size)
            existing["priority"] = max(existing["priority"], requirement.importance)
    return gaps


def score_courses(outcomes: list[CourseSkillOutcome], gaps: dict[int, UserSkillGap]) -> dict[int, float]:
    """Sum over a course's outcomes of min(level_gain / gap_size, 1) * priority, for gaps only."""
    scores: dict[int, float] = {}
    for outcome in outcomes:
        gap = gaps.get(outcome.dna_id)
        if gap is None or gap.gap_size <= 0:
            continue
        coverage = min(outcome.level_gain / gap.gap_size, 1.0)
        scores[outcome.course_id] = scores.get(outcome.course_id, 0.0) + coverage * gap.priority
    return scores


def gap_to_dict(gap: UserSkillGap, dna: SkillsDna | None = None) -> dict:
    return {
        "id": gap.id,
        "dna_id": gap.dna_id,
        "name": dna.name if dna else None,
        "category": dna.category if dna else None,
        "current_level": gap.current_level,
        "desired_level": gap.desired_level,
        "gap_size": gap.gap_size,
        "priority": gap.priority,
        "status": gap.status,
        "created_at": gap.created_at.isoformat() if gap.created_at else None,
    }


class GapAnalysisService:

    async def get_gaps(self, session: AsyncSession, user_id: int) -> list[dict]:
        result = await session.execute(
            select(UserSkillGap, SkillsDna)
            .join(SkillsDna, UserSkillGap.dna_id == SkillsDna.id)
            .where(UserSkillGap.user_id == user_id)
            .order_by(UserSkillGap.priority.desc(), UserSkillGap.gap_size.desc(), UserSkillGap.dna_id)
        )
        return [gap_to_dict(gap, dna) for gap, dna in result.all()]

    async def perform_analysis(self, session: AsyncSession, user_id: int) -> list[dict]:
        """Replaces the user's stored gaps with a fresh comparison against all course requirements. Does not commit."""
        progress_result = await session.execute(
            select(UserSkillsDnaProgress.dna_id, UserSkillsDnaProgress.progress)
            .where(UserSkillsDnaProgress.user_id == user_id)
        )
        current = {dna_id: progress for dna_id, progress in progress_result.all()}

        requirement_result = await session.execute(select(CourseSkillRequirement).order_by(CourseSkillRequirement.id))
        gaps = merge_requirements(list(requirement_result.scalars().all()), current)

        await session.execute(delete(UserSkillGap).where(UserSkillGap.user_id == user_id))
        now = utcnow()
        for gap in gaps.values():
            session.add(UserSkillGap(user_id=user_id, status=GapStatus.IDENTIFIED.value, created_at=now, **gap))
        await session.flush()

        logger.info(f"Gap analysis for user {user_id}: {len(gaps)} gaps across {len(current)} tracked skills")
        return await self.get_gaps(session, user_id)

    async def recommend_courses(self, session: AsyncSession, user_id: int) -> list[dict]:
        """Ranks courses by how well their outcomes close the user's gaps. Analyses once if no gaps are stored."""
        result = await session.execute(select(UserSkillGap).filter_by(user_id=user_id))
        gaps = {gap.dna_id: gap for gap in result.scalars().all()}
        if not gaps:
            logger.debug(f"No stored gaps for user {user_id}; running analysis before recommending")
            await self.perform_analysis(session, user_id)
            result = await session.execute(select(UserSkillGap).filter_by(user_id=user_id))
            gaps = {gap.dna_id: gap for gap in result.scalars().all()}
            if not gaps:
                return []

        outcome_result = await session.execute(
            select(CourseSkillOutcome).where(CourseSkillOutcome.dna_id.in_(list(gaps)))
        )
        scores = score_courses(list(outcome_result.scalars().all()), gaps)
        if not scores:
            return []

        course_result = await session.execute(select(Course).where(Course.id.in_(list(scores))))
        courses = {course.id: course for course in course_result.scalars().all()}

        ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
        return [
            {
                "course_id": course_id,
                "slug": courses[course_id].slug,
                "title": courses[course_id].title,
                "score": round(score, 2),
            }
            for course_id, score in ranked
            if course_id in courses
        ]

gap_analysis_service = GapAnalysisService()

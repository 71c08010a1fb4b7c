# galaxion/services/time_saved_service.py
"""
Time Saved estimates how much working time a learner saves thanks to their Skills DNA.

Each competency contributes a fixed number of minutes per day for its current level,
scaled by an effectiveness multiplier that depends on the competency's id range.
"""
from datetime import date, datetime
from sqlalchemy import func
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.enums import GoalStatus, SkillLevel
from galaxion.models.skills import SkillsDna, UserSkillsDnaProgress
from galaxion.models.time_saved import TimeSaved, TimeSavedHistory, TimeSavedGoal
from galaxion.utils.config import settings
from galaxion.utils.db import utcnow
from galaxion.utils.logger import logger
from galaxion.utils.numbers import round_half_up

MINUTES_PER_DAY_BY_LEVEL = {
    SkillLevel.AWARENESS.value: 5,
    SkillLevel.KNOWLEDGE.value: 15,
    SkillLevel.APPLICATION.value: 30,
    SkillLevel.MASTERY.value: 60,
    SkillLevel.EXPERTISE.value: 120,
}

# (first id, last id, multiplier)
EFFECTIVENESS_BY_DNA_RANGE = [
    (1, 100, 1.0),
    (101, 200, 1.2),
    (201, 300, 1.5),
    (301, 400, 1.3),
    (401, 500, 1.1),
]

DAYS_PER_MONTH = 30


def effectiveness_multiplier(dna_id: int) -> float:
    for first, last, multiplier in EFFECTIVENESS_BY_DNA_RANGE:
        if first <= dna_id <= last:
            return multiplier
    return 1.0


def minutes_for_skill(dna_id: int, level: str) -> float:
    return MINUTES_PER_DAY_BY_LEVEL.get(level, 0) * effectiveness_multiplier(dna_id)


def skill_breakdown(skills: list[dict]) -> tuple[float, list[dict]]:
    """
    Computes minutes per day from `skills` (dicts with dna_id, name, current_level).
    Returns the total and the per-skill contributions sorted by minutes, largest first.
    """
    breakdown = []
    for skill in skills:
        minutes = minutes_for_skill(skill["dna_id"], skill["current_level"])
        breakdown.append({
            "dna_id": skill["dna_id"],
            "name": skill.get("name") or f"Skill #{skill['dna_id']}",
            "current_level": skill["current_level"],
            "minutes_per_day": round(minutes, 1),
            "_minutes": minutes,
        })
    total = sum(item["_minutes"] for item in breakdown)
    breakdown.sort(key=lambda item: (-item["_minutes"], item["dna_id"]))
    for item in breakdown:
        share = item.pop("_minutes")
        item["percentage"] = round(100 * share / total, 1) if total else 0.0
    return total, breakdown


def build_summary(minutes_per_day: float, breakdown: list[dict], calculated_at: datetime | None) -> dict:
    hours_per_day = minutes_per_day / 60
    hours_per_year = round(hours_per_day * 365, 1)
    return {
        "minutes_per_day": round(minutes_per_day, 1),
        "hours_per_week": round(hours_per_day * 7, 1),
        "hours_per_month": round(hours_per_day * DAYS_PER_MONTH, 1),
        "hours_per_year": hours_per_year,
        "days_per_year": round(hours_per_year / 24, 1),
        "top_skills": breakdown[: settings.time_saved_top_skills],
        "last_calculated_at": calculated_at.isoformat() if calculated_at else None,
    }


def goal_status(current_monthly_minutes: float, target_minutes_monthly: int, target_date: date, today: date) -> str:
    if current_monthly_minutes >= target_minutes_monthly:
        return GoalStatus.ACHIEVED.value
    if target_date < today:
        return GoalStatus.EXPIRED.value
    return GoalStatus.ACTIVE.value


class TimeSavedService:

    async def _user_skills(self, session: AsyncSession, user_id: int) -> list[dict]:
        result = await session.execute(
            select(UserSkillsDnaProgress, SkillsDna.name)
            .join(SkillsDna, UserSkillsDnaProgress.dna_id == SkillsDna.id)
            .where(UserSkillsDnaProgress.user_id == user_id)
        )
        return [
            {"dna_id": row.dna_id, "name": name, "current_level": row.current_level}
            for row, name in result.all()
        ]

    async def _stored(self, session: AsyncSession, user_id: int) -> TimeSaved | None:
        result = await session.execute(select(TimeSaved).filter_by(user_id=user_id))
        return result.scalars().first()

    async def needs_recalculation(self, session: AsyncSession, user_id: int) -> bool:
        stored = await self._stored(session, user_id)
        if stored is None or stored.updated_at is None:
            return True
        result = await session.execute(
            select(func.count(UserSkillsDnaProgress.id))
            .where(UserSkillsDnaProgress.user_id == user_id)
            .where(UserSkillsDnaProgress.updated_at > stored.updated_at)
        )
        return result.scalar_one() > 0

    async def calculate(self, session: AsyncSession, user_id: int) -> dict:
        """Recomputes time saved from current Skills DNA, stores it and appends a history point. Does not commit."""
        skills = await self._user_skills(session, user_id)
        minutes_per_day, breakdown = skill_breakdown(skills)
        now = utcnow()

        stored = await self._stored(session, user_id)
        if stored is None:
            stored = TimeSaved(user_id=user_id, created_at=now)
        stored.minutes_per_day = minutes_per_day
        stored.updated_at = now
        session.add(stored)
        session.add(TimeSavedHistory(user_id=user_id, date=now, minutes_saved=minutes_per_day))
        await session.flush()

        logger.info(f"Calculated time saved for user {user_id}: {minutes_per_day:.1f} min/day over {len(skills)} skills")
        return build_summary(minutes_per_day, breakdown, now)

    async def get_summary(self, session: AsyncSession, user_id: int) -> dict:
        """Serves the stored figure unless Skills DNA changed since it was computed. Does not commit."""
        if await self.needs_recalculation(session, user_id):
            logger.debug(f"Time saved for user {user_id} is stale; recalculating")
            return await self.calculate(session, user_id)

        stored = await self._stored(session, user_id)
        _, breakdown = skill_breakdown(await self._user_skills(session, user_id))
        return build_summary(stored.minutes_per_day, breakdown, stored.updated_at)

    async def current_minutes_per_day(self, session: AsyncSession, user_id: int) -> float:
        """The unrounded stored figure, recalculated first when Skills DNA changed. Does not commit."""
        if await self.needs_recalculation(session, user_id):
            await self.calculate(session, user_id)
        stored = await self._stored(session, user_id)
        return stored.minutes_per_day

    async def get_history(self, session: AsyncSession, user_id: int, limit: int | None = None) -> list[dict]:
        limit = limit or settings.time_saved_history_limit
        result = await session.execute(
            select(TimeSavedHistory)
            .filter_by(user_id=user_id)
            .order_by(TimeSavedHistory.date.desc(), TimeSavedHistory.id.desc())
            .limit(limit)
        )
        return [
            {
                "date": point.date.isoformat(),
                "minutes_saved": round(point.minutes_saved, 1),
                "hours_saved": round(point.minutes_saved / 60, 2),
            }
            for point in result.scalars().all()
        ]

    async def create_goal(self, session: AsyncSession, user_id: int, target_minutes_monthly: int, target_date: date) -> dict:
        """Raises ValueError for a non-positive target or a target date that is not in the future. Does not commit."""
        if target_minutes_monthly <= 0:
            raise ValueError("target_minutes_monthly must be a positive number")
        today = utcnow().date()
        if target_date <= today:
            raise ValueError("target_date must be in the future")

        current_monthly = await self.current_minutes_per_day(session, user_id) * DAYS_PER_MONTH
        goal = TimeSavedGoal(
            user_id=user_id,
            target_minutes_monthly=target_minutes_monthly,
            target_date=target_date,
            status=goal_status(current_monthly, target_minutes_monthly, target_date, today),
            created_at=utcnow(),
        )
        session.add(goal)
        await session.flush()
        logger.info(f"User {user_id} set a time saved goal of {target_minutes_monthly} min/month by {target_date} ({goal.status})")
        return self._goal_to_dict(goal, current_monthly, today)

    async def list_goals(self, session: AsyncSession, user_id: int) -> list[dict]:
        """Lists goals with refreshed statuses. Does not commit."""
        current_monthly = await self.current_minutes_per_day(session, user_id) * DAYS_PER_MONTH
        today = utcnow().date()

        result = await session.execute(
            select(TimeSavedGoal).filter_by(user_id=user_id).order_by(TimeSavedGoal.created_at.desc(), TimeSavedGoal.id.desc())
        )
        goals = []
        for goal in result.scalars().all():
            status = goal_status(current_monthly, goal.target_minutes_monthly, goal.target_date, today)
            if status != goal.status:
                logger.info(f"Time saved goal {goal.id} of user {user_id}: {goal.status} -> {status}")
                goal.status = status
            goals.append(self._goal_to_dict(goal, current_monthly, today))
        await session.flush()
        return goals

    def _goal_to_dict(self, goal: TimeSavedGoal, current_monthly: float, today: date) -> dict:
        return {
            "id": goal.id,
            "target_minutes_monthly": goal.target_minutes_monthly,
            "target_hours_monthly": round(goal.target_minutes_monthly / 60, 1),
            "target_date": goal.target_date.isoformat(),
            "status": goal.status,
            "current_monthly_minutes": round(current_monthly, 1),
            "progress_percent": min(100, round_half_up(100 * current_monthly / goal.target_minutes_monthly)),
            "remaining_days": max(0, (goal.target_date - today).days),
            "created_at": goal.created_at.isoformat() if goal.created_at else None,
        }

time_saved_service = TimeSavedService()

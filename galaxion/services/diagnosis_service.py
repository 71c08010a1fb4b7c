# galaxion/services/diagnosis_service.py
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from galaxion.models.enums import DiagnosticType, SkillLevel
from galaxion.models.skills import SkillsDna, UserSkillsDnaProgress
from galaxion.models.user import User
from galaxion.services.skills_dna_service import skills_dna_service
from galaxion.utils.db import utcnow
from galaxion.utils.logger import logger
from galaxion.utils.numbers import round_half_up


def match_competencies(reported: dict[str, float], competencies: list[SkillsDna]) -> tuple[dict[int, float], list[str]]:
    """
    Matches self-reported skill names to competencies. A name matches a competency when
    either contains the other, ignoring case. Returns the highest value per competency id
    and the names that matched nothing.
    """
    best: dict[int, float] = {}
    unmatched = []
    for name, value in reported.items():
        needle = name.strip().lower()
        hits = [
            dna for dna in competencies
            if needle and (needle in dna.name.lower() or dna.name.lower() in needle)
        ]
        if not hits:
            unmatched.append(name)
            continue
        for dna in hits:
            best[dna.id] = max(best.get(dna.id, value), value)
    return best, unmatched


class DiagnosisService:

    async def save_results(
        self, session: AsyncSession, user: User, skills: dict[str, float], diagnostic_type: str = DiagnosticType.QUICK.value
    ) -> dict:
        """Stores a diagnostic run for the user. Raises ValueError when no competencies exist. Does not commit."""
        competencies = await skills_dna_service.list_competencies(session)
        if not competencies:
            raise ValueError("No Skills DNA competencies are configured")

        best, unmatched = match_competencies(skills, competencies)
        if unmatched:
            logger.warning(f"Diagnosis for user {user.id}: unmatched skills {unmatched}")

        updated = []
        for dna_id, value in sorted(best.items()):
            row, changed = await skills_dna_service.record_assessment(
                session, user.id, dna_id, value, source=f"diagnosis:{diagnostic_type}"
            )
            if changed:
                updated.append(dna_id)

        completed_at = utcnow()
        user.last_diagnostic = {"type": diagnostic_type, "completed_at": completed_at.isoformat()}
        flag_modified(user, "last_diagnostic")
        session.add(user)
        await session.flush()

        logger.info(f"Saved {diagnostic_type} diagnosis for user {user.id}: {len(best)} matched, {len(updated)} raised")
        return {
            "user_id": user.id,
            "diagnostic_type": diagnostic_type,
            "matched": len(best),
            "updated": updated,
            "unmatched": unmatched,
            "completed_at": completed_at.isoformat(),
        }

    async def get_progress(self, session: AsyncSession, user_id: int) -> list[dict]:
        result = await session.execute(
            select(UserSkillsDnaProgress, SkillsDna)
            .join(SkillsDna, UserSkillsDnaProgress.dna_id == SkillsDna.id)
            .where(UserSkillsDnaProgress.user_id == user_id)
            .order_by(SkillsDna.id)
        )
        return [
            {
                "dna_id": dna.id,
                "name": dna.name,
                "category": dna.category,
                "description": dna.description,
                "current_level": row.current_level,
                "progress": row.progress,
                "xp": row.xp,
                "updated_at": row.updated_at.isoformat() if row.updated_at else None,
            }
            for row, dna in result.all()
        ]

    async def get_summary(self, session: AsyncSession, user: User) -> dict:
        progress = await self.get_progress(session, user.id)
        grouped: dict[str, list[dict]] = {}
        for item in progress:
            grouped.setdefault(item["category"], []).append(item)

        categories = {}
        for category, items in grouped.items():
            levels = [SkillLevel(item["current_level"]) for item in items]
            categories[category] = {
                "avg_progress": round_half_up(sum(item["progress"] for item in items) / len(items)),
                "count": len(items),
                "max_level": max(levels, key=lambda level: level.rank).value,
            }

        return {
            "user_id": user.id,
            "total_skills": len(progress),
            "categories": categories,
            "last_diagnostic": user.last_diagnostic,
        }

diagnosis_service = DiagnosisService()

# galaxion/models/skills.py
from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    DateTime,
    ForeignKey,
    JSON,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from galaxion.models.user import Base
from galaxion.utils.db import utcnow


class SkillsDna(Base):
    """A competency tracked by Skills DNA. Ids are assigned by the catalog; the id range encodes the skill family."""
    __tablename__ = "skills_dna"
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, unique=True, nullable=False)
    category = Column(String, nullable=False, default="other")
    description = Column(Text, nullable=True)


class LessonSkillDna(Base):
    __tablename__ = "lesson_skills_dna"
    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)
    dna_id = Column(Integer, ForeignKey("skills_dna.id"), nullable=False)
    contribution = Column(Float, nullable=False, default=1.0)


class UserSkillsDnaProgress(Base):
    __tablename__ = "user_skills_dna_progress"
    __table_args__ = (UniqueConstraint("user_id", "dna_id"),)
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    dna_id = Column(Integer, ForeignKey("skills_dna.id"), nullable=False)
    current_level = Column(String, nullable=False, default="awareness")
    progress = Column(Float, nullable=False, default=0.0) # 0-100
    xp = Column(Integer, nullable=False, default=0)
    assessment_history = Column(JSON, default=lambda: [])
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="skills_dna_progress")
    dna = relationship("SkillsDna")


class CourseSkillRequirement(Base):
    __tablename__ = "course_skill_requirements"
    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    dna_id = Column(Integer, ForeignKey("skills_dna.id"), nullable=False)
    required_level = Column(Integer, nullable=False) # 0-100
    importance = Column(Integer, nullable=False, default=1) # 1-5


class CourseSkillOutcome(Base):
    __tablename__ = "course_skill_outcomes"
    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    dna_id = Column(Integer, ForeignKey("skills_dna.id"), nullable=False)
    level_gain = Column(Integer, nullable=False)


class UserSkillGap(Base):
    __tablename__ = "user_skill_gaps"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    dna_id = Column(Integer, ForeignKey("skills_dna.id"), nullable=False)
    current_level = Column(Float, nullable=False, default=0.0)
    desired_level = Column(Integer, nullable=False)
    gap_size = Column(Float, nullable=False)
    priority = Column(Integer, nullable=False, default=1)
    status = Column(String, nullable=False, default="identified")
    created_at = Column(DateTime, default=utcnow)


class SkillsDnaProgressHistory(Base):
    """One row per change of a user's Skills DNA progress."""
    __tablename__ = "skills_dna_progress_history"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    dna_id = Column(Integer, ForeignKey("skills_dna.id"), nullable=False)
    progress_change = Column(Float, nullable=False)
    previous_progress = Column(Float, nullable=False)
    new_progress = Column(Float, nullable=False)
    source = Column(String, nullable=False) # lesson_completion, course_completion, diagnosis:<type>
    source_id = Column(Integer, nullable=True) # lesson or course id
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)

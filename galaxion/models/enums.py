# galaxion/models/enums.py
from enum import Enum

class SkillLevel(str, Enum):
    """Skills DNA competency levels, ordered from lowest to highest."""
    AWARENESS = "awareness"
    KNOWLEDGE = "knowledge"
    APPLICATION = "application"
    MASTERY = "mastery"
    EXPERTISE = "expertise"

    @classmethod
    def ordered(cls) -> list["SkillLevel"]:
        return [cls.AWARENESS, cls.KNOWLEDGE, cls.APPLICATION, cls.MASTERY, cls.EXPERTISE]

    @property
    def rank(self) -> int:
        return SkillLevel.ordered().index(self)

class LessonStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

class MicroLessonSection(str, Enum):
    """Fixed sections of a micro-lesson, in presentation order."""
    HOOK = "hook"
    EXPLAIN = "explain"
    DEMO = "demo"
    QUICK_TRY = "quick_try"
    REFLECT = "reflect"

class GoalStatus(str, Enum):
    ACTIVE = "active"
    ACHIEVED = "achieved"
    EXPIRED = "expired"

class DiagnosticType(str, Enum):
    QUICK = "quick"
    DEEP = "deep"

class UserRole(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"

class GapStatus(str, Enum):
    IDENTIFIED = "identified"
    IN_PROGRESS = "in_progress"
    ADDRESSED = "addressed"

# galaxion/models/user.py
from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    DateTime,
    ForeignKey,
    JSON,
    Text,
    Boolean,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from galaxion.utils.db import utcnow


Base = declarative_base()


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    display_name = Column(String, nullable=True)
    role = Column(String, nullable=False, default="student")
    created_at = Column(DateTime, default=utcnow)
    # {"type": "quick"|"deep", "completed_at": iso timestamp}
    last_diagnostic = Column(JSON, nullable=True)

    # Relationships
    lesson_progress = relationship("UserLessonProgress", back_populates="user")
    course_progress = relationship("UserCourseProgress", back_populates="user")
    skills_dna_progress = relationship("UserSkillsDnaProgress", back_populates="user")


class UserLessonProgress(Base):
    __tablename__ = "user_lesson_progress"
    __table_args__ = (UniqueConstraint("user_id", "lesson_id"),)
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)
    status = Column(String, nullable=False, default="not_started")
    last_position = Column(Integer, default=0)
    completed_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="lesson_progress")


class UserCourseProgress(Base):
    __tablename__ = "user_course_progress"
    __table_args__ = (UniqueConstraint("user_id", "course_id"),)
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    progress = Column(Integer, nullable=False, default=0) # 0-100
    completed_modules = Column(Integer, nullable=False, default=0)
    current_lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=True)
    started_at = Column(DateTime, default=utcnow)
    last_accessed_at = Column(DateTime, default=utcnow)
    completed_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="course_progress")


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)
    score = Column(Integer, nullable=False, default=0)
    max_score = Column(Integer, nullable=False)
    percentage = Column(Integer, nullable=False, default=0)
    passed = Column(Boolean, default=False)
    attempt_number = Column(Integer, nullable=False, default=1)
    answers = Column(JSON, default=lambda: {})
    created_at = Column(DateTime, default=utcnow)


class LearningEvent(Base):
    __tablename__ = "learning_events"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    event_type = Column(String, nullable=False, index=True) # e.g. "lesson.view", "quiz.submit"
    entity_type = Column(String, nullable=True) # lesson, quiz, module, course
    entity_id = Column(Integer, nullable=True)
    data = Column(JSON, nullable=True)
    duration = Column(Float, nullable=True) # seconds
    session_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)


class AIChatHistory(Base):
    __tablename__ = "ai_chat_history"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=True)
    assistant_type = Column(String, nullable=False, default="tutor")
    user_message = Column(Text, nullable=False)
    ai_response = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow)


class LessonNote(Base):
    __tablename__ = "lesson_notes"
    __table_args__ = (UniqueConstraint("user_id", "lesson_id"),)
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

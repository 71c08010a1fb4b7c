# galaxion/models/course.py
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    JSON,
    Text,
)
from sqlalchemy.orm import relationship
from galaxion.models.user import Base
from galaxion.utils.db import utcnow


class Course(Base):
    __tablename__ = "courses"
    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String, unique=True, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    icon = Column(String, nullable=False, default="book")
    level = Column(String, nullable=False, default="basic") # basic, intermediate, advanced, expert
    difficulty = Column(Integer, nullable=False, default=1) # 1-5
    access = Column(String, nullable=False, default="free") # free, pro, premium
    estimated_duration = Column(Integer, nullable=True) # minutes
    tags = Column(JSON, default=lambda: [])
    created_at = Column(DateTime, default=utcnow)

    modules = relationship("Module", back_populates="course", order_by="Module.order_index")


class Module(Base):
    __tablename__ = "modules"
    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)

    course = relationship("Course", back_populates="modules")
    lessons = relationship("Lesson", back_populates="module", order_by="Lesson.order_index")


class Lesson(Base):
    __tablename__ = "lessons"
    id = Column(Integer, primary_key=True, index=True)
    module_id = Column(Integer, ForeignKey("modules.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String, nullable=False, default="text") # video, text, quiz, interactive, practice
    duration = Column(Integer, nullable=True) # minutes
    difficulty = Column(Integer, default=1) # 1-3
    order_index = Column(Integer, nullable=False, default=0)
    # Micro-lesson content keyed by section: hook, explain, demo, quick_try, reflect
    sections = Column(JSON, default=lambda: {})

    module = relationship("Module", back_populates="lessons")
    quiz_questions = relationship("QuizQuestion", back_populates="lesson", order_by="QuizQuestion.order_index")


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"
    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)
    prompt = Column(Text, nullable=False)
    options = Column(JSON, default=lambda: [])
    correct_option = Column(Integer, nullable=False) # 0-based index into options
    points = Column(Integer, nullable=False, default=1)
    explanation = Column(Text, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)

    lesson = relationship("Lesson", back_populates="quiz_questions")

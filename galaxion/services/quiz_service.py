# galaxion/services/quiz_service.py
from sqlalchemy import func
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.course import Lesson, QuizQuestion
from galaxion.models.enums import LessonStatus
from galaxion.models.user import QuizAttempt
from galaxion.services.event_service import event_service
from galaxion.services.progress_service import progress_service
from galaxion.utils.config import settings
from galaxion.utils.logger import logger
from galaxion.utils.numbers import round_half_up


def quiz_percentage(score: int, max_score: int) -> int:
    return round_half_up(100 * score / max_score) if max_score else 0


def is_passing(percentage: int) -> bool:
    return percentage >= settings.quiz_passing_score


class QuizService:

    async def get_questions(self, session: AsyncSession, lesson_id: int) -> list[QuizQuestion]:
        result = await session.execute(
            select(QuizQuestion)
            .filter_by(lesson_id=lesson_id)
            .order_by(QuizQuestion.order_index, QuizQuestion.id)
        )
        return list(result.scalars().all())

    def public_question(self, question: QuizQuestion) -> dict:
        """The question as shown to a learner, without the answer."""
        return {
            "id": question.id,
            "prompt": question.prompt,
            "options": question.options or [],
            "points": question.points,
        }

    def check_answer(self, question: QuizQuestion, answer: int | None) -> bool:
        return answer is not None and answer == question.correct_option

    async def next_attempt_number(self, session: AsyncSession, user_id: int, lesson_id: int) -> int:
        result = await session.execute(
            select(func.max(QuizAttempt.attempt_number))
            .where(QuizAttempt.user_id == user_id)
            .where(QuizAttempt.lesson_id == lesson_id)
        )
        return (result.scalar() or 0) + 1

    async def submit(self, session: AsyncSession, user_id: int, lesson: Lesson, answers: dict[int, int]) -> dict:
        """
        Grades a quiz submission, stores the attempt and, on a pass, completes the lesson.
        Raises LookupError when the lesson has no quiz. Does not commit.
        """
        questions = await self.get_questions(session, lesson.id)
        if not questions:
            raise LookupError(f"Lesson {lesson.id} has no quiz")

        score = 0
        max_score = 0
        feedback = []
        for question in questions:
            answer = answers.get(question.id)
            correct = self.check_answer(question, answer)
            max_score += question.points
            if correct:
                score += question.points
            feedback.append({
                "question_id": question.id,
                "selected_option": answer,
                "correct_option": question.correct_option,
                "correct": correct,
                "explanation": question.explanation,
            })

        percentage = quiz_percentage(score, max_score)
        passed = is_passing(percentage)
        attempt_number = await self.next_attempt_number(session, user_id, lesson.id)

        attempt = QuizAttempt(
            user_id=user_id,
            lesson_id=lesson.id,
            score=score,
            max_score=max_score,
            percentage=percentage,
            passed=passed,
            attempt_number=attempt_number,
            answers={str(question_id): option for question_id, option in answers.items()},
        )
        session.add(attempt)
        await session.flush()
        logger.info(f"User {user_id} quiz attempt {attempt_number} on lesson {lesson.id}: {score}/{max_score} ({percentage}%), passed={passed}")

        lesson_progress = None
        if passed:
            lesson_progress = await progress_service.mark_lesson_progress(
                session, user_id, lesson, LessonStatus.COMPLETED.value
            )

        await event_service.record_event(
            session,
            event_type="quiz.submit",
            user_id=user_id,
            entity_type="quiz",
            entity_id=lesson.id,
            data={"score": score, "max_score": max_score, "percentage": percentage,
                  "passed": passed, "attempt_number": attempt_number},
        )

        return {
            "attempt_id": attempt.id,
            "lesson_id": lesson.id,
            "score": score,
            "max_score": max_score,
            "percentage": percentage,
            "passed": passed,
            "passing_score": settings.quiz_passing_score,
            "attempt_number": attempt_number,
            "feedback": feedback,
            "lesson_progress": lesson_progress,
        }

quiz_service = QuizService()

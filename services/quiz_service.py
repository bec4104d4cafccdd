from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, or_
from models.quiz import Quiz, Question
from models.user import User
from core.config import settings
from core.exceptions import NotFoundError, ForbiddenError, InvalidRequestError
from core.security import Principal
from core.logger import logger

QUIZ_FIELDS = ("title", "description", "category", "time_limit", "passing_score", "shuffle_questions", "is_public")
QUESTION_FIELDS = ("text", "choices", "right_answer", "explanation", "points", "difficulty")
FEATURED_LIMIT = 5

class QuizService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_quiz(self, quiz_id: int) -> Optional[Quiz]:
        result = await self.db.execute(select(Quiz).filter(Quiz.id == quiz_id))
        return result.scalar_one_or_none()

    async def get_quiz_or_404(self, quiz_id: int) -> Quiz:
        quiz = await self.get_quiz(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found")
        return quiz

    async def get_visible_quiz(self, quiz_id: int, principal: Optional[Principal]) -> Quiz:
        """Public quizzes for everyone, private ones for their creator only."""
        quiz = await self.get_quiz_or_404(quiz_id)
        if not quiz.is_public and (principal is None or quiz.creator_id != principal.id):
            raise ForbiddenError("This quiz is private")
        return quiz

    async def get_editable_quiz(self, quiz_id: int, principal: Principal) -> Quiz:
        quiz = await self.get_quiz_or_404(quiz_id)
        if quiz.creator_id != principal.id and not principal.is_admin:
            raise ForbiddenError("Not authorized to modify this quiz")
        return quiz

    async def get_user_quizzes(self, user_id: int) -> List[Quiz]:
        result = await self.db.execute(
            select(Quiz).filter(Quiz.creator_id == user_id).order_by(Quiz.created_at.desc(), Quiz.id.desc())
        )
        return list(result.scalars().all())

    async def list_public_quizzes(self, principal: Optional[Principal] = None) -> List[Quiz]:
        """Public quizzes plus the requester's own private ones, newest first."""
        visible = Quiz.is_public.is_(True)
        if principal is not None:
            visible = or_(visible, Quiz.creator_id == principal.id)
        result = await self.db.execute(
            select(Quiz).filter(visible).order_by(Quiz.created_at.desc(), Quiz.id.desc())
        )
        return list(result.scalars().all())

    async def list_featured_quizzes(self, limit: int = FEATURED_LIMIT) -> List[Quiz]:
        result = await self.db.execute(
            select(Quiz)
            .filter(Quiz.is_public.is_(True), Quiz.featured.is_(True))
            .order_by(Quiz.created_at.desc(), Quiz.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    @staticmethod
    def find_question(quiz: Quiz, question_id: int) -> Optional[Question]:
        for question in quiz.questions:
            if question.id == question_id:
                return question
        return None

    async def create_quiz(self, principal: Principal, data: dict, questions: Optional[list] = None) -> Quiz:
        questions = questions or []
        if len(questions) > settings.MAX_QUESTIONS_PER_QUIZ:
            raise InvalidRequestError(f"A quiz can have at most {settings.MAX_QUESTIONS_PER_QUIZ} questions")

        quiz = Quiz(creator_id=principal.id, **{k: v for k, v in data.items() if k in QUIZ_FIELDS})
        quiz.questions = [self._new_question(q) for q in questions]
        self.db.add(quiz)

        await self.db.execute(
            update(User)
            .where(User.id == principal.id)
            .values(quizzes_created=User.quizzes_created + 1)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        logger.info("Quiz created", quiz_id=quiz.id, user_id=principal.id, questions=len(questions))
        return await self.get_quiz(quiz.id)

    async def update_quiz(self, quiz_id: int, principal: Principal, changes: dict) -> Quiz:
        quiz = await self.get_editable_quiz(quiz_id, principal)
        if changes.get("featured") is not None:
            if not principal.is_admin:
                raise ForbiddenError("Only admins can feature quizzes")
            quiz.featured = changes["featured"]
        for key, value in changes.items():
            if key in QUIZ_FIELDS and value is not None:
                setattr(quiz, key, value)
        await self.db.commit()
        logger.info("Quiz updated", quiz_id=quiz_id, user_id=principal.id, fields=list(changes.keys()))
        return quiz

    async def delete_quiz(self, quiz_id: int, principal: Principal) -> None:
        quiz = await self.get_editable_quiz(quiz_id, principal)
        creator_id = quiz.creator_id

        await self.db.delete(quiz)
        await self.db.execute(
            update(User)
            .where(User.id == creator_id)
            .values(quizzes_created=User.quizzes_created - 1)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        logger.info("Quiz deleted", quiz_id=quiz_id, user_id=principal.id)

    def _new_question(self, data: dict) -> Question:
        question = Question(**{k: v for k, v in data.items() if k in QUESTION_FIELDS})
        if question.points is None:
            question.points = settings.DEFAULT_QUESTION_POINTS
        if question.difficulty is None:
            question.difficulty = "medium"
        self._validate_question(question)
        return question

    @staticmethod
    def _validate_question(question: Question):
        choices = question.choices or []
        if len(choices) < 2:
            raise InvalidRequestError("A question needs at least two choices")
        if not 0 <= question.right_answer < len(choices):
            raise InvalidRequestError("Right answer must point at one of the choices")
        if question.points < 1:
            raise InvalidRequestError("Points must be a positive integer")

    async def add_question(self, quiz_id: int, principal: Principal, data: dict) -> Quiz:
        quiz = await self.get_editable_quiz(quiz_id, principal)
        if len(quiz.questions) >= settings.MAX_QUESTIONS_PER_QUIZ:
            raise InvalidRequestError(f"A quiz can have at most {settings.MAX_QUESTIONS_PER_QUIZ} questions")

        quiz.questions.append(self._new_question(data))
        await self.db.commit()
        logger.info("Question added", quiz_id=quiz_id, user_id=principal.id)
        return quiz

    async def update_question(self, quiz_id: int, question_id: int, principal: Principal, changes: dict) -> Quiz:
        quiz = await self.get_editable_quiz(quiz_id, principal)
        question = self.find_question(quiz, question_id)
        if not question:
            raise NotFoundError("Question not found")

        for key, value in changes.items():
            if key in QUESTION_FIELDS and value is not None:
                setattr(question, key, value)
        try:
            self._validate_question(question)
        except InvalidRequestError:
            await self.db.rollback()
            raise
        await self.db.commit()
        logger.info("Question updated", quiz_id=quiz_id, question_id=question_id, user_id=principal.id)
        return quiz

    async def remove_question(self, quiz_id: int, question_id: int, principal: Principal) -> Quiz:
        quiz = await self.get_editable_quiz(quiz_id, principal)
        question = self.find_question(quiz, question_id)
        if not question:
            raise NotFoundError("Question not found")

        quiz.questions.remove(question)
        quiz.questions.reorder()
        await self.db.commit()
        logger.info("Question removed", quiz_id=quiz_id, question_id=question_id, user_id=principal.id)
        return quiz

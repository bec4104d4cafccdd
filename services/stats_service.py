from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, cast, Float
from models.quiz import Quiz
from models.user import User
from models.attempt import Attempt, STATUS_COMPLETED
from core.logger import logger

class StatsService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_attempt(self, quiz_id: int, user_id: int, percentage_score: int) -> bool:
        """
        Fold one completed attempt into the quiz and user aggregates.

        Best effort: a failure is logged and rolled back, never raised, because
        the completed attempt is the source of truth.
        """
        try:
            # Single UPDATE: the SET expressions read the pre-update row, and the
            # row lock serializes concurrent completions on the same quiz.
            await self.db.execute(
                update(Quiz)
                .where(Quiz.id == quiz_id)
                .values(
                    attempts=Quiz.attempts + 1,
                    score_sum=Quiz.score_sum + percentage_score,
                    avg_score=cast(Quiz.score_sum + percentage_score, Float) / (Quiz.attempts + 1),
                )
                .execution_options(synchronize_session=False)
            )
            await self.db.execute(
                update(User)
                .where(User.id == user_id)
                .values(quizzes_taken=User.quizzes_taken + 1)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error("Failed to update aggregate stats", quiz_id=quiz_id, user_id=user_id, error=str(e))
            return False

        logger.debug("Aggregate stats updated", quiz_id=quiz_id, user_id=user_id, score=percentage_score)
        return True

    async def recompute_quiz_stats(self, quiz_id: int) -> Optional[Quiz]:
        """Rebuild a quiz's aggregates from its completed attempts."""
        result = await self.db.execute(
            select(func.count(Attempt.id), func.coalesce(func.sum(Attempt.percentage_score), 0))
            .filter(Attempt.quiz_id == quiz_id, Attempt.status == STATUS_COMPLETED)
        )
        count, total = result.one()

        quiz = await self.db.get(Quiz, quiz_id)
        if not quiz:
            return None

        quiz.attempts = int(count)
        quiz.score_sum = int(total)
        quiz.avg_score = (quiz.score_sum / quiz.attempts) if quiz.attempts else 0.0
        await self.db.commit()
        logger.info("Quiz stats recomputed", quiz_id=quiz_id, attempts=quiz.attempts, avg_score=quiz.avg_score)
        return quiz

    async def recompute_all(self) -> int:
        result = await self.db.execute(select(Quiz.id))
        quiz_ids = list(result.scalars().all())
        for quiz_id in quiz_ids:
            await self.recompute_quiz_stats(quiz_id)
        return len(quiz_ids)

from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from models.attempt import Attempt, STATUS_STARTED, STATUS_COMPLETED
from models.quiz import Quiz
from services.quiz_service import QuizService
from services.stats_service import StatsService
from services.snapshot import build_attempt_view
from services.scoring import (
    build_answer_key,
    score_answers,
    max_possible_score,
    percentage_score,
    feedback_for,
    FEEDBACK_KEEP_STUDYING,
    round_half_up,
)
from core.config import settings
from core.exceptions import NotFoundError, ForbiddenError, InvalidStateError
from core.security import Principal
from core.logger import logger

SCORING_LIVE = "live"
SCORING_SNAPSHOT = "snapshot"

class AttemptService:
    """
    Owns the started -> completed lifecycle of an attempt.

    Attempts are scored against the quiz's current questions unless the
    snapshot basis is configured, in which case the answer key is frozen on
    the attempt when it starts.
    """

    def __init__(self, db: AsyncSession, stats: Optional[StatsService] = None, scoring_basis: Optional[str] = None):
        self.db = db
        self.quizzes = QuizService(db)
        self.stats = stats or StatsService(db)
        self.scoring_basis = scoring_basis or settings.SCORING_BASIS

    async def _load_attempt(self, attempt_id: int, for_update: bool = False) -> Optional[Attempt]:
        query = select(Attempt).filter(Attempt.id == attempt_id).execution_options(populate_existing=True)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def start_attempt(self, quiz_id: int, principal: Principal) -> Tuple[Attempt, Dict[str, Any]]:
        quiz = await self.quizzes.get_quiz_or_404(quiz_id)
        if not quiz.is_public and quiz.creator_id != principal.id:
            raise ForbiddenError("Not authorized to attempt this quiz")

        attempt = Attempt(
            user_id=principal.id,
            quiz_id=quiz.id,
            status=STATUS_STARTED,
            start_time=datetime.utcnow(),
            answers=[],
            total_score=0,
            percentage_score=0,
            passed=False,
        )
        if self.scoring_basis == SCORING_SNAPSHOT:
            attempt.answer_key = build_answer_key(quiz.questions)

        self.db.add(attempt)
        await self.db.commit()
        logger.info("Attempt started", attempt_id=attempt.id, quiz_id=quiz.id, user_id=principal.id)
        return attempt, build_attempt_view(quiz)

    async def submit_attempt(self, attempt_id: int, principal: Principal, answers: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
        # Row lock so two concurrent submissions cannot both see "started"
        attempt = await self._load_attempt(attempt_id, for_update=True)
        if not attempt:
            raise NotFoundError("Attempt not found")
        if attempt.user_id != principal.id:
            raise ForbiddenError("Not authorized to submit this attempt")
        if attempt.is_completed:
            raise InvalidStateError("This attempt has already been submitted")

        quiz = await self.quizzes.get_quiz(attempt.quiz_id) if attempt.quiz_id is not None else None
        if not quiz:
            raise NotFoundError("Quiz not found")

        return await self._finalize(attempt, quiz, answers)

    async def _finalize(self, attempt: Attempt, quiz: Quiz, answers: Iterable[Dict[str, Any]], timed_out: bool = False) -> Dict[str, Any]:
        answer_key = attempt.answer_key if attempt.answer_key is not None else build_answer_key(quiz.questions)

        processed, total_score = score_answers(answer_key, answers)
        max_score = max_possible_score(answer_key)
        percentage = percentage_score(total_score, max_score)
        # Zero-point quizzes cannot be passed
        passed = max_score > 0 and percentage >= quiz.passing_score

        finish_time = datetime.utcnow()
        attempt.answers = processed
        attempt.total_score = total_score
        attempt.percentage_score = percentage
        attempt.passed = passed
        attempt.status = STATUS_COMPLETED
        attempt.timed_out = timed_out
        attempt.finish_time = finish_time
        attempt.total_time_taken = round_half_up((finish_time - attempt.start_time).total_seconds())
        await self.db.commit()

        result = {
            "attempt_id": attempt.id,
            "total_score": total_score,
            "percentage_score": percentage,
            "passed": passed,
            "total_questions": len(answer_key),
            "answered_correctly": sum(1 for a in processed if a["is_correct"]),
            "time_taken": attempt.total_time_taken,
            "feedback": feedback_for(percentage, quiz.passing_score) if max_score > 0 else FEEDBACK_KEEP_STUDYING,
        }
        logger.info(
            "Attempt completed",
            attempt_id=attempt.id,
            quiz_id=quiz.id,
            user_id=attempt.user_id,
            percentage=percentage,
            passed=passed,
            timed_out=timed_out,
        )

        # Aggregates are derived state; a failure here leaves the attempt completed
        await self.stats.record_attempt(quiz.id, attempt.user_id, percentage)
        return result

    async def expire_attempt(self, attempt_id: int) -> bool:
        """Auto-fail an attempt that was never submitted. No-op if it already completed."""
        attempt = await self._load_attempt(attempt_id, for_update=True)
        if not attempt or attempt.is_completed:
            await self.db.rollback()
            return False

        quiz = await self.quizzes.get_quiz(attempt.quiz_id) if attempt.quiz_id is not None else None
        if not quiz:
            # Nothing left to score against or aggregate into
            now = datetime.utcnow()
            attempt.status = STATUS_COMPLETED
            attempt.timed_out = True
            attempt.finish_time = now
            attempt.total_time_taken = round_half_up((now - attempt.start_time).total_seconds())
            await self.db.commit()
            logger.info("Orphaned attempt expired", attempt_id=attempt_id)
            return True

        await self._finalize(attempt, quiz, [], timed_out=True)
        return True

    async def get_attempt(self, attempt_id: int, principal: Principal) -> Attempt:
        attempt = await self._load_attempt(attempt_id)
        if not attempt:
            raise NotFoundError("Attempt not found")

        if attempt.user_id == principal.id or principal.is_admin:
            return attempt

        quiz = await self.quizzes.get_quiz(attempt.quiz_id) if attempt.quiz_id is not None else None
        if quiz and quiz.creator_id == principal.id:
            return attempt

        raise ForbiddenError("Not authorized to view this attempt")

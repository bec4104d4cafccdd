from unittest.mock import AsyncMock

import pytest

from core.exceptions import NotFoundError, ForbiddenError, InvalidStateError
from models.attempt import STATUS_STARTED, STATUS_COMPLETED
from services.attempt_service import AttemptService, SCORING_LIVE, SCORING_SNAPSHOT
from services.quiz_service import QuizService
from services.scoring import FEEDBACK_KEEP_STUDYING, FEEDBACK_PASSED
from services.stats_service import StatsService
from core.security import Principal


def as_principal(user):
    return Principal(id=user.id, role=user.role)


def answers_for(quiz, choices):
    return [
        {"question_id": q.id, "selected_choice": choice, "time_taken": 3}
        for q, choice in zip(quiz.questions, choices)
    ]


# Start

async def test_start_attempt_returns_view_without_answers(db, sample_quiz, learner):
    attempt, view = await AttemptService(db).start_attempt(sample_quiz.id, as_principal(learner))

    assert attempt.id is not None
    assert attempt.status == STATUS_STARTED
    assert attempt.user_id == learner.id
    assert attempt.quiz_id == sample_quiz.id
    assert attempt.answers == []
    assert attempt.answer_key is None
    assert view["id"] == sample_quiz.id
    assert len(view["questions"]) == 2
    assert all("right_answer" not in q for q in view["questions"])


async def test_start_attempt_missing_quiz(db, learner):
    with pytest.raises(NotFoundError):
        await AttemptService(db).start_attempt(12345, as_principal(learner))


async def test_private_quiz_only_startable_by_creator(db, sample_quiz, owner, learner):
    await QuizService(db).update_quiz(sample_quiz.id, as_principal(owner), {"is_public": False})

    with pytest.raises(ForbiddenError):
        await AttemptService(db).start_attempt(sample_quiz.id, as_principal(learner))

    attempt, _ = await AttemptService(db).start_attempt(sample_quiz.id, as_principal(owner))
    assert attempt.user_id == owner.id


async def test_start_attempt_does_not_touch_aggregates(db, sample_quiz, learner):
    await AttemptService(db).start_attempt(sample_quiz.id, as_principal(learner))
    await db.refresh(sample_quiz)
    await db.refresh(learner)
    assert sample_quiz.attempts == 0
    assert learner.quizzes_taken == 0


# Submit

async def test_submit_scores_and_completes(db, sample_quiz, learner):
    service = AttemptService(db)
    attempt, _ = await service.start_attempt(sample_quiz.id, as_principal(learner))

    result = await service.submit_attempt(attempt.id, as_principal(learner), answers_for(sample_quiz, [0, 0]))

    assert result["attempt_id"] == attempt.id
    assert result["total_score"] == 10
    assert result["percentage_score"] == 33
    assert result["passed"] is False
    assert result["total_questions"] == 2
    assert result["answered_correctly"] == 1
    assert result["feedback"] == FEEDBACK_KEEP_STUDYING
    assert result["time_taken"] >= 0

    stored = await service.get_attempt(attempt.id, as_principal(learner))
    assert stored.status == STATUS_COMPLETED
    assert stored.finish_time is not None
    assert stored.timed_out is False
    assert [a["is_correct"] for a in stored.answers] == [True, False]
    assert [a["points_earned"] for a in stored.answers] == [10, 0]


async def test_submit_all_correct_passes(db, sample_quiz, learner):
    service = AttemptService(db)
    attempt, _ = await service.start_attempt(sample_quiz.id, as_principal(learner))
    result = await service.submit_attempt(attempt.id, as_principal(learner), answers_for(sample_quiz, [0, 1]))

    assert result["percentage_score"] == 100
    assert result["passed"] is True


async def test_submit_twice_is_rejected(db, sample_quiz, learner):
    service = AttemptService(db)
    attempt, _ = await service.start_attempt(sample_quiz.id, as_principal(learner))
    await service.submit_attempt(attempt.id, as_principal(learner), answers_for(sample_quiz, [0, 1]))

    with pytest.raises(InvalidStateError):
        await service.submit_attempt(attempt.id, as_principal(learner), answers_for(sample_quiz, [1, 0]))

    # The first result stands and was only counted once
    stored = await service.get_attempt(attempt.id, as_principal(learner))
    assert stored.percentage_score == 100
    await db.refresh(sample_quiz)
    assert sample_quiz.attempts == 1


async def test_submit_by_other_user_is_forbidden(db, sample_quiz, learner, stranger):
    service = AttemptService(db)
    attempt, _ = await service.start_attempt(sample_quiz.id, as_principal(learner))

    with pytest.raises(ForbiddenError):
        await service.submit_attempt(attempt.id, as_principal(stranger), [])

    stored = await service.get_attempt(attempt.id, as_principal(learner))
    assert stored.status == STATUS_STARTED


async def test_submit_missing_attempt(db, learner):
    with pytest.raises(NotFoundError):
        await AttemptService(db).submit_attempt(999, as_principal(learner), [])


async def test_submit_after_quiz_deleted(db, sample_quiz, owner, learner):
    service = AttemptService(db)
    attempt, _ = await service.start_attempt(sample_quiz.id, as_principal(learner))
    await QuizService(db).delete_quiz(sample_quiz.id, as_principal(owner))

    with pytest.raises(NotFoundError):
        await service.submit_attempt(attempt.id, as_principal(learner), [])


async def test_submit_drops_unknown_questions(db, sample_quiz, learner):
    service = AttemptService(db)
    attempt, _ = await service.start_attempt(sample_quiz.id, as_principal(learner))
    answers = answers_for(sample_quiz, [0, 1]) + [{"question_id": 98765, "selected_choice": 0}]

    result = await service.submit_attempt(attempt.id, as_principal(learner), answers)

    assert result["total_score"] == 30
    stored = await service.get_attempt(attempt.id, as_principal(learner))
    assert len(stored.answers) == 2


async def test_zero_point_quiz_scores_zero_and_fails(db, owner, learner):
    quiz = await QuizService(db).create_quiz(as_principal(owner), {"title": "Empty", "passing_score": 0})
    service = AttemptService(db)
    attempt, view = await service.start_attempt(quiz.id, as_principal(learner))
    assert view["questions"] == []

    result = await service.submit_attempt(attempt.id, as_principal(learner), [])

    assert result["percentage_score"] == 0
    assert result["passed"] is False
    assert result["total_questions"] == 0
    assert result["feedback"] == FEEDBACK_KEEP_STUDYING


# Aggregates

async def test_aggregates_track_completed_attempts(db, five_point_quiz, learner):
    service = AttemptService(db)

    first, _ = await service.start_attempt(five_point_quiz.id, as_principal(learner))
    result = await service.submit_attempt(first.id, as_principal(learner), answers_for(five_point_quiz, [0, 0, 0, 0, 1]))
    assert result["percentage_score"] == 80
    assert result["passed"] is True

    second, _ = await service.start_attempt(five_point_quiz.id, as_principal(learner))
    result = await service.submit_attempt(second.id, as_principal(learner), answers_for(five_point_quiz, [0, 0, 0, 1, 1]))
    assert result["percentage_score"] == 60
    assert result["feedback"] == FEEDBACK_PASSED

    await db.refresh(five_point_quiz)
    await db.refresh(learner)
    assert five_point_quiz.attempts == 2
    assert five_point_quiz.score_sum == 140
    assert five_point_quiz.avg_score == pytest.approx(70.0)
    assert learner.quizzes_taken == 2


async def test_stats_failure_does_not_fail_submission(db, sample_quiz, learner):
    broken_db = AsyncMock()
    broken_db.execute.side_effect = RuntimeError("database is gone")
    service = AttemptService(db, stats=StatsService(broken_db))

    attempt, _ = await service.start_attempt(sample_quiz.id, as_principal(learner))
    result = await service.submit_attempt(attempt.id, as_principal(learner), answers_for(sample_quiz, [0, 1]))

    assert result["percentage_score"] == 100
    broken_db.rollback.assert_awaited()

    stored = await service.get_attempt(attempt.id, as_principal(learner))
    assert stored.status == STATUS_COMPLETED
    await db.refresh(sample_quiz)
    assert sample_quiz.attempts == 0


# Scoring basis

async def test_live_scoring_uses_current_answers(db, sample_quiz, owner, learner):
    service = AttemptService(db, scoring_basis=SCORING_LIVE)
    attempt, _ = await service.start_attempt(sample_quiz.id, as_principal(learner))
    first_question = sample_quiz.questions[0]

    await QuizService(db).update_question(sample_quiz.id, first_question.id, as_principal(owner), {"right_answer": 2})
    result = await service.submit_attempt(attempt.id, as_principal(learner), answers_for(sample_quiz, [0, 1]))

    assert result["total_score"] == 20


async def test_snapshot_scoring_uses_answers_at_start(db, sample_quiz, owner, learner):
    service = AttemptService(db, scoring_basis=SCORING_SNAPSHOT)
    attempt, _ = await service.start_attempt(sample_quiz.id, as_principal(learner))
    assert [k["right_answer"] for k in attempt.answer_key] == [0, 1]
    first_question = sample_quiz.questions[0]

    await QuizService(db).update_question(sample_quiz.id, first_question.id, as_principal(owner), {"right_answer": 2})
    result = await service.submit_attempt(attempt.id, as_principal(learner), answers_for(sample_quiz, [0, 1]))

    assert result["total_score"] == 30
    assert result["percentage_score"] == 100


# Viewing

async def test_get_attempt_permissions(db, sample_quiz, owner, learner, stranger, admin):
    service = AttemptService(db)
    attempt, _ = await service.start_attempt(sample_quiz.id, as_principal(learner))

    for viewer in (learner, owner, admin):
        assert (await service.get_attempt(attempt.id, as_principal(viewer))).id == attempt.id

    with pytest.raises(ForbiddenError):
        await service.get_attempt(attempt.id, as_principal(stranger))


async def test_get_attempt_after_quiz_deleted(db, sample_quiz, owner, learner, admin):
    service = AttemptService(db)
    attempt, _ = await service.start_attempt(sample_quiz.id, as_principal(learner))
    await service.submit_attempt(attempt.id, as_principal(learner), answers_for(sample_quiz, [0, 1]))
    await QuizService(db).delete_quiz(sample_quiz.id, as_principal(owner))

    assert (await service.get_attempt(attempt.id, as_principal(learner))).percentage_score == 100
    assert (await service.get_attempt(attempt.id, as_principal(admin))).id == attempt.id
    with pytest.raises(ForbiddenError):
        await service.get_attempt(attempt.id, as_principal(owner))


async def test_get_missing_attempt(db, learner):
    with pytest.raises(NotFoundError):
        await AttemptService(db).get_attempt(4242, as_principal(learner))


# Expiry

async def test_expire_attempt_completes_with_zero(db, sample_quiz, learner):
    service = AttemptService(db)
    attempt, _ = await service.start_attempt(sample_quiz.id, as_principal(learner))

    assert await service.expire_attempt(attempt.id) is True

    stored = await service.get_attempt(attempt.id, as_principal(learner))
    assert stored.status == STATUS_COMPLETED
    assert stored.timed_out is True
    assert stored.percentage_score == 0
    assert stored.passed is False


async def test_expire_completed_attempt_is_noop(db, sample_quiz, learner):
    service = AttemptService(db)
    attempt, _ = await service.start_attempt(sample_quiz.id, as_principal(learner))
    await service.submit_attempt(attempt.id, as_principal(learner), answers_for(sample_quiz, [0, 1]))

    assert await service.expire_attempt(attempt.id) is False
    stored = await service.get_attempt(attempt.id, as_principal(learner))
    assert stored.timed_out is False
    assert stored.percentage_score == 100

from typing import Union

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas import (
    AttemptQuizView,
    AttemptStartResponse,
    DataResponse,
    ListResponse,
    QuestionIn,
    QuestionUpdate,
    QuizCreate,
    QuizOut,
    QuizSummary,
    QuizUpdate,
    SuccessResponse,
)
from core.security import Principal, get_current_principal
from db.session import get_db
from services.attempt_service import AttemptService
from services.quiz_service import QuizService
from services.snapshot import build_attempt_view

router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])


def _quiz_response(quiz) -> DataResponse[QuizOut]:
    return DataResponse[QuizOut](data=QuizOut.model_validate(quiz))


def _summary_list(quizzes) -> ListResponse[QuizSummary]:
    items = [QuizSummary.model_validate(q) for q in quizzes]
    return ListResponse[QuizSummary](count=len(items), data=items)


@router.post("", response_model=DataResponse[QuizOut], status_code=status.HTTP_201_CREATED, summary="Create quiz")
async def create_quiz(
    payload: QuizCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    data = payload.model_dump(exclude={"questions"})
    questions = [q.model_dump() for q in payload.questions]
    quiz = await QuizService(db).create_quiz(principal, data, questions)
    return _quiz_response(quiz)


@router.get("", response_model=ListResponse[QuizSummary], summary="Browse quizzes")
async def list_quizzes(principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    """Public quizzes plus your own private ones, newest first."""
    quizzes = await QuizService(db).list_public_quizzes(principal)
    return _summary_list(quizzes)


@router.get("/featured", response_model=ListResponse[QuizSummary], summary="Featured quizzes")
async def list_featured_quizzes(principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    quizzes = await QuizService(db).list_featured_quizzes()
    return _summary_list(quizzes)


@router.get(
    "/{quiz_id}",
    response_model=Union[DataResponse[QuizOut], DataResponse[AttemptQuizView]],
    summary="Get quiz details",
    description="Creators and admins get the full quiz; everyone else gets it without right answers and explanations.",
    responses={403: {"description": "Quiz is private"}, 404: {"description": "Quiz not found"}},
)
async def get_quiz(quiz_id: int, principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    quiz = await QuizService(db).get_visible_quiz(quiz_id, principal)
    if quiz.creator_id == principal.id or principal.is_admin:
        return _quiz_response(quiz)
    return DataResponse[AttemptQuizView](data=AttemptQuizView(**build_attempt_view(quiz)))


@router.put("/{quiz_id}", response_model=DataResponse[QuizOut], summary="Update quiz settings")
async def update_quiz(
    quiz_id: int,
    payload: QuizUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    quiz = await QuizService(db).update_quiz(quiz_id, principal, payload.model_dump(exclude_unset=True))
    return _quiz_response(quiz)


@router.delete("/{quiz_id}", response_model=SuccessResponse, summary="Delete quiz")
async def delete_quiz(quiz_id: int, principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    await QuizService(db).delete_quiz(quiz_id, principal)
    return SuccessResponse()


@router.post("/{quiz_id}/questions", response_model=DataResponse[QuizOut], status_code=status.HTTP_201_CREATED, summary="Add question")
async def add_question(
    quiz_id: int,
    payload: QuestionIn,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    quiz = await QuizService(db).add_question(quiz_id, principal, payload.model_dump())
    return _quiz_response(quiz)


@router.put("/{quiz_id}/questions/{question_id}", response_model=DataResponse[QuizOut], summary="Update question")
async def update_question(
    quiz_id: int,
    question_id: int,
    payload: QuestionUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    quiz = await QuizService(db).update_question(quiz_id, question_id, principal, payload.model_dump(exclude_unset=True))
    return _quiz_response(quiz)


@router.delete("/{quiz_id}/questions/{question_id}", response_model=DataResponse[QuizOut], summary="Remove question")
async def remove_question(
    quiz_id: int,
    question_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    quiz = await QuizService(db).remove_question(quiz_id, question_id, principal)
    return _quiz_response(quiz)


@router.post(
    "/{quiz_id}/attempt",
    response_model=AttemptStartResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start an attempt",
    description="Creates a started attempt and returns the quiz without its answer key.",
)
async def start_attempt(quiz_id: int, principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    attempt, view = await AttemptService(db).start_attempt(quiz_id, principal)
    return AttemptStartResponse(attempt_id=attempt.id, data=AttemptQuizView(**view))

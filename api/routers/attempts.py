from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas import AttemptOut, DataResponse, ScoreResult, SubmitRequest
from core.security import Principal, get_current_principal
from db.session import get_db
from services.attempt_service import AttemptService

router = APIRouter(prefix="/api/attempts", tags=["attempts"])


@router.post(
    "/{attempt_id}/submit",
    response_model=DataResponse[ScoreResult],
    summary="Submit answers",
    responses={
        400: {"description": "Attempt already submitted"},
        403: {"description": "Attempt belongs to another user"},
        404: {"description": "Attempt or quiz not found"},
    },
)
async def submit_attempt(
    attempt_id: int,
    payload: SubmitRequest,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    answers = [a.model_dump() for a in payload.answers]
    result = await AttemptService(db).submit_attempt(attempt_id, principal, answers)
    return DataResponse[ScoreResult](data=ScoreResult(**result))


@router.get("/{attempt_id}", response_model=DataResponse[AttemptOut], summary="Get attempt details")
async def get_attempt(attempt_id: int, principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    attempt = await AttemptService(db).get_attempt(attempt_id, principal)
    return DataResponse[AttemptOut](data=AttemptOut.model_validate(attempt))

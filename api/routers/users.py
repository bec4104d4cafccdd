from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas import (
    AttemptOut,
    AuthResponse,
    DataResponse,
    ListResponse,
    LoginRequest,
    PasswordChange,
    QuizOut,
    UserCreate,
    UserOut,
    UserUpdate,
)
from core.security import Principal, create_token, get_current_principal
from db.session import get_db
from services.quiz_service import QuizService
from services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


def _auth_response(user) -> AuthResponse:
    return AuthResponse(token=create_token(user.id), user=UserOut.model_validate(user))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED, summary="Register a new user")
async def register_user(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    user = await UserService(db).register(payload.username, payload.email, payload.password, payload.bio)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse, summary="Log in with email and password")
async def login_user(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await UserService(db).authenticate(payload.email, payload.password)
    return _auth_response(user)


@router.get("/me", response_model=DataResponse[UserOut], summary="Current user profile")
async def get_me(principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    service = UserService(db)
    user = await service.get_user(principal.id)
    # Counters are written with bulk UPDATEs, so re-read the row
    await db.refresh(user)
    return DataResponse[UserOut](data=UserOut.model_validate(user))


@router.put("/me", response_model=DataResponse[UserOut], summary="Update profile")
async def update_profile(
    payload: UserUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).update_profile(principal.id, **payload.model_dump(exclude_unset=True))
    return DataResponse[UserOut](data=UserOut.model_validate(user))


@router.put("/changepassword", response_model=AuthResponse, summary="Change password")
async def change_password(
    payload: PasswordChange,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).change_password(principal.id, payload.current_password, payload.new_password)
    return _auth_response(user)


@router.get("/quizzes", response_model=ListResponse[QuizOut], summary="Quizzes created by the current user")
async def get_my_quizzes(principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    quizzes = await QuizService(db).get_user_quizzes(principal.id)
    items = [QuizOut.model_validate(q) for q in quizzes]
    return ListResponse[QuizOut](count=len(items), data=items)


@router.get("/attempts", response_model=ListResponse[AttemptOut], summary="Attempts made by the current user")
async def get_my_attempts(principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    attempts = await UserService(db).get_user_attempts(principal.id)
    items = [AttemptOut.model_validate(a) for a in attempts]
    return ListResponse[AttemptOut](count=len(items), data=items)

from datetime import datetime
from typing import Any, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from core.config import settings

T = TypeVar("T")

Difficulty = Literal["easy", "medium", "hard"]


# === Envelopes ===

class DataResponse(BaseModel, Generic[T]):
    success: bool = Field(default=True, description="Operation status")
    data: T


class ListResponse(BaseModel, Generic[T]):
    success: bool = True
    count: int = Field(..., description="Number of items in data")
    data: List[T]


class SuccessResponse(BaseModel):
    """Generic success response."""
    success: bool = True


class ErrorResponse(BaseModel):
    success: bool = False
    message: str = Field(..., description="Human readable failure reason")


# === Users ===

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    bio: Optional[str] = Field(None, max_length=500)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = Field(None, max_length=500)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=128)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: str
    bio: Optional[str] = None
    avatar: Optional[str] = None
    quizzes_taken: int
    quizzes_created: int
    last_login: Optional[datetime] = None
    created_at: datetime


class AuthResponse(BaseModel):
    success: bool = True
    token: str = Field(..., description="Send as 'Authorization: Bearer <token>' or 'X-Auth-Token'")
    user: UserOut


# === Quizzes ===

class QuestionIn(BaseModel):
    """A single multiple-choice question."""
    text: str = Field(..., max_length=1000, examples=["What is 2+2?"])
    choices: List[str] = Field(..., description="Answer choices (2-10 items)", min_length=2, max_length=10)
    right_answer: int = Field(..., description="Index of the correct choice (0-based)", ge=0)
    explanation: Optional[str] = Field(None, max_length=2000)
    points: int = Field(settings.DEFAULT_QUESTION_POINTS, ge=1)
    difficulty: Difficulty = "medium"

    @model_validator(mode="after")
    def right_answer_in_range(self):
        if self.right_answer >= len(self.choices):
            raise ValueError("right_answer must point at one of the choices")
        return self


class QuestionUpdate(BaseModel):
    text: Optional[str] = Field(None, max_length=1000)
    choices: Optional[List[str]] = Field(None, min_length=2, max_length=10)
    right_answer: Optional[int] = Field(None, ge=0)
    explanation: Optional[str] = Field(None, max_length=2000)
    points: Optional[int] = Field(None, ge=1)
    difficulty: Optional[Difficulty] = None


class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str
    choices: List[str]
    right_answer: int
    explanation: Optional[str] = None
    points: int
    difficulty: str


class QuizCreate(BaseModel):
    title: str = Field(..., max_length=255, examples=["Geography Quiz"])
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    time_limit: Optional[int] = Field(None, description="Minutes", ge=1)
    passing_score: int = Field(settings.DEFAULT_PASSING_SCORE, description="Percentage needed to pass", ge=0, le=100)
    shuffle_questions: bool = False
    is_public: bool = True
    questions: List[QuestionIn] = Field(default_factory=list)


class QuizUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    time_limit: Optional[int] = Field(None, ge=1)
    passing_score: Optional[int] = Field(None, ge=0, le=100)
    shuffle_questions: Optional[bool] = None
    is_public: Optional[bool] = None
    featured: Optional[bool] = Field(None, description="Admins only")


class QuizSummary(BaseModel):
    """Listing entry: quiz settings and stats, no questions."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    creator_id: int
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    time_limit: Optional[int] = None
    passing_score: int
    is_public: bool
    featured: bool
    attempts: int
    avg_score: float
    question_count: int
    created_at: datetime


class QuizOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    creator_id: int
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    time_limit: Optional[int] = None
    passing_score: int
    shuffle_questions: bool
    is_public: bool
    featured: bool
    attempts: int
    avg_score: float
    created_at: datetime
    questions: List[QuestionOut]


# === Attempts ===

class AttemptQuestionView(BaseModel):
    """A question as the learner sees it: no right answer, no explanation."""
    id: int
    text: str
    choices: List[str]
    points: int
    difficulty: str


class AttemptQuizView(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    time_limit: Optional[int] = None
    questions: List[AttemptQuestionView]


class AttemptStartResponse(BaseModel):
    success: bool = True
    attempt_id: int
    data: AttemptQuizView


class AnswerIn(BaseModel):
    # Loosely typed on purpose: unknown or malformed ids are dropped during scoring
    question_id: Any = Field(None, description="Id of the question being answered")
    selected_choice: Any = Field(None, description="Index of the chosen answer")
    time_taken: Optional[float] = Field(None, description="Seconds spent on the question", ge=0)


class SubmitRequest(BaseModel):
    answers: List[AnswerIn] = Field(default_factory=list)


class ScoreResult(BaseModel):
    attempt_id: int
    total_score: int
    percentage_score: int
    passed: bool
    total_questions: int
    answered_correctly: int
    time_taken: int
    feedback: str


class AnsweredQuestionOut(BaseModel):
    question_id: Any
    selected_choice: Any = None
    is_correct: bool
    points_earned: int
    time_taken: float = 0


class AttemptQuizRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    category: Optional[str] = None


class AttemptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    quiz_id: Optional[int] = None
    status: str
    start_time: datetime
    finish_time: Optional[datetime] = None
    total_time_taken: int
    answers: List[AnsweredQuestionOut]
    total_score: int
    percentage_score: int
    passed: bool
    timed_out: bool
    quiz: Optional[AttemptQuizRef] = Field(None, description="Null once the quiz has been deleted")

"""
Pytest configuration and fixtures for QuizHost tests.
"""
import sys
import os
import pytest
import pytest_asyncio

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("ATTEMPT_TTL_SECONDS", "0")
os.environ.setdefault("SCORING_BASIS", "live")

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from models.base import Base
from models.user import User
from models.quiz import Quiz, Question  # noqa: F401
from models.attempt import Attempt  # noqa: F401
from core.security import Principal, hash_password
from services.quiz_service import QuizService


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def _create_user(db, username: str, role: str = "user") -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        hashed_password=hash_password("secret123"),
        role=role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def as_principal(user: User) -> Principal:
    return Principal(id=user.id, role=user.role)


@pytest_asyncio.fixture
async def owner(db):
    return await _create_user(db, "owner")


@pytest_asyncio.fixture
async def learner(db):
    return await _create_user(db, "learner")


@pytest_asyncio.fixture
async def stranger(db):
    return await _create_user(db, "stranger")


@pytest_asyncio.fixture
async def admin(db):
    return await _create_user(db, "admin", role="admin")


@pytest.fixture
def sample_questions():
    """Two questions worth 10 and 20 points, right answers 0 and 1"""
    return [
        {
            "text": "What is 2+2?",
            "choices": ["4", "5", "6"],
            "right_answer": 0,
            "explanation": "Basic arithmetic",
            "points": 10,
            "difficulty": "easy",
        },
        {
            "text": "What is the capital of Uzbekistan?",
            "choices": ["Samarkand", "Tashkent", "Bukhara", "Khiva"],
            "right_answer": 1,
            "explanation": "Tashkent has been the capital since 1930",
            "points": 20,
            "difficulty": "medium",
        },
    ]


@pytest_asyncio.fixture
async def sample_quiz(db, owner, sample_questions):
    return await QuizService(db).create_quiz(
        as_principal(owner),
        {"title": "Warm-up", "category": "general", "passing_score": 50},
        sample_questions,
    )


@pytest_asyncio.fixture
async def five_point_quiz(db, owner):
    """Five 10-point questions, right answer always 0: each correct answer is worth 20%"""
    questions = [
        {"text": f"Question {i}", "choices": ["yes", "no"], "right_answer": 0, "points": 10}
        for i in range(5)
    ]
    return await QuizService(db).create_quiz(as_principal(owner), {"title": "Five", "passing_score": 60}, questions)


@pytest_asyncio.fixture
async def client(session_factory):
    from api.main import app
    from db.session import get_db

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

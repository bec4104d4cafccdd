from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from core.config import settings

engine_kwargs = {
    "echo": False,  # Disable echo in prod for performance
    "pool_pre_ping": True,
    "future": True,
}

# SQLite (local runs, tests) does not take pool sizing arguments
if not settings.DATABASE_URL.startswith("sqlite"):
    engine_kwargs.update(
        pool_recycle=3600,
        pool_size=20,       # Base connections
        max_overflow=10,    # Burst connections
    )

# PostgreSQL driver for async operations is asyncpg
engine = create_async_engine(settings.DATABASE_URL, **engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

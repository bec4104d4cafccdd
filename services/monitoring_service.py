from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from core.logger import logger
from core.config import settings
from models.attempt import Attempt, STATUS_STARTED
from db.session import AsyncSessionLocal
from services.attempt_service import AttemptService

async def expire_stale_attempts(
    session_factory: async_sessionmaker = AsyncSessionLocal,
    ttl_seconds: Optional[int] = None,
) -> int:
    """
    Periodic task: auto-fail attempts left 'started' longer than the TTL.

    Each stale attempt goes through the regular completion path with no
    answers, so it scores 0 and still counts towards the quiz aggregates.
    Returns the number of attempts expired.
    """
    ttl = settings.ATTEMPT_TTL_SECONDS if ttl_seconds is None else ttl_seconds
    if ttl <= 0:
        return 0

    threshold = datetime.utcnow() - timedelta(seconds=ttl)
    logger.debug("Starting stale attempt scan...", threshold=threshold.isoformat())

    expired = 0
    async with session_factory() as db:
        result = await db.execute(
            select(Attempt.id).filter(
                Attempt.status == STATUS_STARTED,
                Attempt.start_time < threshold
            )
        )
        stale_ids = list(result.scalars().all())
        if not stale_ids:
            return 0

        logger.info(f"Monitor: Found {len(stale_ids)} stale attempts")
        service = AttemptService(db)
        for attempt_id in stale_ids:
            try:
                if await service.expire_attempt(attempt_id):
                    expired += 1
            except Exception as e:
                await db.rollback()
                logger.error(f"Monitor: Error expiring attempt {attempt_id}", error=str(e))

    logger.info("Stale attempt scan completed", expired=expired)
    return expired

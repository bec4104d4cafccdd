import asyncio
import uvicorn
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from core.config import settings
from core.logger import setup_logging, logger
from services.monitoring_service import expire_stale_attempts

def start_scheduler() -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone="UTC")

    # Stale attempt sweeper, only when a TTL is configured
    if settings.ATTEMPT_TTL_SECONDS > 0:
        scheduler.add_job(
            expire_stale_attempts,
            trigger="interval",
            seconds=settings.ATTEMPT_SWEEP_INTERVAL_SECONDS,
            id=settings.ATTEMPT_SWEEP_JOB_ID,
            replace_existing=True
        )
        logger.info("Attempt sweeper scheduled", ttl=settings.ATTEMPT_TTL_SECONDS,
                    interval=settings.ATTEMPT_SWEEP_INTERVAL_SECONDS)

    scheduler.start()
    return scheduler

async def main():
    # Setup structured logging
    setup_logging()

    scheduler = start_scheduler()

    from api.main import app
    config = uvicorn.Config(app, host=settings.API_HOST, port=settings.API_PORT, log_level="info")
    server = uvicorn.Server(config)

    logger.info("Starting QuizHost API...", env=settings.ENV, scoring_basis=settings.SCORING_BASIS)
    try:
        await server.serve()
    finally:
        scheduler.shutdown(wait=False)

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logger.info("Application stopped.")

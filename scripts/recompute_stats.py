import asyncio
import sys
import os

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from db.session import AsyncSessionLocal
from services.stats_service import StatsService
from core.logger import setup_logging, logger

async def recompute_statistics():
    print("⚠️  This will REBUILD quiz attempt counts and average scores from completed attempts.")
    confirm = input("Type 'CONFIRM' to proceed: ")

    if confirm != "CONFIRM":
        print("Operation cancelled.")
        return

    async with AsyncSessionLocal() as session:
        try:
            count = await StatsService(session).recompute_all()
            print(f"✅ Recomputed statistics for {count} quizzes.")
        except Exception as e:
            await session.rollback()
            print(f"❌ Error recomputing statistics: {e}")
            logger.error(f"Error recomputing statistics: {e}")

if __name__ == "__main__":
    setup_logging()
    asyncio.run(recompute_statistics())

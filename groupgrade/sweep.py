# groupgrade/sweep.py
"""Run the pressure update once: `python -m groupgrade.sweep`.

Scheduling (cron, a platform scheduler) is left to the deployment.
"""
import asyncio
import logging
from groupgrade.config import settings
from groupgrade.database import AsyncSessionLocal, engine
from groupgrade.services.pressure import update_all_pressure_scores
import groupgrade.models  # registers every table on Base.metadata

logger = logging.getLogger("groupgrade.sweep")

async def run_sweep():
    try:
        async with AsyncSessionLocal() as db:
            summary = await update_all_pressure_scores(db)
    finally:
        await engine.dispose()
    logger.info("Pressure sweep done: %d projects, %d users, %d overloaded",
                summary.projects, summary.users, summary.overloaded)
    return summary

if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    asyncio.run(run_sweep())

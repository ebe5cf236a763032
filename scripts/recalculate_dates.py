"""
Run the cancellation-date recalculation once, outside the HTTP API.
Run from the project root: python -m scripts.recalculate_dates
Safe to re-run; results only change when the date changes.
"""
import asyncio
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from vertragsdb.database import AsyncSessionLocal, engine
from vertragsdb.logging_config import setup_logging
from vertragsdb.services.recalculation_service import recalculate_cancellation_dates


async def main() -> int:
    setup_logging()
    async with AsyncSessionLocal() as db:
        outcome = await recalculate_cancellation_dates(db)
        await db.commit()
    await engine.dispose()

    print(
        f"Contracts: {outcome.total}  updated: {outcome.updated}  "
        f"cleared: {outcome.cleared}  failed: {outcome.failed}"
    )
    return 1 if outcome.failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

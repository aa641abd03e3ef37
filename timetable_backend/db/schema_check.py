import asyncio
import logging
from typing import List

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine

from timetable_backend.core.config import settings
from timetable_backend.core.logging import setup_logging
from timetable_backend.core import models  # noqa: F401  (registers tables on Base.metadata)
from timetable_backend.db.session import Base, engine

logger = logging.getLogger(__name__)


async def ensure_tables(db_engine: AsyncEngine) -> List[str]:
    """Create any missing tables. Existing tables are left untouched. Returns the created table names."""
    async with db_engine.begin() as conn:
        existing = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))
        missing = [name for name in Base.metadata.tables if name not in existing]
        await conn.run_sync(Base.metadata.create_all)

    if missing:
        logger.info("Created missing tables: %s", ", ".join(missing))
    else:
        logger.info("All required tables already exist in the database.")
    return missing


async def main() -> None:
    setup_logging(environment=settings.environment, level=settings.log_level)
    await ensure_tables(engine)


if __name__ == "__main__":
    asyncio.run(main())

"""Create any missing tables in the configured database and report what was created.

Run once against a fresh database:
  DATABASE_URL=postgresql+asyncpg://... python -m app.db.schema_check
"""
import asyncio
from typing import List

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine

from app.db import base as _models  # noqa: F401
from app.core.app_logger import get_logger, setup_logging
from app.db.session import Base, engine

logger = get_logger("schema_check")


async def ensure_tables(db_engine: AsyncEngine) -> List[str]:
    """
    Ensure that every mapped table exists in the connected database.
    Returns the names of the tables that had to be created.
    """
    async with db_engine.begin() as conn:
        existing = set(await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names()))
        # sorted_tables is in FK dependency order: users before teachers before school_classes, ...
        missing = [table.name for table in Base.metadata.sorted_tables if table.name not in existing]
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    if missing:
        logger.info("Created missing tables: %s", ", ".join(missing))
    else:
        logger.info("All tables already exist in the database.")
    return missing


async def main() -> None:
    setup_logging()
    await ensure_tables(engine)


if __name__ == "__main__":
    asyncio.run(main())

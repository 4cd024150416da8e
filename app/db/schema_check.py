import asyncio
from typing import List

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine

import app.auth.models  # noqa: F401  (registers users/user_roles on Base.metadata)
import app.core.models  # noqa: F401
from app.core.logger import log
from app.db.session import Base, engine


def _missing_tables(sync_conn) -> List[str]:
    existing = set(inspect(sync_conn).get_table_names())
    return [t.name for t in Base.metadata.sorted_tables if t.name not in existing]


async def ensure_tables(db_engine: AsyncEngine) -> List[str]:
    """
    Ensure every ledger table exists in the connected database.
    Missing tables are created in dependency order; existing ones are left untouched.
    """
    async with db_engine.begin() as conn:
        missing = await conn.run_sync(_missing_tables)
        await conn.run_sync(Base.metadata.create_all)

    if missing:
        log.info("Created missing tables: " + ", ".join(missing))
    else:
        log.info("All required tables already exist in the database.")
    return missing


async def main() -> None:
    await ensure_tables(engine)


if __name__ == "__main__":
    asyncio.run(main())

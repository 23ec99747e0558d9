import asyncio
import logging

from core.database import engine
from models.base import Base
from models.user import User  # noqa: F401
from models.event import Event  # noqa: F401
from models.event_like import EventLike  # noqa: F401

log = logging.getLogger(__name__)


async def async_reset_database():
    tables = ", ".join(Base.metadata.tables)
    log.info("Dropping tables: %s", tables)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all, checkfirst=True)

    log.info("Recreating tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    await engine.dispose()
    log.info("Database schema has been reset.")


def reset_database():
    asyncio.run(async_reset_database())


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    reset_database()

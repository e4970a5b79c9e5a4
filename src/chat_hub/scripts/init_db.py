"""Create all tables: python -m chat_hub.scripts.init_db"""
from __future__ import annotations

import asyncio
import logging

from chat_hub.config import settings
from chat_hub.infrastructure.db import models  # noqa: F401  registers tables
from chat_hub.infrastructure.db.base import Base
from chat_hub.infrastructure.db.session import engine
from chat_hub.log_config import configure_logging

logger = logging.getLogger(__name__)


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    logger.info("Created %d tables", len(Base.metadata.tables))


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(init_db())


if __name__ == "__main__":
    main()

import logging
from pathlib import Path

import asyncpg

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("models.sql")


async def create_pool(database_url, min_size=1, max_size=10):
    return await asyncpg.create_pool(database_url, min_size=min_size, max_size=max_size)


async def init_db(pool):
    schema = SCHEMA_PATH.read_text(encoding="utf-8")
    async with pool.acquire() as conn:
        await conn.execute(schema)
    logger.info("Database tables created/verified")

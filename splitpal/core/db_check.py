import asyncio
import logging
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine
from splitpal.core.config import settings
from splitpal.db.session import engine

logger = logging.getLogger(__name__)


async def wait_for_db(bind: AsyncEngine = engine, retries: int = settings.DB_CONNECT_RETRIES, delay: float = 2):
    for i in range(retries):
        try:
            async with bind.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("SplitPal : Database connected")
            return
        except Exception as e:
            logger.warning(
                "SplitPal : Database not ready | [ %s/%s ] %s → retrying...",
                i + 1, retries, e,
            )
            await asyncio.sleep(delay)

    raise RuntimeError("Database unreachable after retries")

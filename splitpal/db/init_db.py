from sqlalchemy.ext.asyncio import AsyncEngine
from splitpal.db.session import Base, engine

# registers every table on Base.metadata
from splitpal.models import group, member, expense, expense_share, settlement  # noqa: F401


async def init_models(bind: AsyncEngine = engine):
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

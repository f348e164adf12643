import logging
from splitpal.db.session import engine
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from splitpal.models.group import Group
from splitpal.models.member import Member
from splitpal.models.expense import Expense
from splitpal.models.settlement import Settlement

logger = logging.getLogger(__name__)

async def check_db_service():
    try:
        async with engine.connect() as conn:
            await conn.exec_driver_sql("SELECT 1")
        return {"db": True, "message": "Database is connected"}
    except Exception as e:
        logger.warning("Database health check failed: %s", e)
        return {"db": False, "error": str(e)}

async def system_health():
    return {
        "status": "ok"
    }

async def system_metrics(db: AsyncSession):
    groups_res = await db.execute(select(func.count(Group.id)))
    members_res = await db.execute(select(func.count(Member.id)))
    expenses_res = await db.execute(select(func.count(Expense.id)))
    settlements_res = await db.execute(select(func.count(Settlement.id)))

    return {
        "groups": groups_res.scalar(),
        "members": members_res.scalar(),
        "expenses": expenses_res.scalar(),
        "settlements": settlements_res.scalar()
    }

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from splitpal.db.session import async_session
from splitpal.db.data_source import DataSource, SqlDataSource
from splitpal.core.exceptions import NotFoundError
from sqlalchemy import select
from splitpal.models.group import Group
from splitpal.models.member import Member

async def get_db():
    async with async_session() as session:
        yield session

async def get_data_source(db: AsyncSession = Depends(get_db)) -> DataSource:
    return SqlDataSource(db)

async def ensure_group(db: AsyncSession, group_id: int) -> Group:
    group = await db.get(Group, group_id)

    if not group:
        raise NotFoundError(f"Group {group_id} not found")

    return group

async def fetch_member(db: AsyncSession, group_id: int, member_id: int) -> Member:
    q = select(Member).where(
        Member.group_id == group_id,
        Member.id == member_id
    )
    member = await db.scalar(q)

    if not member:
        raise NotFoundError(f"Member {member_id} not found in group {group_id}")

    return member

async def fetch_group_members(db: AsyncSession, group_id: int) -> dict[int, Member]:
    q = select(Member).where(Member.group_id == group_id).order_by(Member.id)
    res = await db.scalars(q)
    return {m.id: m for m in res.all()}

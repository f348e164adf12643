import logging
from typing import List
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from splitpal.core.dependencies import ensure_group, fetch_member, fetch_group_members
from splitpal.core.exceptions import LedgerIntegrityError, ValidationError
from splitpal.models.group import Group
from splitpal.models.member import Member
from splitpal.schemas.group import GroupDetailOut, GroupOut, GroupSummaryOut, MemberOut
from splitpal.services.expense_services import list_group_expenses

logger = logging.getLogger(__name__)


async def _commit(db: AsyncSession, what: str):
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Rolled back %s", what)
        raise LedgerIntegrityError(f"Could not save {what}") from e


async def create_group(db: AsyncSession, name: str) -> Group:
    name = (name or "").strip()
    if not name:
        raise ValidationError("name", "Group name is required")

    existing = await db.scalar(select(Group).where(Group.name == name))
    if existing:
        raise ValidationError("name", f"Group '{name}' already exists")

    group = Group(name=name)
    db.add(group)
    await _commit(db, "group")
    await db.refresh(group)

    logger.info("Group %s created: %s", group.id, group.name)
    return group


async def list_groups(db: AsyncSession) -> List[GroupSummaryOut]:
    q = (
        select(Group, func.count(Member.id).label("members_count"))
        .outerjoin(Member, Member.group_id == Group.id)
        .group_by(Group.id)
        .order_by(Group.id)
    )

    res = await db.execute(q)

    return [
        GroupSummaryOut(id=group.id, name=group.name, members_count=members_count)
        for group, members_count in res.all()
    ]


async def get_group_detail(db: AsyncSession, group_id: int) -> GroupDetailOut:
    group = await ensure_group(db, group_id)
    members = await fetch_group_members(db, group_id)
    expenses = await list_group_expenses(db, group_id)

    return GroupDetailOut(
        **GroupOut.model_validate(group).model_dump(),
        members=[MemberOut.model_validate(m) for m in members.values()],
        expenses=expenses,
    )


async def add_member(db: AsyncSession, group_id: int, name: str, upi_id: str | None = None) -> Member:
    await ensure_group(db, group_id)

    name = (name or "").strip()
    if not name:
        raise ValidationError("name", "Member name is required")

    member = Member(group_id=group_id, name=name, upi_id=(upi_id or "").strip() or None)
    db.add(member)
    await _commit(db, "member")
    await db.refresh(member)

    logger.info("Member %s added to group %s", member.id, group_id)
    return member


async def update_member_upi(db: AsyncSession, group_id: int, member_id: int, upi_id: str | None) -> Member:
    member = await fetch_member(db, group_id, member_id)

    # payment address is the only mutable member field
    member.upi_id = (upi_id or "").strip() or None
    await _commit(db, "member")
    await db.refresh(member)

    return member

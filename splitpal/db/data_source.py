"""
Ledger snapshot loading.

The balance routes never talk to the database directly. They receive a
``DataSource`` and ask it for a ``LedgerSnapshot``; a store that cannot be
reached raises ``DataSourceUnavailable`` instead of silently serving stale or
mock data.
"""
import logging
from typing import Dict, Protocol
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from splitpal.core.exceptions import DataSourceUnavailable, NotFoundError
from splitpal.models.expense import Expense
from splitpal.models.group import Group
from splitpal.models.member import Member
from splitpal.models.settlement import Settlement
from splitpal.schemas.settlements import PaymentStatus
from splitpal.schemas.snapshot import (
    LedgerSnapshot,
    SnapshotExpense,
    SnapshotMember,
    SnapshotSettlement,
    SnapshotShare,
)

logger = logging.getLogger(__name__)


class DataSource(Protocol):
    async def load_snapshot(self, group_id: int) -> LedgerSnapshot:
        ...


class SqlDataSource:
    """Reads one group's ledger through an open AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_snapshot(self, group_id: int) -> LedgerSnapshot:
        try:
            return await self._load(group_id)
        except (OperationalError, DBAPIError) as e:
            logger.error("Ledger store unreachable while loading group %s: %s", group_id, e)
            raise DataSourceUnavailable("Ledger store is unavailable") from e

    async def _load(self, group_id: int) -> LedgerSnapshot:
        group = await self.db.get(Group, group_id)
        if not group:
            raise NotFoundError(f"Group {group_id} not found")

        members_q = select(Member).where(Member.group_id == group_id).order_by(Member.id)
        members = (await self.db.scalars(members_q)).all()

        expenses_q = (
            select(Expense)
            .options(selectinload(Expense.shares))
            .where(Expense.group_id == group_id)
            .order_by(Expense.date.asc(), Expense.id.asc())
        )
        expenses = (await self.db.scalars(expenses_q)).all()

        # pending and failed payments have not moved any money yet
        settlements_q = (
            select(Settlement)
            .where(
                Settlement.group_id == group_id,
                Settlement.status == PaymentStatus.COMPLETED,
            )
            .order_by(Settlement.id.asc())
        )
        settlements = (await self.db.scalars(settlements_q)).all()

        return LedgerSnapshot(
            group_id=group_id,
            members=[
                SnapshotMember(id=m.id, name=m.name, upi_id=m.upi_id)
                for m in members
            ],
            expenses=[
                SnapshotExpense(
                    id=e.id,
                    description=e.description,
                    amount=e.amount,
                    payer_id=e.payer_id,
                    date=e.date,
                    shares=[
                        SnapshotShare(member_id=s.member_id, amount=s.amount)
                        for s in e.shares
                    ],
                )
                for e in expenses
            ],
            settlements=[
                SnapshotSettlement(
                    id=s.id,
                    payer_id=s.payer_id,
                    receiver_id=s.receiver_id,
                    amount=s.amount,
                    date=s.date,
                )
                for s in settlements
            ],
        )


class InMemoryDataSource:
    """Serves prepared snapshots, for demos and tests."""

    def __init__(self, snapshots: Dict[int, LedgerSnapshot] | None = None, available: bool = True):
        self.snapshots = snapshots or {}
        self.available = available

    async def load_snapshot(self, group_id: int) -> LedgerSnapshot:
        if not self.available:
            raise DataSourceUnavailable("Ledger store is unavailable")

        snapshot = self.snapshots.get(group_id)
        if snapshot is None:
            raise NotFoundError(f"Group {group_id} not found")

        return snapshot

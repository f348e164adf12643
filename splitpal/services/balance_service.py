"""
Balance engine.

Turns a group's ledger snapshot (members, expenses with shares, completed
settlements) into a per-member position:

- ``paid``: the payer's own shares on expenses they paid
- ``gets_back``: shares other members still owe this member
- ``owes``: one entry per outstanding share, oldest expense first

Everything here is pure; the async helpers at the bottom only load the
snapshot through a ``DataSource`` first.
"""
import logging
from decimal import Decimal
from typing import Dict, Iterable
from splitpal.core.exceptions import InvalidReferenceError, SelfSettlementError
from splitpal.core.utils import TOLERANCE, is_settled, qround, simplify_debts
from splitpal.db.data_source import DataSource
from splitpal.schemas.balances import (
    BalanceMember,
    GroupBalancesOut,
    MemberBalance,
    OwedEntry,
    SimplifiedBalancesOut,
)
from splitpal.schemas.snapshot import (
    LedgerSnapshot,
    SnapshotExpense,
    SnapshotMember,
    SnapshotSettlement,
)

logger = logging.getLogger(__name__)

OVERPAYMENT_DESCRIPTION = "Settlement overpayment"


def compute_balances(
    members: Iterable[SnapshotMember],
    expenses: Iterable[SnapshotExpense],
    settlements: Iterable[SnapshotSettlement],
) -> Dict[int, MemberBalance]:
    balances: Dict[int, MemberBalance] = {m.id: MemberBalance() for m in members}

    # sorted() is stable, so same-day expenses keep their input order
    for expense in sorted(expenses, key=lambda e: e.date):
        _apply_expense(balances, expense)

    for settlement in settlements:
        _apply_settlement(balances, settlement)

    return balances


def compute_snapshot_balances(snapshot: LedgerSnapshot) -> Dict[int, MemberBalance]:
    return compute_balances(snapshot.members, snapshot.expenses, snapshot.settlements)


def net_balances(balances: Dict[int, MemberBalance]) -> Dict[int, Decimal]:
    """Positive: is owed money overall. Negative: owes money overall."""
    return {member_id: bal.net for member_id, bal in balances.items()}


def _apply_expense(balances: Dict[int, MemberBalance], expense: SnapshotExpense):
    if expense.payer_id not in balances:
        raise InvalidReferenceError("expense", expense.id, expense.payer_id)

    payer = balances[expense.payer_id]

    for share in expense.shares:
        if share.member_id not in balances:
            raise InvalidReferenceError("expense share", expense.id, share.member_id)

        if share.member_id == expense.payer_id:
            # the total is never credited, only the payer's own share
            payer.paid += share.amount
            continue

        balances[share.member_id].owes.append(
            OwedEntry(
                to=expense.payer_id,
                amount=share.amount,
                description=expense.description,
                date=expense.date,
            )
        )
        payer.gets_back += share.amount


def _apply_settlement(balances: Dict[int, MemberBalance], settlement: SnapshotSettlement):
    for member_id in (settlement.payer_id, settlement.receiver_id):
        if member_id not in balances:
            raise InvalidReferenceError("settlement", settlement.id, member_id)

    if settlement.payer_id == settlement.receiver_id:
        raise SelfSettlementError(settlement.id)

    payer = balances[settlement.payer_id]
    receiver = balances[settlement.receiver_id]
    remaining = settlement.amount

    # Oldest debts to this receiver are cleared first. A residual under
    # TOLERANCE counts as paid and is written off on both sides.
    kept = []
    for entry in payer.owes:
        if entry.to != settlement.receiver_id or remaining < TOLERANCE:
            kept.append(entry)
            continue

        applied = min(entry.amount, remaining)
        remaining -= applied
        entry.amount -= applied

        if entry.amount < TOLERANCE:
            receiver.gets_back -= applied + entry.amount
        else:
            receiver.gets_back -= applied
            kept.append(entry)

    payer.owes = kept

    # Paying more than was owed flips the direction: the receiver now owes
    # the excess back.
    if remaining >= TOLERANCE:
        receiver.owes.append(
            OwedEntry(
                to=settlement.payer_id,
                amount=remaining,
                description=OVERPAYMENT_DESCRIPTION,
                date=settlement.date,
            )
        )
        payer.gets_back += remaining


async def get_group_balances(source: DataSource, group_id: int) -> GroupBalancesOut:
    snapshot = await source.load_snapshot(group_id)
    balances = compute_snapshot_balances(snapshot)

    logger.debug(
        "Computed balances for group %s: %d members, %d expenses, %d settlements",
        group_id, len(snapshot.members), len(snapshot.expenses), len(snapshot.settlements),
    )

    return GroupBalancesOut(
        members=[
            BalanceMember(id=m.id, name=m.name, upi_id=m.upi_id)
            for m in snapshot.members
        ],
        balances=balances,
    )


async def get_simplified_balances(source: DataSource, group_id: int) -> SimplifiedBalancesOut:
    snapshot = await source.load_snapshot(group_id)
    net = net_balances(compute_snapshot_balances(snapshot))

    return SimplifiedBalancesOut(
        net={member_id: float(qround(amount)) for member_id, amount in net.items()},
        transfers=simplify_debts(net),
        settled=is_settled(net),
    )

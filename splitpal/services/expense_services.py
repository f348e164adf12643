import logging
from decimal import Decimal
from typing import List, Tuple
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from splitpal.core.dependencies import ensure_group, fetch_group_members
from splitpal.core.exceptions import LedgerIntegrityError, ValidationError
from splitpal.core.utils import CENTS, MAX_AMOUNT, TOLERANCE, qround
from splitpal.models.expense import Expense
from splitpal.models.expense_share import ExpenseShare
from splitpal.schemas.expense import ExpenseCreate, ExpenseOut, ShareOut

logger = logging.getLogger(__name__)


def split_equally(amount: Decimal, member_ids: List[int]) -> List[Tuple[int, Decimal]]:
    """
    Split ``amount`` into per-member cent amounts that add up exactly.

    Leftover cents go one each to the first members in the list, so
    100.00 over three members gives 33.34, 33.33, 33.33.
    """
    cents = int(amount / CENTS)
    base, remainder = divmod(cents, len(member_ids))

    return [
        (member_id, (base + (1 if i < remainder else 0)) * CENTS)
        for i, member_id in enumerate(member_ids)
    ]


def build_shares(data: ExpenseCreate, group_member_ids) -> List[Tuple[int, Decimal]]:
    if data.strategy == "exact":
        field = "splits"
        member_ids = [s.member_id for s in data.splits]
    else:
        field = "participants"
        member_ids = list(data.participants)

    if not member_ids:
        raise ValidationError(field, "At least one participant is required")

    if len(member_ids) != len(set(member_ids)):
        raise ValidationError(field, "Duplicate members found in split")

    unknown = [m for m in member_ids if m not in group_member_ids]
    if unknown:
        raise ValidationError(field, f"Members {unknown} are not in this group")

    if data.strategy == "equal":
        return split_equally(data.amount, member_ids)

    if any(s.amount < 0 for s in data.splits):
        raise ValidationError("splits", "Split amounts must not be negative")

    if any(s.amount > MAX_AMOUNT for s in data.splits):
        raise ValidationError("splits", f"Split amounts must not exceed {MAX_AMOUNT}")

    if any(s.amount != qround(s.amount) for s in data.splits):
        raise ValidationError("splits", "Split amounts can have at most 2 decimal places")

    total_split = sum((s.amount for s in data.splits), Decimal("0"))
    if abs(total_split - data.amount) >= TOLERANCE:
        raise ValidationError(
            "splits",
            f"Split total ({total_split}) must equal expense amount ({data.amount})"
        )

    return [(s.member_id, s.amount) for s in data.splits]


def validate_expense(data: ExpenseCreate, group_members) -> List[Tuple[int, Decimal]]:
    if not data.description or not data.description.strip():
        raise ValidationError("description", "Description is required")

    if data.amount <= 0:
        raise ValidationError("amount", "Amount must be greater than 0")

    if data.amount > MAX_AMOUNT:
        raise ValidationError("amount", f"Amount must not exceed {MAX_AMOUNT}")

    if data.amount != qround(data.amount):
        raise ValidationError("amount", "Amount can have at most 2 decimal places")

    if data.paid_by not in group_members:
        raise ValidationError("paid_by", "Payer is not a member of the group")

    return build_shares(data, group_members)


def to_expense_out(expense: Expense, payer_name: str | None = None) -> ExpenseOut:
    return ExpenseOut(
        id=expense.id,
        group_id=expense.group_id,
        description=expense.description,
        amount=float(expense.amount),
        payer_id=expense.payer_id,
        payer_name=payer_name,
        date=expense.date,
        created_at=expense.created_at,
        shares=[
            ShareOut(member_id=s.member_id, amount=float(s.amount))
            for s in expense.shares
        ],
    )


async def create_expense(db: AsyncSession, group_id: int, data: ExpenseCreate) -> ExpenseOut:
    await ensure_group(db, group_id)
    members = await fetch_group_members(db, group_id)

    shares = validate_expense(data, members)

    expense = Expense(
        group_id=group_id,
        payer_id=data.paid_by,
        amount=data.amount,
        description=data.description.strip(),
    )
    if data.date:
        expense.date = data.date

    # expense and shares land in one commit or not at all
    expense.shares = [
        ExpenseShare(member_id=member_id, amount=amount)
        for member_id, amount in shares
    ]

    try:
        db.add(expense)
        await db.flush()
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Rolled back expense for group %s", group_id)
        raise LedgerIntegrityError("Could not save expense") from e

    await db.refresh(expense, attribute_names=["shares", "created_at"])

    logger.info(
        "Expense %s created in group %s: %s split %s ways",
        expense.id, group_id, expense.amount, len(shares),
    )

    return to_expense_out(expense, members[data.paid_by].name)


async def list_group_expenses(db: AsyncSession, group_id: int) -> List[ExpenseOut]:
    await ensure_group(db, group_id)

    q = (
        select(Expense)
        .options(selectinload(Expense.shares), selectinload(Expense.payer))
        .where(Expense.group_id == group_id)
        .order_by(Expense.date.desc(), Expense.id.desc())
    )

    res = await db.scalars(q)

    return [
        to_expense_out(expense, expense.payer.name)
        for expense in res.all()
    ]

import logging
from decimal import Decimal
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from splitpal.core.dependencies import ensure_group, fetch_group_members
from splitpal.core.exceptions import (
    InvalidStatusTransition,
    LedgerIntegrityError,
    NotFoundError,
    ValidationError,
)
from splitpal.core.utils import MAX_AMOUNT, qround
from splitpal.models.settlement import Settlement
from splitpal.schemas.settlements import (
    PaymentStatus,
    SettlementCreate,
    SettlementHistoryOut,
    SettlementOut,
)

logger = logging.getLogger(__name__)


def validate_settlement(paid_by: int, paid_to: int, amount: Decimal, group_members):
    if paid_by == paid_to:
        raise ValidationError("paid_to", "Cannot settle with yourself")

    if amount <= 0:
        raise ValidationError("amount", "Amount must be greater than 0")

    if amount > MAX_AMOUNT:
        raise ValidationError("amount", f"Amount must not exceed {MAX_AMOUNT}")

    if amount != qround(amount):
        raise ValidationError("amount", "Amount can have at most 2 decimal places")

    if paid_by not in group_members:
        raise ValidationError("paid_by", "Payer is not a member of the group")

    if paid_to not in group_members:
        raise ValidationError("paid_to", "Receiver is not a member of the group")


async def add_settlement(
    db: AsyncSession,
    group_id: int,
    data: SettlementCreate,
    status: PaymentStatus = PaymentStatus.COMPLETED,
) -> Settlement:
    await ensure_group(db, group_id)
    members = await fetch_group_members(db, group_id)

    validate_settlement(data.paid_by, data.paid_to, data.amount, members)

    settlement = Settlement(
        group_id=group_id,
        payer_id=data.paid_by,
        receiver_id=data.paid_to,
        amount=data.amount,
        status=status,
    )
    if data.date:
        settlement.date = data.date

    try:
        db.add(settlement)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Rolled back settlement for group %s", group_id)
        raise LedgerIntegrityError("Could not save settlement") from e

    await db.refresh(settlement)

    logger.info(
        "Settlement %s recorded in group %s: %s -> %s %s (%s)",
        settlement.id, group_id, settlement.payer_id, settlement.receiver_id,
        settlement.amount, settlement.status.value,
    )

    return settlement


async def get_settlement_history(
    db: AsyncSession,
    group_id: int,
    page: int = 1,
    limit: int = 20,
) -> SettlementHistoryOut:
    await ensure_group(db, group_id)

    total = await db.scalar(
        select(func.count(Settlement.id)).where(Settlement.group_id == group_id)
    )

    q = (
        select(Settlement)
        .where(Settlement.group_id == group_id)
        .order_by(Settlement.created_at.desc(), Settlement.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )

    result = await db.scalars(q)

    return SettlementHistoryOut(
        settlements=[SettlementOut.model_validate(s) for s in result.all()],
        page=page,
        limit=limit,
        total=total or 0,
    )


async def update_settlement_status(
    db: AsyncSession,
    settlement_id: int,
    status: PaymentStatus,
    reference: str | None = None,
) -> Settlement:
    settlement = await db.get(Settlement, settlement_id)

    if not settlement:
        raise NotFoundError(f"Settlement {settlement_id} not found")

    values = {"status": status}
    if reference:
        values["reference"] = reference

    # only a pending payment can still change its outcome, checked by the UPDATE
    q = (
        update(Settlement)
        .where(
            Settlement.id == settlement_id,
            Settlement.status == PaymentStatus.PENDING,
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )

    try:
        result = await db.execute(q)
        if result.rowcount != 1:
            await db.rollback()
            await db.refresh(settlement)
            raise InvalidStatusTransition(
                f"Settlement {settlement_id} is already {settlement.status.value}"
            )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Rolled back status change for settlement %s", settlement_id)
        raise LedgerIntegrityError("Could not update settlement") from e

    await db.refresh(settlement)

    logger.info("Settlement %s marked %s", settlement_id, status.value)

    return settlement

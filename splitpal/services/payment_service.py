"""
UPI payment flow.

Starting a payment records a *pending* settlement and hands back a
``upi://pay`` deep link for the receiver. The external confirmation later
flips the settlement to completed or failed; only completed settlements are
counted by the balance engine.
"""
import logging
from decimal import Decimal
from urllib.parse import quote, urlencode
from sqlalchemy.ext.asyncio import AsyncSession
from splitpal.core.config import settings
from splitpal.core.dependencies import ensure_group, fetch_group_members
from splitpal.core.exceptions import ValidationError
from splitpal.core.utils import qround
from splitpal.schemas.payment import PaymentCreate, PaymentOut
from splitpal.schemas.settlements import PaymentStatus, SettlementCreate, SettlementOut
from splitpal.services.settlement_service import (
    add_settlement,
    update_settlement_status,
    validate_settlement,
)

logger = logging.getLogger(__name__)


def build_upi_link(
    upi_id: str,
    payee_name: str,
    amount: Decimal,
    note: str | None = None,
    currency: str = settings.DEFAULT_CURRENCY,
) -> str:
    if not upi_id:
        raise ValidationError("paid_to", "Receiver has no UPI id")

    params = {
        "pa": upi_id,
        "pn": payee_name,
        "am": str(qround(amount)),
        "cu": currency,
    }
    if note:
        params["tn"] = note

    return "upi://pay?" + urlencode(params, safe="@", quote_via=quote)


async def start_payment(db: AsyncSession, group_id: int, data: PaymentCreate) -> PaymentOut:
    await ensure_group(db, group_id)
    members = await fetch_group_members(db, group_id)

    validate_settlement(data.paid_by, data.paid_to, data.amount, members)

    payer = members[data.paid_by]
    receiver = members[data.paid_to]
    note = data.note or f"SplitPal settlement from {payer.name}"

    # build the link first so a receiver without a UPI id writes nothing
    link = build_upi_link(receiver.upi_id, receiver.name, data.amount, note)

    settlement = await add_settlement(
        db,
        group_id,
        SettlementCreate(paid_by=data.paid_by, paid_to=data.paid_to, amount=data.amount),
        status=PaymentStatus.PENDING,
    )

    logger.info("Payment started for settlement %s", settlement.id)

    return PaymentOut(settlement=SettlementOut.model_validate(settlement), upi_link=link)


async def confirm_payment(db: AsyncSession, settlement_id: int, reference: str):
    return await update_settlement_status(db, settlement_id, PaymentStatus.COMPLETED, reference)


async def fail_payment(db: AsyncSession, settlement_id: int):
    return await update_settlement_status(db, settlement_id, PaymentStatus.FAILED)

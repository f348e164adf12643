from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from splitpal.core.dependencies import get_db
from splitpal.schemas.payment import PaymentConfirm, PaymentCreate, PaymentOut
from splitpal.schemas.settlements import SettlementOut
from splitpal.services.payment_service import start_payment, confirm_payment, fail_payment

router = APIRouter()

@router.post("/groups/{group_id}/payments", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
async def pay_now(group_id: int, data: PaymentCreate, db: AsyncSession = Depends(get_db)):
    return await start_payment(db, group_id, data)

@router.post("/payments/{settlement_id}/confirm", response_model=SettlementOut)
async def confirm(settlement_id: int, data: PaymentConfirm, db: AsyncSession = Depends(get_db)):
    return await confirm_payment(db, settlement_id, data.reference)

@router.post("/payments/{settlement_id}/fail", response_model=SettlementOut)
async def fail(settlement_id: int, db: AsyncSession = Depends(get_db)):
    return await fail_payment(db, settlement_id)

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from splitpal.core.dependencies import get_db
from splitpal.schemas.settlements import SettlementCreate, SettlementHistoryOut, SettlementOut
from splitpal.services.settlement_service import add_settlement, get_settlement_history

router = APIRouter()

@router.post("/{group_id}/settlements", response_model=SettlementOut, status_code=status.HTTP_201_CREATED)
async def settle_up(group_id: int, data: SettlementCreate, db: AsyncSession = Depends(get_db)):
    return await add_settlement(db, group_id, data)

@router.get("/{group_id}/settlements", response_model=SettlementHistoryOut)
async def settlement_history(
    group_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await get_settlement_history(db, group_id, page, limit)

from fastapi import APIRouter, Depends
from splitpal.core.dependencies import get_data_source
from splitpal.db.data_source import DataSource
from splitpal.schemas.balances import GroupBalancesOut, SimplifiedBalancesOut
from splitpal.services.balance_service import get_group_balances, get_simplified_balances

router = APIRouter()

@router.get("/{group_id}/balances", response_model=GroupBalancesOut)
async def group_balances(group_id: int, source: DataSource = Depends(get_data_source)):
    return await get_group_balances(source, group_id)

@router.get("/{group_id}/balances/simplified", response_model=SimplifiedBalancesOut)
async def simplified_balances(group_id: int, source: DataSource = Depends(get_data_source)):
    return await get_simplified_balances(source, group_id)

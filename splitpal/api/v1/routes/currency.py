from decimal import Decimal
from fastapi import APIRouter, Depends, Query
from splitpal.schemas.currency import ConversionOut, CurrencyInfo
from splitpal.services.currency_service import SUPPORTED_CURRENCIES, CurrencyService, get_currency_service

router = APIRouter()

@router.get("/supported", response_model=dict[str, CurrencyInfo])
async def supported_currencies():
    return SUPPORTED_CURRENCIES

@router.get("/convert", response_model=ConversionOut)
async def convert(
    amount: Decimal,
    from_currency: str = Query(..., alias="from"),
    to_currency: str = Query(..., alias="to"),
    service: CurrencyService = Depends(get_currency_service),
):
    return await service.convert(amount, from_currency, to_currency)

from pydantic import BaseModel
from decimal import Decimal

class CurrencyInfo(BaseModel):
    name: str
    symbol: str
    decimals: int

class ConversionOut(BaseModel):
    original_amount: Decimal
    converted_amount: Decimal
    exchange_rate: Decimal
    from_currency: str
    to_currency: str
    formatted: str

from pydantic import BaseModel
from decimal import Decimal
from splitpal.schemas.settlements import SettlementOut

class PaymentCreate(BaseModel):
    paid_by: int
    paid_to: int
    amount: Decimal
    note: str | None = None

class PaymentOut(BaseModel):
    settlement: SettlementOut
    upi_link: str

class PaymentConfirm(BaseModel):
    reference: str

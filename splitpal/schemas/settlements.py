import enum
import datetime as dt
from pydantic import BaseModel
from decimal import Decimal
from typing import List

class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

class SettlementCreate(BaseModel):
    paid_by: int
    paid_to: int
    amount: Decimal
    date: dt.date | None = None

class SettlementOut(BaseModel):
    id: int
    group_id: int
    payer_id: int
    receiver_id: int
    amount: float
    date: dt.date
    status: PaymentStatus
    reference: str | None = None
    created_at: dt.datetime | None = None

    class Config:
        from_attributes = True

class SettlementHistoryOut(BaseModel):
    settlements: List[SettlementOut]
    page: int
    limit: int
    total: int

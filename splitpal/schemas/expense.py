from pydantic import BaseModel, Field
import datetime as dt
from decimal import Decimal
from typing import List, Literal

class ShareInput(BaseModel):
    member_id: int
    amount: Decimal

class ExpenseCreate(BaseModel):
    description: str
    amount: Decimal
    paid_by: int
    strategy: Literal["equal", "exact"] = "equal"
    # equal: split among participants; exact: use splits as given
    participants: List[int] = Field(default_factory=list)
    splits: List[ShareInput] = Field(default_factory=list)
    date: dt.date | None = None

class ShareOut(BaseModel):
    member_id: int
    amount: float

    class Config:
        from_attributes = True

class ExpenseOut(BaseModel):
    id: int
    group_id: int
    description: str
    amount: float
    payer_id: int
    payer_name: str | None = None
    date: dt.date
    created_at: dt.datetime | None = None
    shares: List[ShareOut] = Field(default_factory=list)

    class Config:
        from_attributes = True

import datetime as dt
from decimal import Decimal
from typing import List
from pydantic import BaseModel, Field


class SnapshotMember(BaseModel):
    id: int
    name: str
    upi_id: str | None = None


class SnapshotShare(BaseModel):
    member_id: int
    amount: Decimal = Field(ge=0)


class SnapshotExpense(BaseModel):
    id: int
    description: str
    amount: Decimal = Field(gt=0)
    payer_id: int
    date: dt.date
    shares: List[SnapshotShare] = Field(default_factory=list)


class SnapshotSettlement(BaseModel):
    id: int
    payer_id: int
    receiver_id: int
    amount: Decimal = Field(gt=0)
    date: dt.date = Field(default_factory=dt.date.today)


class LedgerSnapshot(BaseModel):
    """Everything the balance engine needs for one group, read in one go."""

    group_id: int | None = None
    members: List[SnapshotMember] = Field(default_factory=list)
    expenses: List[SnapshotExpense] = Field(default_factory=list)
    settlements: List[SnapshotSettlement] = Field(default_factory=list)

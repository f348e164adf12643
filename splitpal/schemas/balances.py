import datetime as dt
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List
from pydantic import AliasChoices, BaseModel, Field, field_serializer


def _cents(value: Decimal) -> float:
    return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class OwedEntry(BaseModel):
    to: int
    amount: Decimal
    description: str
    date: dt.date

    @field_serializer("amount", when_used="json")
    def serialize_amount(self, value: Decimal) -> float:
        return _cents(value)


class MemberBalance(BaseModel):
    paid: Decimal = Decimal("0")
    gets_back: Decimal = Field(
        default=Decimal("0"),
        validation_alias=AliasChoices("gets_back", "getsBack"),
        serialization_alias="getsBack",
    )
    owes: List[OwedEntry] = Field(default_factory=list)

    @field_serializer("paid", "gets_back", when_used="json")
    def serialize_totals(self, value: Decimal) -> float:
        return _cents(value)

    @property
    def total_owed(self) -> Decimal:
        return sum((o.amount for o in self.owes), Decimal("0"))

    @property
    def net(self) -> Decimal:
        return self.gets_back - self.total_owed


class Transfer(BaseModel):
    from_id: int
    to_id: int
    amount: Decimal

    @field_serializer("amount", when_used="json")
    def serialize_amount(self, value: Decimal) -> float:
        return _cents(value)


class BalanceMember(BaseModel):
    id: int
    name: str
    upi_id: str | None = None


class GroupBalancesOut(BaseModel):
    members: List[BalanceMember]
    balances: Dict[int, MemberBalance]


class SimplifiedBalancesOut(BaseModel):
    net: Dict[int, float]
    transfers: List[Transfer]
    settled: bool

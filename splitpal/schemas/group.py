from pydantic import BaseModel
from datetime import datetime
from typing import List
from splitpal.schemas.expense import ExpenseOut

class GroupCreate(BaseModel):
    name: str

class GroupOut(BaseModel):
    id: int
    name: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True

class GroupSummaryOut(BaseModel):
    id: int
    name: str
    members_count: int

class MemberCreate(BaseModel):
    name: str
    upi_id: str | None = None

class MemberUpdate(BaseModel):
    upi_id: str | None = None

class MemberOut(BaseModel):
    id: int
    group_id: int
    name: str
    upi_id: str | None = None

    class Config:
        from_attributes = True

class GroupDetailOut(GroupOut):
    members: List[MemberOut]
    expenses: List[ExpenseOut]

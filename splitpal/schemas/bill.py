from pydantic import BaseModel
from decimal import Decimal
from typing import List

class BillText(BaseModel):
    text: str

class LineItem(BaseModel):
    description: str
    amount: Decimal

class BillExtraction(BaseModel):
    items: List[LineItem]
    total_amount: Decimal

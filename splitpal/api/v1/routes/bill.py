from fastapi import APIRouter
from splitpal.schemas.bill import BillExtraction, BillText
from splitpal.services.bill_service import extract_line_items

router = APIRouter()

@router.post("/extract", response_model=BillExtraction)
async def extract_bill(data: BillText):
    return extract_line_items(data.text)

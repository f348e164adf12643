"""
Candidate line items from OCR'd bill text.

The output is a suggestion list the user confirms before anything becomes
an expense; nothing here touches the ledger.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import List
from splitpal.schemas.bill import BillExtraction, LineItem

AMOUNT_RE = re.compile(r"(?:[$₹€£]|\brs\.?|\binr)?\s*(\d+(?:[.,]\d{2})?)(?!\d)", re.IGNORECASE)
TOTAL_RE = re.compile(r"\b(total|sum|amount|subtotal)\b", re.IGNORECASE)
SKIP_RE = re.compile(r"(receipt|invoice|order|date|time|thank you)", re.IGNORECASE)


def parse_amount(raw: str) -> Decimal | None:
    try:
        amount = Decimal(raw.replace(",", "."))
    except InvalidOperation:
        return None
    return amount if amount > 0 else None


def _last_amount(line: str):
    matches = list(AMOUNT_RE.finditer(line))
    if not matches:
        return None, None

    match = matches[-1]
    return match, parse_amount(match.group(1))


def extract_line_items(text: str) -> BillExtraction:
    lines = [line.strip() for line in (text or "").splitlines()]
    lines = [line for line in lines if line]

    items: List[LineItem] = []
    total = None

    for line in lines:
        if TOTAL_RE.search(line):
            # first total line wins; totals are never items
            if total is None:
                _, total = _last_amount(line)
            continue

        if SKIP_RE.search(line):
            continue

        match, amount = _last_amount(line)
        if amount is None:
            continue

        description = line[:match.start()].strip(" .:-\t") or "Item"
        items.append(LineItem(description=description, amount=amount))

    if total is None:
        total = sum((item.amount for item in items), Decimal("0"))

    return BillExtraction(items=items, total_amount=total)

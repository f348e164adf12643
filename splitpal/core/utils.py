from decimal import Decimal, ROUND_HALF_UP, getcontext
from typing import Dict, Hashable, List
from collections import deque
from splitpal.schemas.balances import Transfer

getcontext().prec = 28
CENTS = Decimal("0.01")
TOLERANCE = Decimal("0.01")
ZERO = Decimal("0")
# largest value the Numeric(12, 2) money columns hold
MAX_AMOUNT = Decimal("9999999999.99")


def qround(d: Decimal) -> Decimal:
    return d.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.1 from dragging binary noise in
    return Decimal(str(value))


def simplify_debts(net_map: Dict[Hashable, Decimal]) -> List[Transfer]:
    """
    Greedy largest-first matching of debtors against creditors.

    Positive balances are creditors, negative ones debtors. Both sides are
    sorted by magnitude (stable, so equal balances keep the mapping's order)
    and the two largest are matched until one side runs out. Anything within
    TOLERANCE of zero counts as settled.
    """
    creditors = []
    debtors = []

    for member_id, bal in net_map.items():
        bal = to_decimal(bal)
        if bal > TOLERANCE:
            creditors.append([member_id, bal])
        elif bal < -TOLERANCE:
            debtors.append([member_id, -bal])

    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    creditors = deque(creditors)
    debtors = deque(debtors)

    transfers: List[Transfer] = []

    while creditors and debtors:
        cred_id, cred_amt = creditors[0]
        debt_id, debt_amt = debtors[0]

        pay_amt = min(cred_amt, debt_amt)

        transfers.append(Transfer(from_id=debt_id, to_id=cred_id, amount=pay_amt))

        creditors[0][1] = cred_amt - pay_amt
        debtors[0][1] = debt_amt - pay_amt

        if creditors[0][1] < TOLERANCE:
            creditors.popleft()
        if debtors[0][1] < TOLERANCE:
            debtors.popleft()

    return transfers


def is_settled(
    net_map: Dict[Hashable, Decimal],
    tolerance: Decimal = TOLERANCE,
) -> bool:
    """
    A group is settled if abs(net_balance) <= tolerance for every member.
    """
    for amount in net_map.values():
        if abs(to_decimal(amount)) > tolerance:
            return False

    return True

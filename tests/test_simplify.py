import random
from collections import defaultdict
from decimal import Decimal
import pytest
from splitpal.core.utils import is_settled, qround, simplify_debts

D = Decimal


def as_tuples(transfers):
    return [(t.from_id, t.to_id, t.amount) for t in transfers]


def random_net_map(seed, size):
    rng = random.Random(seed)
    net = {}
    for member_id in range(1, size):
        # keep clear of the settled band around zero
        net[member_id] = D(rng.choice([-1, 1]) * rng.randint(2, 50000)) / 100
    last = -sum(net.values(), D("0"))
    if abs(last) <= D("0.01"):
        net[1] += 1000
        last -= 1000
    net[size] = last
    return net


class TestSimplifyDebts:

    def test_single_debtor_pays_single_creditor(self):
        transfers = simplify_debts({1: D("50"), 2: D("-50")})
        assert as_tuples(transfers) == [(2, 1, D("50"))]

    def test_zero_balances_need_no_transfers(self):
        # A owes B 20, B owes C 20, C owes A 20: everybody nets out
        assert simplify_debts({1: D("0"), 2: D("0"), 3: D("0")}) == []

    def test_empty_mapping(self):
        assert simplify_debts({}) == []

    def test_noise_within_tolerance_is_ignored(self):
        assert simplify_debts({1: D("0.004"), 2: D("-0.004")}) == []

    def test_largest_balances_are_matched_first(self):
        net = {1: D("60"), 2: D("40"), 3: D("-50"), 4: D("-50")}
        assert as_tuples(simplify_debts(net)) == [
            (3, 1, D("50")),
            (4, 1, D("10")),
            (4, 2, D("40")),
        ]

    def test_ties_keep_mapping_order(self):
        first = simplify_debts({1: D("-10"), 2: D("-10"), 3: D("20")})
        second = simplify_debts({2: D("-10"), 1: D("-10"), 3: D("20")})

        assert [t.from_id for t in first] == [1, 2]
        assert [t.from_id for t in second] == [2, 1]

    def test_accepts_float_balances(self):
        transfers = simplify_debts({1: 0.1, 2: -0.1})
        assert as_tuples(transfers) == [(2, 1, D("0.1"))]

    def test_uneven_thirds(self):
        net = {1: D("66.67"), 2: D("-33.33"), 3: D("-33.34")}
        transfers = simplify_debts(net)

        assert as_tuples(transfers) == [(3, 1, D("33.34")), (2, 1, D("33.33"))]


@pytest.mark.parametrize("seed", range(25))
@pytest.mark.parametrize("size", [2, 3, 5, 8])
def test_transfers_zero_out_every_balance(seed, size):
    net = random_net_map(seed, size)
    transfers = simplify_debts(net)

    paid = defaultdict(lambda: D("0"))
    for t in transfers:
        assert t.amount > 0
        assert t.from_id != t.to_id
        paid[t.from_id] -= t.amount
        paid[t.to_id] += t.amount

    for member_id, balance in net.items():
        # a debtor pays exactly what it owes, a creditor receives exactly its due
        assert abs(balance - paid[member_id]) < D("0.01")

    debtors = sum(1 for b in net.values() if b < D("-0.01"))
    creditors = sum(1 for b in net.values() if b > D("0.01"))
    assert len(transfers) <= max(debtors + creditors - 1, 0)


@pytest.mark.parametrize("seed", range(10))
def test_simplify_is_deterministic(seed):
    net = random_net_map(seed, 6)
    assert simplify_debts(net) == simplify_debts(dict(net))


class TestIsSettled:

    def test_all_within_tolerance(self):
        assert is_settled({1: D("0.01"), 2: D("-0.01"), 3: D("0")})

    def test_outstanding_balance(self):
        assert not is_settled({1: D("5"), 2: D("-5")})

    def test_custom_tolerance(self):
        assert is_settled({1: D("0.04"), 2: D("-0.04")}, tolerance=D("0.05"))


def test_qround_half_up():
    assert qround(D("2.345")) == D("2.35")
    assert qround(D("33.3333")) == D("33.33")

import random
from collections import Counter

from app.domain.helpers.role_pick import assign_roles, effective_undercover_count


def test_effective_count_caps_at_a_third():
    for n in range(3, 21):
        for wanted in range(1, 11):
            roles = assign_roles([f"p{i}" for i in range(n)], wanted, random.Random(n * 100 + wanted))
            n_under = sum(1 for r in roles.values() if r == "undercover")
            assert n_under <= n // 3
            assert n_under == min(wanted, n // 3)
            assert len(roles) == n


def test_effective_count_floor_zero():
    assert effective_undercover_count(2, 1) == 0
    assert effective_undercover_count(0, 3) == 0
    assert effective_undercover_count(4, 0) == 0


def test_tiny_table_is_all_civilian():
    roles = assign_roles(["a", "b"], 1, random.Random(3))
    assert set(roles.values()) == {"civilian"}


def test_input_order_untouched():
    players = ["a", "b", "c", "d", "e", "f"]
    assign_roles(players, 2, random.Random(9))
    assert players == ["a", "b", "c", "d", "e", "f"]


def test_no_positional_bias():
    rng = random.Random(12345)
    players = ["a", "b", "c", "d"]
    trials = 8000
    hits = Counter()
    for _ in range(trials):
        roles = assign_roles(players, 1, rng)
        for pid, role in roles.items():
            if role == "undercover":
                hits[pid] += 1

    assert sum(hits.values()) == trials
    for pid in players:
        # expected 2000, sd ~39
        assert 1750 < hits[pid] < 2250


def test_undercover_pairs_are_uniform():
    rng = random.Random(777)
    players = ["a", "b", "c", "d", "e", "f"]
    trials = 15000
    pairs = Counter()
    for _ in range(trials):
        roles = assign_roles(players, 2, rng)
        pairs[frozenset(p for p, r in roles.items() if r == "undercover")] += 1

    # C(6, 2) = 15 pairs, expected 1000 each
    assert len(pairs) == 15
    for n in pairs.values():
        assert 850 < n < 1150

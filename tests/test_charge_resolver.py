import pytest

from printshop_pricing.engine import ChargeThreshold, resolve_charge, resolve_tier, amount_to_free_charge


def tiers(*pairs):
    return [ChargeThreshold(min_amount=m, charge=c) for m, c in pairs]


@pytest.fixture
def delivery():
    return tiers((0, 50), (300, 30), (500, 0))


@pytest.mark.parametrize("amount,expected", [
    (0, 50),
    (299, 50),
    (299.99, 50),
    (300, 30),
    (499, 30),
    (500, 0),
    (10000, 0),
])
def test_step_function(delivery, amount, expected):
    assert resolve_charge(delivery, amount) == expected


def test_empty_list_resolves_to_zero():
    assert resolve_charge([], 0) == 0
    assert resolve_charge([], 1234.5) == 0
    assert resolve_tier([], 100) is None


def test_no_matching_tier_resolves_to_zero():
    """Without a zero tier, amounts below the lowest tier are free."""
    thresholds = tiers((100, 40), (500, 10))
    assert resolve_charge(thresholds, 99.99) == 0
    assert resolve_charge(thresholds, 100) == 40


def test_unsorted_matches_sorted(delivery):
    shuffled = [delivery[2], delivery[0], delivery[1]]
    for amount in (0, 150, 300, 450, 500, 800):
        assert resolve_charge(shuffled, amount) == resolve_charge(delivery, amount)


def test_duplicate_min_amount_first_listed_wins():
    thresholds = tiers((0, 50), (200, 25), (200, 35))
    assert resolve_charge(thresholds, 250) == 25

    reordered = tiers((0, 50), (200, 35), (200, 25))
    assert resolve_charge(reordered, 250) == 35


def test_resolve_tier_returns_highest_qualifying(delivery):
    tier = resolve_tier(delivery, 420)
    assert tier is delivery[1]


def test_non_increasing_charges_are_monotonic(delivery):
    amounts = [i * 12.5 for i in range(80)]
    charges = [resolve_charge(delivery, a) for a in amounts]
    assert all(a >= b for a, b in zip(charges, charges[1:]))
    assert all(c >= 0 for c in charges)


@pytest.mark.parametrize("amount", [-0.01, -100, float("nan"), float("inf"), "Infinity", "abc", None])
def test_malformed_amount_raises(delivery, amount):
    with pytest.raises(ValueError):
        resolve_charge(delivery, amount)


def test_numeric_string_amount_accepted(delivery):
    assert resolve_charge(delivery, "350") == 30


def test_amount_to_free_charge(delivery):
    assert amount_to_free_charge(delivery, 350) == 150
    assert amount_to_free_charge(delivery, 0) == 500
    assert amount_to_free_charge(delivery, 500) is None
    assert amount_to_free_charge(delivery, 900) is None


def test_amount_to_free_charge_without_free_tier():
    assert amount_to_free_charge(tiers((0, 50), (300, 30)), 10) is None
    assert amount_to_free_charge(tiers((0, 0)), 10) is None


def test_amount_to_free_charge_skips_shadowed_free_tier():
    """A zero tier listed after a paid tier at the same amount never wins."""
    shadowed = tiers((0, 50), (500, 10), (500, 0))
    assert resolve_charge(shadowed, 500) == 10
    assert amount_to_free_charge(shadowed, 300) is None

    later_free = tiers((0, 50), (500, 10), (500, 0), (800, 0))
    assert amount_to_free_charge(later_free, 300) == 500


def test_amount_to_free_charge_when_already_free():
    # Below the lowest tier nothing is charged, so there is nothing to unlock
    assert amount_to_free_charge(tiers((100, 40), (500, 0)), 50) is None
    assert amount_to_free_charge(tiers((100, 40), (500, 0)), 100) == 400

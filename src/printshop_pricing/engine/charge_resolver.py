"""
Charge Resolver - Looks up the tiered charge for an order subtotal.

A threshold list is a step function over the subtotal: each tier applies
once the subtotal reaches its min_amount. Lists may arrive unsorted, empty,
or with repeated min_amount values, so nothing here assumes an order.
"""
import math
from typing import Optional, Sequence

from .models import ChargeThreshold


def _check_amount(amount: float) -> float:
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise ValueError(f"Amount must be a number, got {amount!r}")
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"Amount must be a finite, non-negative number, got {amount!r}")
    return value


def resolve_tier(thresholds: Sequence[ChargeThreshold], amount: float) -> Optional[ChargeThreshold]:
    """
    Return the highest tier the amount qualifies for.

    Among tiers with min_amount <= amount, the one with the largest
    min_amount wins. On equal min_amount the earlier entry wins.
    Returns None when no tier qualifies.
    """
    amount = _check_amount(amount)

    selected = None
    for threshold in thresholds:
        if threshold.min_amount > amount:
            continue
        # Strict comparison keeps the first of equal tiers
        if selected is None or threshold.min_amount > selected.min_amount:
            selected = threshold
    return selected


def resolve_charge(thresholds: Sequence[ChargeThreshold], amount: float) -> float:
    """
    Resolve the charge for an amount against a threshold list.

    No qualifying tier (including an empty list) resolves to 0.
    """
    tier = resolve_tier(thresholds, amount)
    if tier is None:
        return 0.0
    return max(0.0, float(tier.charge))


def amount_to_free_charge(thresholds: Sequence[ChargeThreshold], amount: float) -> Optional[float]:
    """
    How much more subtotal is needed before the charge drops to zero.

    Only zero-charge tiers that actually win the lookup at their own
    min_amount count. Returns None if the amount is already charged
    nothing or no higher amount ever is.
    """
    amount = _check_amount(amount)
    if resolve_charge(thresholds, amount) == 0:
        return None

    free_from = [
        t.min_amount for t in thresholds
        if t.charge == 0 and t.min_amount > amount and resolve_charge(thresholds, t.min_amount) == 0
    ]
    if not free_from:
        return None
    return round(min(free_from) - amount, 2)

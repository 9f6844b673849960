"""Engine subpackage - tiered charge resolution and order totals."""
from .charge_calculator import ChargeCalculator
from .charge_resolver import resolve_charge, resolve_tier, amount_to_free_charge
from .models import ChargeThreshold, PricingPolicy, OrderRequest, OrderTotals, CouponDiscount

__all__ = [
    'ChargeCalculator',
    'resolve_charge',
    'resolve_tier',
    'amount_to_free_charge',
    'ChargeThreshold',
    'PricingPolicy',
    'OrderRequest',
    'OrderTotals',
    'CouponDiscount',
]

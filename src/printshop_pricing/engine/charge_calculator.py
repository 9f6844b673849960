"""
Charge Calculator - Order total computation with traceability.

Turns a checkout subtotal into a full order total:
- Tiered delivery and packing charges from the pricing policy
- Fixed regional delivery surcharge by delivery state
- Coupon discount (already validated by the coupon service)
- Tax on the subtotal
- Execution trace for every step
"""
import logging
from typing import Optional

from .models import PricingPolicy, OrderRequest, OrderTotals, CouponDiscount
from .charge_resolver import resolve_charge, resolve_tier, amount_to_free_charge

logger = logging.getLogger(__name__)

# Other spellings accepted for a state code
STATE_ALIASES = {"TN": {"TAMIL NADU", "TAMILNADU"}}
FREE_DELIVERY = "free-delivery"


class ChargeCalculator:
    """
    Computes order charges against a pricing policy.

    The policy is passed in, never looked up, so a calculator can be built
    per request from whatever the settings service currently holds.

    Calculation order:
    1. Delivery charge from delivery tiers (0 if delivery disabled)
    2. Regional surcharge from delivery state (0 if delivery disabled)
    3. Packing charge from packing tiers (0 if packing disabled)
    4. Tax on the subtotal
    5. Coupon discount, total floored at 0
    """

    def __init__(self, policy: PricingPolicy, tax_rate: float = 0.18, home_state: str = "TN"):
        self.policy = policy
        self.tax_rate = tax_rate
        self.home_state = home_state.strip().upper()
        self.home_state_names = {self.home_state} | STATE_ALIASES.get(self.home_state, set())

    def delivery_charge(self, subtotal: float) -> float:
        if not self.policy.is_delivery_enabled:
            return 0.0
        return resolve_charge(self.policy.delivery_thresholds, subtotal)

    def packing_charge(self, subtotal: float) -> float:
        if not self.policy.is_packing_enabled:
            return 0.0
        return resolve_charge(self.policy.packing_thresholds, subtotal)

    def regional_charge(self, state: Optional[str]) -> float:
        """Fixed delivery surcharge; the TN charge applies inside the home state."""
        if not self.policy.is_delivery_enabled or not state or not state.strip():
            return 0.0
        if state.strip().upper() in self.home_state_names:
            return float(self.policy.regional_delivery_charge_tn)
        return float(self.policy.regional_delivery_charge_outside_tn)

    def calculate(self, request: OrderRequest, coupon: Optional[CouponDiscount] = None) -> OrderTotals:
        """
        Calculate order totals with full traceability.

        Args:
            request: OrderRequest with subtotal and delivery context
            coupon: validated coupon discount, if one was applied

        Returns:
            OrderTotals with charges, trace, and warnings
        """
        subtotal = float(request.subtotal)
        totals = OrderTotals(subtotal=subtotal)
        totals.add_trace("Subtotal", "Line item subtotal", f"{subtotal:.2f}")

        # Delivery
        if self.policy.is_delivery_enabled:
            tier = resolve_tier(self.policy.delivery_thresholds, subtotal)
            totals.delivery_charge = self.delivery_charge(subtotal)
            if tier is None:
                totals.add_trace("Delivery", "No delivery tier matched, charging nothing", "0.00")
                totals.add_warning("No delivery tier matches this subtotal")
            else:
                totals.add_trace(
                    "Delivery",
                    f"Tier from {tier.min_amount:.2f}",
                    f"{totals.delivery_charge:.2f}",
                )
            totals.amount_to_free_delivery = amount_to_free_charge(
                self.policy.delivery_thresholds, subtotal
            )
        else:
            totals.add_trace("Delivery", "Delivery charges disabled", "0.00")

        totals.regional_charge = self.regional_charge(request.state)
        if totals.regional_charge:
            totals.add_trace("Regional", f"Delivery to {request.state.strip()}", f"{totals.regional_charge:.2f}")

        # Packing
        if self.policy.is_packing_enabled:
            tier = resolve_tier(self.policy.packing_thresholds, subtotal)
            totals.packing_charge = self.packing_charge(subtotal)
            if tier is None:
                totals.add_trace("Packing", "No packing tier matched, charging nothing", "0.00")
                totals.add_warning("No packing tier matches this subtotal")
            else:
                totals.add_trace(
                    "Packing",
                    f"Tier from {tier.min_amount:.2f}",
                    f"{totals.packing_charge:.2f}",
                )
        else:
            totals.add_trace("Packing", "Packing charges disabled", "0.00")

        totals.tax = round(subtotal * self.tax_rate, 2)
        totals.add_trace("Tax", f"{self.tax_rate * 100:g}% of subtotal", f"{totals.tax:.2f}")

        if coupon is not None:
            totals.coupon_code = coupon.code
            if coupon.type == FREE_DELIVERY:
                totals.discount = totals.delivery_charge + totals.regional_charge
                totals.add_trace("Coupon", f"{coupon.code} waives delivery", f"-{totals.discount:.2f}")
            else:
                totals.discount = min(float(coupon.discount), subtotal)
                totals.add_trace("Coupon", f"{coupon.code} ({coupon.type})", f"-{totals.discount:.2f}")

        gross = (
            subtotal
            + totals.delivery_charge
            + totals.regional_charge
            + totals.packing_charge
            + totals.tax
        )
        totals.total = round(max(0.0, gross - totals.discount), 2)
        totals.add_trace("Total", "Charges and tax less discount", f"{totals.total:.2f}")

        logger.debug("Order total for subtotal %.2f: %.2f", subtotal, totals.total)
        return totals

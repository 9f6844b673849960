import pytest

from printshop_pricing.engine import (
    ChargeCalculator,
    ChargeThreshold,
    CouponDiscount,
    OrderRequest,
    PricingPolicy,
)


@pytest.fixture
def policy():
    """Default policy: delivery 50/30/0 at 0/200/500, packing 20/0 at 0/1000."""
    return PricingPolicy()


@pytest.fixture
def calculator(policy):
    return ChargeCalculator(policy, tax_rate=0.18)


def test_default_policy_charges(calculator):
    assert calculator.delivery_charge(100) == 50
    assert calculator.delivery_charge(200) == 30
    assert calculator.delivery_charge(750) == 0
    assert calculator.packing_charge(999) == 20
    assert calculator.packing_charge(1000) == 0


def test_disabled_delivery_is_free_regardless_of_tiers(policy):
    policy.is_delivery_enabled = False
    calculator = ChargeCalculator(policy)
    for amount in (0, 150, 10000):
        assert calculator.delivery_charge(amount) == 0
    assert calculator.regional_charge("KA") == 0
    assert calculator.packing_charge(0) == 20


def test_disabled_packing_is_free(policy):
    policy.is_packing_enabled = False
    calculator = ChargeCalculator(policy)
    assert calculator.packing_charge(0) == 0
    assert calculator.delivery_charge(0) == 50


def test_regional_charge_by_state(policy):
    policy.regional_delivery_charge_tn = 5
    policy.regional_delivery_charge_outside_tn = 30
    calculator = ChargeCalculator(policy)

    assert calculator.regional_charge("TN") == 5
    assert calculator.regional_charge(" tamil nadu ") == 5
    assert calculator.regional_charge("Karnataka") == 30
    assert calculator.regional_charge(None) == 0
    assert calculator.regional_charge("  ") == 0


def test_calculate_home_state(calculator):
    totals = calculator.calculate(OrderRequest(subtotal=250, state="TN"))

    assert totals.delivery_charge == 30
    assert totals.regional_charge == 0
    assert totals.packing_charge == 20
    assert totals.tax == pytest.approx(45.0)
    assert totals.total == pytest.approx(345.0)
    assert totals.amount_to_free_delivery == 250
    assert totals.warnings == []


def test_calculate_outside_home_state(calculator):
    totals = calculator.calculate(OrderRequest(subtotal=250, state="KA"))
    assert totals.regional_charge == 30
    assert totals.total == pytest.approx(375.0)


def test_free_delivery_coupon_waives_delivery_and_regional(calculator):
    coupon = CouponDiscount(code="FREESHIP", type="free-delivery", value=0, discount=0)
    totals = calculator.calculate(OrderRequest(subtotal=100, state="KA"), coupon)

    assert totals.discount == pytest.approx(80.0)
    assert totals.total == pytest.approx(138.0)
    assert totals.coupon_code == "FREESHIP"


def test_percentage_coupon_discount_applied(calculator):
    coupon = CouponDiscount(code="TEN", type="percentage", value=10, discount=25)
    totals = calculator.calculate(OrderRequest(subtotal=250), coupon)
    assert totals.discount == 25
    assert totals.total == pytest.approx(250 + 30 + 20 + 45 - 25)


def test_fixed_coupon_capped_at_subtotal(calculator):
    coupon = CouponDiscount(code="BIG", type="fixed", value=500, discount=500)
    totals = calculator.calculate(OrderRequest(subtotal=100), coupon)

    assert totals.discount == 100
    assert totals.total == pytest.approx(88.0)


def test_total_never_negative():
    policy = PricingPolicy(delivery_thresholds=[], packing_thresholds=[])
    calculator = ChargeCalculator(policy, tax_rate=0)
    coupon = CouponDiscount(code="ALL", type="fixed", value=1000, discount=1000)
    totals = calculator.calculate(OrderRequest(subtotal=50), coupon)
    assert totals.total == 0


def test_missing_tiers_warn_and_charge_nothing():
    policy = PricingPolicy(
        delivery_thresholds=[ChargeThreshold(min_amount=100, charge=40)],
        packing_thresholds=[],
    )
    totals = ChargeCalculator(policy, tax_rate=0).calculate(OrderRequest(subtotal=50))

    assert totals.delivery_charge == 0
    assert totals.packing_charge == 0
    assert totals.total == 50
    assert "No delivery tier matches this subtotal" in totals.warnings
    assert "No packing tier matches this subtotal" in totals.warnings


def test_trace_covers_each_step(calculator):
    totals = calculator.calculate(OrderRequest(subtotal=600, state="KA"))
    steps = [t.step for t in totals.trace]

    assert steps == ["Subtotal", "Delivery", "Regional", "Packing", "Tax", "Total"]
    assert "Delivery: Tier from 500.00 = 0.00" in totals.get_trace_text()


def test_to_dict_uses_camel_case(calculator):
    data = calculator.calculate(OrderRequest(subtotal=250)).to_dict()
    assert data["deliveryCharge"] == 30
    assert data["packingCharge"] == 20
    assert data["amountToFreeDelivery"] == 250
    assert data["trace"][0]["step"] == "Subtotal"


def test_configured_home_state(policy):
    policy.regional_delivery_charge_tn = 5
    policy.regional_delivery_charge_outside_tn = 30
    calculator = ChargeCalculator(policy, home_state="ka")

    assert calculator.regional_charge("KA") == 5
    assert calculator.regional_charge("TN") == 30
    assert calculator.regional_charge("Tamil Nadu") == 30

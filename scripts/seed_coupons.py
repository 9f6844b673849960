#!/usr/bin/env python
"""
Seed the coupon store with a few starter coupons.

Usage:
    python scripts/seed_coupons.py
"""
from printshop_pricing.config.settings import get_settings
from printshop_pricing.services.coupon_service import Coupon, CouponService


STARTER_COUPONS = [
    Coupon(code="WELCOME10", type="percentage", value=10, max_discount_amount=100,
           description="10% off your first print order"),
    Coupon(code="FLAT50", type="fixed", value=50, min_order_amount=500,
           description="₹50 off orders above ₹500"),
    Coupon(code="FREESHIP", type="free-delivery", min_order_amount=300,
           description="Free delivery on orders above ₹300"),
]


def main():
    settings = get_settings()
    service = CouponService(settings.coupons_csv, currency_symbol=settings.currency_symbol)

    print(f"Seeding coupons into {settings.coupons_csv}")
    for coupon in STARTER_COUPONS:
        if service.get_coupon(coupon.code):
            print(f"  skip    {coupon.code} (exists)")
            continue
        service.create_coupon(coupon, created_by="seed")
        print(f"  created {coupon.code}")


if __name__ == "__main__":
    main()

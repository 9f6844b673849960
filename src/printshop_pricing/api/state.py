"""
Shared service instances for the API.

Routers take these through FastAPI dependencies so tests can swap them
with app.dependency_overrides.
"""
from functools import lru_cache

from ..config.settings import get_settings
from ..services.settings_service import PricingSettingsService
from ..services.coupon_service import CouponService


@lru_cache
def get_pricing_service() -> PricingSettingsService:
    settings = get_settings()
    return PricingSettingsService(settings.pricing_settings_path)


@lru_cache
def get_coupon_service() -> CouponService:
    settings = get_settings()
    return CouponService(settings.coupons_csv, currency_symbol=settings.currency_symbol)


def get_tax_rate() -> float:
    return get_settings().tax_rate


def get_home_state() -> str:
    return get_settings().home_state

import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import Field
from typing import Optional

from printshop_pricing import __version__
from printshop_pricing.config.settings import get_settings, configure_logging
from printshop_pricing.engine import ChargeCalculator, OrderRequest
from printshop_pricing.services.coupon_service import CouponError, CouponService
from printshop_pricing.services.settings_service import PricingSettingsService
from printshop_pricing.api.settings_api import CamelModel, router as settings_router
from printshop_pricing.api.coupons_api import router as coupons_router
from printshop_pricing.api.state import get_pricing_service, get_coupon_service, get_tax_rate, get_home_state

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Print-Shop Pricing API",
    description="Delivery, packing and coupon pricing for the print storefront",
    version=__version__
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(settings_router)
app.include_router(coupons_router)


class CalcRequest(CamelModel):
    subtotal: float = Field(ge=0, allow_inf_nan=False)
    state: Optional[str] = None
    coupon_code: Optional[str] = None


@app.get("/")
async def root():
    return {"status": "online", "message": "Print-Shop Pricing API Active"}


@app.post("/calculate")
async def calculate_totals(
    req: CalcRequest,
    pricing: PricingSettingsService = Depends(get_pricing_service),
    coupons: CouponService = Depends(get_coupon_service),
    tax_rate: float = Depends(get_tax_rate),
    home_state: str = Depends(get_home_state),
):
    request = OrderRequest(subtotal=req.subtotal, state=req.state, coupon_code=req.coupon_code)

    coupon = None
    if request.coupon_code:
        try:
            coupon = coupons.validate_coupon(request.coupon_code, request.subtotal)
        except CouponError as e:
            raise HTTPException(status_code=e.status_code, detail=e.message)

    try:
        calculator = ChargeCalculator(pricing.get_policy(), tax_rate=tax_rate, home_state=home_state)
        return calculator.calculate(request, coupon).to_dict()
    except Exception as e:
        logger.exception("Order total calculation failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/system/status")
async def get_status(
    pricing: PricingSettingsService = Depends(get_pricing_service),
    coupons: CouponService = Depends(get_coupon_service),
):
    settings = get_settings()
    policy = pricing.get_policy()
    return {
        "engine_active": True,
        "version": __version__,
        "data_dir": str(settings.data_dir),
        "delivery_enabled": policy.is_delivery_enabled,
        "packing_enabled": policy.is_packing_enabled,
        "settings_updated_at": policy.updated_at,
        "coupons_count": len(coupons.list_coupons()),
    }

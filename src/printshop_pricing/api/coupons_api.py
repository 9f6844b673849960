"""
Coupons API - FastAPI router for coupon management and checkout validation.
"""
from datetime import datetime

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import Field
from typing import Literal, Optional

from ..services.coupon_service import Coupon, CouponError, CouponService
from .settings_api import CamelModel
from .state import get_coupon_service

router = APIRouter(prefix="/api/coupons", tags=["coupons"])

CouponType = Literal["percentage", "fixed", "free-delivery"]


class CouponCreate(CamelModel):
    """Request model for creating a coupon."""
    code: str
    type: CouponType
    value: float = Field(default=0, ge=0, allow_inf_nan=False)
    min_order_amount: float = Field(default=0, ge=0, allow_inf_nan=False)
    max_discount_amount: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    expiry_date: Optional[str] = None
    usage_limit: Optional[int] = Field(default=None, ge=0)
    is_active: bool = True
    display_in_checkout: bool = True
    description: Optional[str] = None


class CouponUpdate(CamelModel):
    """Request model for updating a coupon."""
    code: Optional[str] = None
    type: Optional[CouponType] = None
    value: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    min_order_amount: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    max_discount_amount: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    expiry_date: Optional[str] = None
    usage_limit: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
    display_in_checkout: Optional[bool] = None
    description: Optional[str] = None


class CouponResponse(CamelModel):
    """Response model for a coupon."""
    code: str
    type: str
    value: float
    min_order_amount: float
    max_discount_amount: Optional[float]
    expiry_date: Optional[str]
    usage_limit: Optional[int]
    used_count: int
    is_active: bool
    display_in_checkout: bool
    description: Optional[str]
    created_by: Optional[str]
    created_at: Optional[str]
    updated_at: Optional[str]


class PublicCouponResponse(CamelModel):
    """Checkout view of an active coupon."""
    code: str
    type: str
    value: float
    description: Optional[str]
    min_order_amount: float
    max_discount_amount: Optional[float]


class ValidateCouponRequest(CamelModel):
    code: Optional[str] = None
    order_amount: float = Field(ge=0, allow_inf_nan=False)


class CouponDiscountResponse(CamelModel):
    code: str
    type: str
    value: float
    discount: float
    description: Optional[str]


# Endpoints

@router.get("", response_model=list[CouponResponse])
async def list_coupons(service: CouponService = Depends(get_coupon_service)):
    """List all coupons (admin)."""
    return [CouponResponse(**coupon.__dict__) for coupon in service.list_coupons()]


@router.get("/active", response_model=list[PublicCouponResponse])
async def list_active_coupons(service: CouponService = Depends(get_coupon_service)):
    """Active, unexpired coupons for checkout."""
    return [
        PublicCouponResponse(
            code=c.code,
            type=c.type,
            value=c.value,
            description=c.description,
            min_order_amount=c.min_order_amount,
            max_discount_amount=c.max_discount_amount,
        )
        for c in service.list_active_coupons(datetime.now())
    ]


@router.get("/stats")
async def get_stats(service: CouponService = Depends(get_coupon_service)):
    """Get coupon statistics."""
    return service.get_stats()


@router.post("/validate", response_model=CouponDiscountResponse)
async def validate_coupon(
    request: ValidateCouponRequest,
    service: CouponService = Depends(get_coupon_service),
):
    """Validate a coupon code against an order amount."""
    try:
        discount = service.validate_coupon(request.code, request.order_amount)
    except CouponError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return CouponDiscountResponse(**discount.__dict__)


@router.post("/redeem", response_model=CouponDiscountResponse)
async def redeem_coupon(
    request: ValidateCouponRequest,
    service: CouponService = Depends(get_coupon_service),
):
    """Apply a coupon to a placed order, counting it against the usage limit."""
    try:
        discount = service.redeem_coupon(request.code, request.order_amount)
    except CouponError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return CouponDiscountResponse(**discount.__dict__)


@router.get("/{code}", response_model=CouponResponse)
async def get_coupon(code: str, service: CouponService = Depends(get_coupon_service)):
    """Get a single coupon by code."""
    coupon = service.get_coupon(code)
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")
    return CouponResponse(**coupon.__dict__)


@router.post("", response_model=CouponResponse, status_code=201)
async def create_coupon(
    coupon_data: CouponCreate,
    x_user_id: Optional[str] = Header(default=None),
    service: CouponService = Depends(get_coupon_service),
):
    """Create a new coupon (admin)."""
    try:
        created = service.create_coupon(Coupon(**coupon_data.model_dump()), created_by=x_user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CouponResponse(**created.__dict__)


@router.put("/{code}", response_model=CouponResponse)
async def update_coupon(
    code: str,
    updates: CouponUpdate,
    service: CouponService = Depends(get_coupon_service),
):
    """Update an existing coupon (admin)."""
    if service.get_coupon(code) is None:
        raise HTTPException(status_code=404, detail="Coupon not found")

    # Only fields provided in the request body, including explicit nulls
    update_dict = updates.model_dump(exclude_unset=True)
    try:
        updated = service.update_coupon(code, update_dict)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CouponResponse(**updated.__dict__)


@router.delete("/{code}")
async def delete_coupon(code: str, service: CouponService = Depends(get_coupon_service)):
    """Delete a coupon (admin)."""
    try:
        service.delete_coupon(code)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "message": "Coupon deleted successfully"}

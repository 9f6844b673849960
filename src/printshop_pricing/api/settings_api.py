"""
Pricing Settings API - FastAPI router for delivery and packing charges.
"""
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional

from ..engine.charge_calculator import ChargeCalculator
from ..engine.charge_resolver import amount_to_free_charge
from ..services.settings_service import PricingSettingsService
from .state import get_pricing_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings/pricing", tags=["settings"])


class CamelModel(BaseModel):
    """Base model speaking the camelCase field names of the stored record."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ThresholdModel(CamelModel):
    min_amount: float = Field(ge=0, allow_inf_nan=False)
    charge: float = Field(ge=0, allow_inf_nan=False)


class PricingSettingsUpdate(CamelModel):
    """Request model for a partial settings update."""
    delivery_thresholds: Optional[list[ThresholdModel]] = None
    packing_thresholds: Optional[list[ThresholdModel]] = None
    is_delivery_enabled: Optional[bool] = None
    is_packing_enabled: Optional[bool] = None
    regional_delivery_charge_tn: Optional[float] = Field(
        default=None, alias="regionalDeliveryChargeTN", allow_inf_nan=False
    )
    regional_delivery_charge_outside_tn: Optional[float] = Field(
        default=None, alias="regionalDeliveryChargeOutsideTN", allow_inf_nan=False
    )


class PricingSettingsResponse(CamelModel):
    """Response model for the pricing settings record."""
    settings_id: str
    delivery_thresholds: list[ThresholdModel]
    packing_thresholds: list[ThresholdModel]
    is_delivery_enabled: bool
    is_packing_enabled: bool
    regional_delivery_charge_tn: float = Field(alias="regionalDeliveryChargeTN")
    regional_delivery_charge_outside_tn: float = Field(alias="regionalDeliveryChargeOutsideTN")
    last_updated_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ValidationResponse(BaseModel):
    """Response model for validation."""
    valid: bool
    errors: list[str]
    warnings: list[str]


class ChargePreviewResponse(CamelModel):
    subtotal: float
    delivery_charge: float
    packing_charge: float
    amount_to_free_delivery: Optional[float] = None


def _update_dict(updates: PricingSettingsUpdate) -> dict:
    # Only fields sent in the request body
    return updates.model_dump(exclude_unset=True, by_alias=True)


# Endpoints

@router.get("", response_model=PricingSettingsResponse)
async def get_pricing_settings(service: PricingSettingsService = Depends(get_pricing_service)):
    """Get pricing settings, creating the defaults on first access."""
    try:
        return PricingSettingsResponse.model_validate(service.get_policy().to_dict())
    except Exception as e:
        logger.exception("Failed to fetch pricing settings")
        raise HTTPException(status_code=500, detail=f"Failed to fetch pricing settings: {e}")


@router.put("", response_model=PricingSettingsResponse)
async def update_pricing_settings(
    updates: PricingSettingsUpdate,
    x_user_id: Optional[str] = Header(default=None),
    service: PricingSettingsService = Depends(get_pricing_service),
):
    """Update delivery/packing settings (admin)."""
    try:
        policy = service.update_policy(_update_dict(updates), updated_by=x_user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return PricingSettingsResponse.model_validate(policy.to_dict())


@router.post("/validate", response_model=ValidationResponse)
async def validate_pricing_settings(
    updates: PricingSettingsUpdate,
    service: PricingSettingsService = Depends(get_pricing_service),
):
    """Validate an update against the current settings without saving."""
    result = service.validate_policy(service.merge_updates(_update_dict(updates)))
    return ValidationResponse(valid=result.valid, errors=result.errors, warnings=result.warnings)


@router.get("/preview", response_model=ChargePreviewResponse)
async def preview_charges(
    subtotal: float = Query(ge=0, allow_inf_nan=False),
    service: PricingSettingsService = Depends(get_pricing_service),
):
    """Delivery and packing charges the current settings give a subtotal."""
    policy = service.get_policy()
    calculator = ChargeCalculator(policy)
    return ChargePreviewResponse(
        subtotal=subtotal,
        delivery_charge=calculator.delivery_charge(subtotal),
        packing_charge=calculator.packing_charge(subtotal),
        amount_to_free_delivery=(
            amount_to_free_charge(policy.delivery_thresholds, subtotal)
            if policy.is_delivery_enabled else None
        ),
    )

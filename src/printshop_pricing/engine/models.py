"""
Data models for the charge engine.

Uses dataclasses for structured, type-safe data representation.
Dict conversion uses the camelCase field names of the stored record.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


SETTINGS_ID = "global"


@dataclass
class TraceStep:
    """A single step in the charge calculation trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class ChargeThreshold:
    """A charge that applies once the subtotal reaches min_amount."""
    min_amount: float
    charge: float

    def to_dict(self) -> dict:
        return {"minAmount": self.min_amount, "charge": self.charge}

    @classmethod
    def from_dict(cls, data: dict) -> 'ChargeThreshold':
        return cls(
            min_amount=float(data.get("minAmount", data.get("min_amount", 0))),
            charge=float(data.get("charge", 0)),
        )


def default_delivery_thresholds() -> list[ChargeThreshold]:
    return [
        ChargeThreshold(min_amount=0, charge=50),
        ChargeThreshold(min_amount=200, charge=30),
        ChargeThreshold(min_amount=500, charge=0),
    ]


def default_packing_thresholds() -> list[ChargeThreshold]:
    return [
        ChargeThreshold(min_amount=0, charge=20),
        ChargeThreshold(min_amount=1000, charge=0),
    ]


@dataclass
class PricingPolicy:
    """
    The global delivery/packing pricing record.

    Only one exists, identified by settings_id. Thresholds are kept in the
    order they were authored; the resolver does not rely on sorting.
    """
    delivery_thresholds: list[ChargeThreshold] = field(default_factory=default_delivery_thresholds)
    packing_thresholds: list[ChargeThreshold] = field(default_factory=default_packing_thresholds)
    is_delivery_enabled: bool = True
    is_packing_enabled: bool = True

    # Fixed regional delivery surcharges (additive)
    regional_delivery_charge_tn: float = 0.0
    regional_delivery_charge_outside_tn: float = 30.0

    # Metadata
    settings_id: str = SETTINGS_ID
    last_updated_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def touch(self, updated_by: Optional[str] = None):
        """Stamp audit metadata for a write."""
        now = datetime.now().isoformat(timespec='seconds')
        if not self.created_at:
            self.created_at = now
        self.updated_at = now
        if updated_by is not None:
            self.last_updated_by = updated_by

    def to_dict(self) -> dict:
        return {
            "settingsId": self.settings_id,
            "deliveryThresholds": [t.to_dict() for t in self.delivery_thresholds],
            "packingThresholds": [t.to_dict() for t in self.packing_thresholds],
            "isDeliveryEnabled": self.is_delivery_enabled,
            "isPackingEnabled": self.is_packing_enabled,
            "regionalDeliveryChargeTN": self.regional_delivery_charge_tn,
            "regionalDeliveryChargeOutsideTN": self.regional_delivery_charge_outside_tn,
            "lastUpdatedBy": self.last_updated_by,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PricingPolicy':
        return cls(
            delivery_thresholds=[ChargeThreshold.from_dict(t) for t in data.get("deliveryThresholds", [])],
            packing_thresholds=[ChargeThreshold.from_dict(t) for t in data.get("packingThresholds", [])],
            is_delivery_enabled=bool(data.get("isDeliveryEnabled", True)),
            is_packing_enabled=bool(data.get("isPackingEnabled", True)),
            regional_delivery_charge_tn=float(data.get("regionalDeliveryChargeTN", 0) or 0),
            regional_delivery_charge_outside_tn=float(data.get("regionalDeliveryChargeOutsideTN", 0) or 0),
            settings_id=data.get("settingsId", SETTINGS_ID),
            last_updated_by=data.get("lastUpdatedBy"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class OrderRequest:
    """An order total request from checkout."""
    subtotal: float
    state: Optional[str] = None  # delivery state, e.g. "TN"
    coupon_code: Optional[str] = None


@dataclass
class OrderTotals:
    """Complete result of an order total calculation."""
    subtotal: float
    delivery_charge: float = 0.0
    regional_charge: float = 0.0
    packing_charge: float = 0.0
    discount: float = 0.0
    tax: float = 0.0
    total: float = 0.0
    coupon_code: Optional[str] = None
    amount_to_free_delivery: Optional[float] = None
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        if warning not in self.warnings:
            self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "deliveryCharge": self.delivery_charge,
            "regionalCharge": self.regional_charge,
            "packingCharge": self.packing_charge,
            "discount": self.discount,
            "tax": self.tax,
            "total": self.total,
            "couponCode": self.coupon_code,
            "amountToFreeDelivery": self.amount_to_free_delivery,
            "warnings": list(self.warnings),
            "trace": [
                {"step": t.step, "description": t.description, "value": t.value}
                for t in self.trace
            ],
        }


@dataclass
class CouponDiscount:
    """A validated coupon and the discount it grants on an order amount."""
    code: str
    type: str  # "percentage", "fixed" or "free-delivery"
    value: float
    discount: float
    description: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "type": self.type,
            "value": self.value,
            "discount": self.discount,
            "description": self.description,
        }

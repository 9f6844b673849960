"""
Pricing Settings Service - Load, create and update the global pricing policy.

The policy is stored as a single JSON document keyed by settingsId. The
first read creates it with defaults; admin updates are partial and last
write wins.
"""
import json
import logging
import math
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field

from ..engine.models import PricingPolicy, ChargeThreshold, SETTINGS_ID
from .files import replace_file

logger = logging.getLogger(__name__)


@dataclass
class PolicyValidationResult:
    """Result of policy validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _parse_thresholds(raw) -> list[ChargeThreshold]:
    thresholds = []
    for item in raw:
        if isinstance(item, ChargeThreshold):
            thresholds.append(ChargeThreshold(min_amount=float(item.min_amount), charge=float(item.charge)))
        else:
            thresholds.append(ChargeThreshold.from_dict(item))
    return thresholds


def sort_thresholds(thresholds: list[ChargeThreshold]) -> list[ChargeThreshold]:
    """Thresholds ascending by min_amount (stable on ties)."""
    return sorted(thresholds, key=lambda t: t.min_amount)


class PricingSettingsService:
    """Service for managing the singleton pricing policy."""

    # Update keys (stored record names) mapped to policy attributes
    UPDATE_FIELDS = {
        'deliveryThresholds': 'delivery_thresholds',
        'packingThresholds': 'packing_thresholds',
        'isDeliveryEnabled': 'is_delivery_enabled',
        'isPackingEnabled': 'is_packing_enabled',
        'regionalDeliveryChargeTN': 'regional_delivery_charge_tn',
        'regionalDeliveryChargeOutsideTN': 'regional_delivery_charge_outside_tn',
    }

    def __init__(self, settings_path: Path):
        self.settings_path = settings_path

    def _read(self) -> Optional[PricingPolicy]:
        """Read the stored policy, or None if it was never created."""
        if not self.settings_path.exists():
            return None

        with open(self.settings_path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        # Tolerate a list of documents; the one with the singleton key wins
        if isinstance(data, list):
            data = next((d for d in data if d.get('settingsId') == SETTINGS_ID), None)
            if data is None:
                return None
        return PricingPolicy.from_dict(data)

    def _write(self, policy: PricingPolicy):
        """Write the policy document, replacing whatever was there."""
        with replace_file(self.settings_path) as f:
            json.dump(policy.to_dict(), f, indent=2)

    def get_policy(self) -> PricingPolicy:
        """Get the pricing policy, creating it with defaults on first access."""
        policy = self._read()
        if policy is None:
            policy = PricingPolicy(settings_id=SETTINGS_ID)
            policy.touch()
            self._write(policy)
            logger.info("Created default pricing settings at %s", self.settings_path)
        return policy

    def merge_updates(self, updates: dict) -> PricingPolicy:
        """
        Return the stored policy with a partial update applied, without saving.

        Only keys present in updates (and not None) are applied. Keys may use
        either the stored camelCase names or the attribute names. Thresholds
        are sorted ascending by min_amount.
        """
        policy = self._read() or PricingPolicy(settings_id=SETTINGS_ID)
        attributes = set(self.UPDATE_FIELDS.values())

        for key, value in updates.items():
            attr = self.UPDATE_FIELDS.get(key, key)
            if attr not in attributes or value is None:
                continue
            if attr in ('delivery_thresholds', 'packing_thresholds'):
                value = sort_thresholds(_parse_thresholds(value))
            elif attr in ('is_delivery_enabled', 'is_packing_enabled'):
                value = bool(value)
            else:
                value = float(value)
            setattr(policy, attr, value)
        return policy

    def update_policy(self, updates: dict, updated_by: Optional[str] = None) -> PricingPolicy:
        """
        Apply a partial update to the pricing policy and save it.

        Raises ValueError if the resulting policy is invalid.
        """
        policy = self.merge_updates(updates)
        validation = self.validate_policy(policy)
        if not validation.valid:
            raise ValueError("; ".join(validation.errors))

        policy.touch(updated_by)
        self._write(policy)
        logger.info("Pricing settings updated by %s", updated_by or "unknown")
        for warning in validation.warnings:
            logger.warning("Pricing settings: %s", warning)
        return policy

    def validate_policy(self, policy: PricingPolicy) -> PolicyValidationResult:
        """Validate a policy before saving."""
        result = PolicyValidationResult(valid=True)

        for label, thresholds in (
            ("Delivery", policy.delivery_thresholds),
            ("Packing", policy.packing_thresholds),
        ):
            error_count = len(result.errors)
            for i, t in enumerate(thresholds, start=1):
                if not (math.isfinite(t.min_amount) and math.isfinite(t.charge)):
                    result.errors.append(f"{label} threshold {i}: amounts must be finite numbers")
                    result.valid = False
                    continue
                if t.min_amount < 0:
                    result.errors.append(f"{label} threshold {i}: minimum amount cannot be negative")
                    result.valid = False
                if t.charge < 0:
                    result.errors.append(f"{label} threshold {i}: charge cannot be negative")
                    result.valid = False

            # Shape warnings only make sense for well-formed tiers
            if len(result.errors) > error_count:
                continue
            if not thresholds:
                result.warnings.append(f"{label} has no thresholds; every order will be charged 0")
                continue

            amounts = [t.min_amount for t in thresholds]
            if min(amounts) > 0:
                result.warnings.append(
                    f"{label} has no tier starting at 0; orders below {min(amounts):.2f} are charged 0"
                )

            duplicates = sorted({a for a in amounts if amounts.count(a) > 1})
            if duplicates:
                result.warnings.append(
                    f"{label} has duplicate minimum amounts: {', '.join(f'{a:.2f}' for a in duplicates)}"
                )

            ordered = sort_thresholds(thresholds)
            if any(b.charge > a.charge for a, b in zip(ordered, ordered[1:])):
                result.warnings.append(f"{label} charge increases as the order amount grows")

        for label, value in (
            ("Regional delivery charge (TN)", policy.regional_delivery_charge_tn),
            ("Regional delivery charge (outside TN)", policy.regional_delivery_charge_outside_tn),
        ):
            if not math.isfinite(value):
                result.errors.append(f"{label} must be a finite number")
                result.valid = False
            elif value < 0:
                result.errors.append(f"{label} cannot be negative")
                result.valid = False

        return result

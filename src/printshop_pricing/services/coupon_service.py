"""
Coupon Service - CRUD operations and checkout validation for coupons.
Handles reading/writing coupons.csv.
"""
import csv
import logging
from pathlib import Path
from datetime import datetime, time
from typing import Optional
from dataclasses import dataclass, fields

import pandas as pd

from ..engine.models import CouponDiscount
from ..validation.validators import validate_required, collect_errors
from .files import replace_file

logger = logging.getLogger(__name__)

COUPON_TYPES = ('percentage', 'fixed', 'free-delivery')


class CouponError(ValueError):
    """A coupon was rejected; status_code is the HTTP status to report."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class Coupon:
    """Represents a checkout coupon."""
    code: str
    type: str
    value: float = 0.0
    min_order_amount: float = 0.0
    max_discount_amount: Optional[float] = None
    expiry_date: Optional[str] = None  # ISO date or datetime
    usage_limit: Optional[int] = None
    used_count: int = 0
    is_active: bool = True
    display_in_checkout: bool = True
    description: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        self.code = normalize_code(self.code)

    def expires_at(self) -> Optional[datetime]:
        """Expiry moment; a bare date stays valid through the end of that day."""
        if not self.expiry_date:
            return None
        parsed = datetime.fromisoformat(self.expiry_date)
        if len(self.expiry_date) <= 10:
            return datetime.combine(parsed.date(), time.max)
        return local_time(parsed)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        expiry = self.expires_at()
        return expiry is not None and local_time(now or datetime.now()) > expiry

    def to_csv_row(self) -> dict:
        """Convert to CSV row format."""
        return {
            'code': self.code,
            'type': self.type,
            'value': str(self.value),
            'min_order_amount': str(self.min_order_amount),
            'max_discount_amount': '' if self.max_discount_amount is None else str(self.max_discount_amount),
            'expiry_date': self.expiry_date or '',
            'usage_limit': '' if self.usage_limit is None else str(self.usage_limit),
            'used_count': str(self.used_count),
            'is_active': 'true' if self.is_active else 'false',
            'display_in_checkout': 'true' if self.display_in_checkout else 'false',
            'description': self.description or '',
            'created_by': self.created_by or '',
            'created_at': self.created_at or '',
            'updated_at': self.updated_at or '',
        }

    @classmethod
    def from_csv_row(cls, row: dict) -> 'Coupon':
        """Create Coupon from CSV row."""
        return cls(
            code=row.get('code', ''),
            type=row.get('type', 'fixed'),
            value=float(row.get('value') or 0),
            min_order_amount=float(row.get('min_order_amount') or 0),
            max_discount_amount=float(row['max_discount_amount']) if row.get('max_discount_amount') else None,
            expiry_date=row.get('expiry_date') or None,
            usage_limit=int(row['usage_limit']) if row.get('usage_limit') else None,
            used_count=int(row.get('used_count') or 0),
            is_active=row.get('is_active', 'true').lower() == 'true',
            display_in_checkout=row.get('display_in_checkout', 'true').lower() == 'true',
            description=row.get('description') or None,
            created_by=row.get('created_by') or None,
            created_at=row.get('created_at') or None,
            updated_at=row.get('updated_at') or None,
        )


def normalize_code(code: Optional[str]) -> str:
    return (code or '').strip().upper()


def local_time(value: datetime) -> datetime:
    """Naive local time; offset-aware values are converted first."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _now_iso() -> str:
    return datetime.now().isoformat(timespec='seconds')


class CouponService:
    """Service for managing checkout coupons."""

    CSV_COLUMNS = [f.name for f in fields(Coupon)]
    REQUIRED_FIELDS = {'code', 'type', 'value', 'min_order_amount', 'used_count', 'is_active', 'display_in_checkout'}

    def __init__(self, coupons_csv_path: Path, currency_symbol: str = "₹"):
        self.coupons_csv_path = coupons_csv_path
        self.currency_symbol = currency_symbol

    def list_coupons(self) -> list[Coupon]:
        """List all coupons, newest first."""
        coupons = []
        if not self.coupons_csv_path.exists():
            return coupons

        with open(self.coupons_csv_path, 'r', encoding='utf-8', newline='') as f:
            reader = csv.DictReader(f)
            for row in reader:
                if not row.get('code'):
                    continue
                coupons.append(Coupon.from_csv_row(row))

        coupons.sort(key=lambda c: c.created_at or '', reverse=True)
        return coupons

    def list_active_coupons(self, now: Optional[datetime] = None) -> list[Coupon]:
        """Active, unexpired coupons shown at checkout."""
        now = now or datetime.now()
        return [
            c for c in self.list_coupons()
            if c.is_active and c.display_in_checkout and not c.is_expired(now)
        ]

    def get_coupon(self, code: str) -> Optional[Coupon]:
        """Get a single coupon by code (case-insensitive)."""
        code = normalize_code(code)
        for coupon in self.list_coupons():
            if coupon.code == code:
                return coupon
        return None

    def check_coupon(self, coupon: Coupon) -> list[str]:
        """Errors in a coupon definition."""
        errors = collect_errors(
            validate_required(coupon.code, "Coupon code"),
            validate_required(coupon.type, "Coupon type"),
        )
        if coupon.type and coupon.type not in COUPON_TYPES:
            errors.append(f"Coupon type must be one of: {', '.join(COUPON_TYPES)}")
        if coupon.type != 'free-delivery' and coupon.value == 0:
            errors.append("Coupon value is required")
        if coupon.value < 0:
            errors.append("Coupon value cannot be negative")
        if coupon.type == 'percentage' and coupon.value > 100:
            errors.append("Percentage coupons cannot exceed 100%")
        if coupon.min_order_amount < 0:
            errors.append("Minimum order amount cannot be negative")
        if coupon.max_discount_amount is not None and coupon.max_discount_amount < 0:
            errors.append("Maximum discount amount cannot be negative")
        if coupon.usage_limit is not None and coupon.usage_limit < 0:
            errors.append("Usage limit cannot be negative")
        if coupon.expiry_date:
            try:
                coupon.expires_at()
            except ValueError:
                errors.append("Expiry date must be an ISO date")
        return errors

    def create_coupon(self, coupon: Coupon, created_by: Optional[str] = None) -> Coupon:
        """Create a new coupon."""
        errors = self.check_coupon(coupon)
        if errors:
            raise ValueError("; ".join(errors))

        if self.get_coupon(coupon.code):
            raise ValueError("Coupon code already exists")

        coupon.created_by = created_by or coupon.created_by
        coupon.created_at = coupon.updated_at = _now_iso()

        coupons = self.list_coupons()
        coupons.append(coupon)
        self._write_coupons(coupons)
        logger.info("Created coupon %s (%s)", coupon.code, coupon.type)
        return coupon

    def update_coupon(self, code: str, updates: dict) -> Coupon:
        """Update an existing coupon."""
        code = normalize_code(code)
        coupons = self.list_coupons()

        for i, coupon in enumerate(coupons):
            if coupon.code == code:
                break
        else:
            raise ValueError("Coupon not found")

        for key, value in updates.items():
            if key in ('created_at', 'created_by'):
                continue
            if value is None and key in self.REQUIRED_FIELDS:
                continue
            if hasattr(coupon, key):
                setattr(coupon, key, value)
        coupon.code = normalize_code(coupon.code)

        errors = self.check_coupon(coupon)
        if errors:
            raise ValueError("; ".join(errors))
        if coupon.code != code and any(c.code == coupon.code for j, c in enumerate(coupons) if j != i):
            raise ValueError("Coupon code already exists")

        coupon.updated_at = _now_iso()
        coupons[i] = coupon
        self._write_coupons(coupons)
        logger.info("Updated coupon %s", coupon.code)
        return coupon

    def delete_coupon(self, code: str) -> bool:
        """Delete a coupon."""
        code = normalize_code(code)
        coupons = self.list_coupons()
        remaining = [c for c in coupons if c.code != code]

        if len(remaining) == len(coupons):
            raise ValueError("Coupon not found")

        self._write_coupons(remaining)
        logger.info("Deleted coupon %s", code)
        return True

    def validate_coupon(
        self,
        code: Optional[str],
        order_amount: float,
        now: Optional[datetime] = None
    ) -> CouponDiscount:
        """
        Validate a coupon code against an order amount.

        Returns the discount the coupon grants, or raises CouponError.
        """
        if not normalize_code(code):
            raise CouponError("Coupon code is required")

        coupon = self.get_coupon(code)
        if coupon is None or not coupon.is_active:
            logger.info("Rejected coupon %s: not found", normalize_code(code))
            raise CouponError("Invalid coupon code", status_code=404)

        if coupon.is_expired(now):
            logger.info("Rejected coupon %s: expired", coupon.code)
            raise CouponError("Coupon has expired")

        if coupon.usage_limit and coupon.used_count >= coupon.usage_limit:
            logger.info("Rejected coupon %s: usage limit reached", coupon.code)
            raise CouponError("Coupon usage limit reached")

        if order_amount < coupon.min_order_amount:
            raise CouponError(
                f"Minimum order amount of {self.currency_symbol}{coupon.min_order_amount:g} "
                "required for this coupon"
            )

        if coupon.type == 'percentage':
            discount = order_amount * coupon.value / 100
            if coupon.max_discount_amount and discount > coupon.max_discount_amount:
                discount = coupon.max_discount_amount
        else:
            discount = coupon.value

        return CouponDiscount(
            code=coupon.code,
            type=coupon.type,
            value=coupon.value,
            discount=round(discount, 2),
            description=coupon.description,
        )

    def record_usage(self, code: str) -> Coupon:
        """Count one redemption of a coupon."""
        coupon = self.get_coupon(code)
        if coupon is None:
            raise ValueError("Coupon not found")
        return self.update_coupon(coupon.code, {'used_count': coupon.used_count + 1})

    def redeem_coupon(
        self,
        code: Optional[str],
        order_amount: float,
        now: Optional[datetime] = None
    ) -> CouponDiscount:
        """Validate a coupon for a placed order and count the redemption."""
        discount = self.validate_coupon(code, order_amount, now=now)
        self.record_usage(discount.code)
        logger.info("Redeemed coupon %s for %.2f", discount.code, discount.discount)
        return discount

    def _write_coupons(self, coupons: list[Coupon]):
        """Write coupons back to CSV."""
        with replace_file(self.coupons_csv_path, newline='') as f:
            writer = csv.DictWriter(f, fieldnames=self.CSV_COLUMNS)
            writer.writeheader()
            for coupon in coupons:
                writer.writerow(coupon.to_csv_row())

    def to_frame(self) -> pd.DataFrame:
        """All coupons as a DataFrame for the dashboard."""
        coupons = self.list_coupons()
        if not coupons:
            return pd.DataFrame(columns=self.CSV_COLUMNS)
        return pd.DataFrame([c.__dict__ for c in coupons], columns=self.CSV_COLUMNS)

    def get_stats(self, now: Optional[datetime] = None) -> dict:
        """Get statistics about coupons."""
        now = now or datetime.now()
        df = self.to_frame()
        if df.empty:
            return {'total': 0, 'active': 0, 'inactive': 0, 'expired': 0, 'redemptions': 0, 'by_type': {}}

        expired = sum(1 for c in self.list_coupons() if c.is_expired(now))
        active = int(df['is_active'].sum())
        return {
            'total': len(df),
            'active': active,
            'inactive': len(df) - active,
            'expired': expired,
            'redemptions': int(df['used_count'].sum()),
            'by_type': {k: int(v) for k, v in df['type'].value_counts().items()},
        }

"""Services subpackage - persisted pricing settings and coupons."""

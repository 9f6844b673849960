"""
Print-Shop Pricing Package

Pricing back end for a printing-services storefront.
Resolves delivery and packing charges from tiered thresholds, manages the
global pricing policy and checkout coupons, and computes order totals.
"""

__version__ = "1.0.0"

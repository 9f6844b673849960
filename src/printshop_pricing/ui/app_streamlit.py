"""
Streamlit admin dashboard for print-shop pricing.

Features:
- Delivery and packing threshold editor with on/off toggles
- Order total preview with trace
- Coupon list, creation and statistics
"""
import streamlit as st
import pandas as pd
from datetime import date, datetime

from printshop_pricing.config.settings import get_settings
from printshop_pricing.engine import ChargeCalculator, ChargeThreshold, OrderRequest
from printshop_pricing.services.settings_service import PricingSettingsService
from printshop_pricing.services.coupon_service import Coupon, CouponError, CouponService


st.set_page_config(
    page_title="Print-Shop Pricing",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_services():
    """Get cached service instances."""
    settings = get_settings()
    return (
        settings,
        PricingSettingsService(settings.pricing_settings_path),
        CouponService(settings.coupons_csv, currency_symbol=settings.currency_symbol),
    )


try:
    settings, pricing_service, coupon_service = get_services()
    policy = pricing_service.get_policy()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()

money = settings.currency_symbol


def thresholds_frame(thresholds: list[ChargeThreshold]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"Min Amount": t.min_amount, "Charge": t.charge} for t in thresholds],
        columns=["Min Amount", "Charge"],
    )


def frame_thresholds(df: pd.DataFrame) -> list[dict]:
    rows = df.dropna(subset=["Min Amount", "Charge"])
    return [
        {"minAmount": float(row["Min Amount"]), "charge": float(row["Charge"])}
        for _, row in rows.iterrows()
    ]


# ============================================================================
# SIDEBAR: Status
# ============================================================================
with st.sidebar:
    st.header("⚙️ Pricing Status")

    with st.container(border=True):
        st.markdown(f"**Delivery:** {'on' if policy.is_delivery_enabled else 'off'}")
        st.markdown(f"**Packing:** {'on' if policy.is_packing_enabled else 'off'}")
        if policy.updated_at:
            st.caption(f"Last updated {policy.updated_at} by {policy.last_updated_by or 'unknown'}")

    st.divider()

    active_coupons = coupon_service.list_active_coupons()
    if active_coupons:
        st.success(f"🏷️ **{len(active_coupons)} Coupons Active**")
    else:
        st.warning("⚠️ No active coupons")


# ============================================================================
# MAIN CONTENT: TABBED INTERFACE
# ============================================================================
st.title("Print-Shop Pricing")
st.caption(f"Data: {settings.data_dir} | {datetime.now().strftime('%Y-%m-%d')}")

tab1, tab2, tab3 = st.tabs(["💰 Delivery & Packing", "🧮 Order Preview", "🏷️ Coupons"])


# ============================================================================
# TAB 1: PRICING SETTINGS
# ============================================================================
with tab1:
    col1, col2 = st.columns(2, gap="large")

    threshold_config = {
        "Min Amount": st.column_config.NumberColumn(f"Min Amount ({money})", min_value=0.0, step=1.0),
        "Charge": st.column_config.NumberColumn(f"Charge ({money})", min_value=0.0, step=1.0),
    }

    with col1:
        st.subheader("Delivery")
        delivery_enabled = st.toggle("Charge for delivery", value=policy.is_delivery_enabled)
        delivery_df = st.data_editor(
            thresholds_frame(policy.delivery_thresholds),
            num_rows="dynamic",
            column_config=threshold_config,
            hide_index=True,
            use_container_width=True,
            key="delivery_editor"
        )
        r1, r2 = st.columns(2)
        regional_tn = r1.number_input(
            f"Regional charge, {settings.home_state}", min_value=0.0,
            value=float(policy.regional_delivery_charge_tn), step=1.0
        )
        regional_outside = r2.number_input(
            f"Regional charge, outside {settings.home_state}", min_value=0.0,
            value=float(policy.regional_delivery_charge_outside_tn), step=1.0
        )

    with col2:
        st.subheader("Packing")
        packing_enabled = st.toggle("Charge for packing", value=policy.is_packing_enabled)
        packing_df = st.data_editor(
            thresholds_frame(policy.packing_thresholds),
            num_rows="dynamic",
            column_config=threshold_config,
            hide_index=True,
            use_container_width=True,
            key="packing_editor"
        )

    updates = {
        "deliveryThresholds": frame_thresholds(delivery_df),
        "packingThresholds": frame_thresholds(packing_df),
        "isDeliveryEnabled": delivery_enabled,
        "isPackingEnabled": packing_enabled,
        "regionalDeliveryChargeTN": regional_tn,
        "regionalDeliveryChargeOutsideTN": regional_outside,
    }

    check = pricing_service.validate_policy(pricing_service.merge_updates(updates))
    for error in check.errors:
        st.error(error)
    for warning in check.warnings:
        st.warning(warning)

    editor = st.text_input("Your name", value="admin")
    if st.button("💾 Save Settings", type="primary", disabled=not check.valid):
        try:
            pricing_service.update_policy(updates, updated_by=editor or None)
            st.toast("Pricing settings updated")
            st.rerun()
        except ValueError as e:
            st.error(str(e))


# ============================================================================
# TAB 2: ORDER PREVIEW
# ============================================================================
with tab2:
    c1, c2, c3 = st.columns(3)
    with c1:
        subtotal = st.number_input(f"Subtotal ({money})", min_value=0.0, value=250.0, step=10.0)
    with c2:
        state = st.text_input("Delivery state", value=settings.home_state)
    with c3:
        coupon_code = st.text_input("Coupon code", value="")

    coupon = None
    if coupon_code.strip():
        try:
            coupon = coupon_service.validate_coupon(coupon_code, subtotal)
        except CouponError as e:
            st.warning(e.message)

    calculator = ChargeCalculator(policy, tax_rate=settings.tax_rate, home_state=settings.home_state)
    totals = calculator.calculate(OrderRequest(subtotal=subtotal, state=state, coupon_code=coupon_code), coupon)

    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Delivery", f"{money}{totals.delivery_charge + totals.regional_charge:,.2f}")
    m2.metric("Packing", f"{money}{totals.packing_charge:,.2f}")
    m3.metric("Discount", f"{money}{totals.discount:,.2f}")
    m4.metric("Total", f"{money}{totals.total:,.2f}")

    if totals.amount_to_free_delivery:
        st.info(f"Add {money}{totals.amount_to_free_delivery:,.2f} for free delivery")
    for warning in totals.warnings:
        st.warning(warning)

    with st.expander("📊 View Calculation Trace"):
        st.text(totals.get_trace_text())

    # Charge curve over a range of subtotals
    with st.expander("📈 Charges by Subtotal"):
        top = max([t.min_amount for t in policy.delivery_thresholds + policy.packing_thresholds] + [subtotal, 100])
        points = [round(top * 1.25 * i / 50, 2) for i in range(51)]
        curve = pd.DataFrame({
            "Subtotal": points,
            "Delivery": [calculator.delivery_charge(p) for p in points],
            "Packing": [calculator.packing_charge(p) for p in points],
        }).set_index("Subtotal")
        st.line_chart(curve)


# ============================================================================
# TAB 3: COUPONS
# ============================================================================
with tab3:
    stats = coupon_service.get_stats()
    s1, s2, s3, s4 = st.columns(4)
    s1.metric("Coupons", stats["total"])
    s2.metric("Active", stats["active"])
    s3.metric("Expired", stats["expired"])
    s4.metric("Redemptions", stats["redemptions"])

    coupons_df = coupon_service.to_frame()
    if coupons_df.empty:
        st.info("No coupons yet.")
    else:
        st.dataframe(coupons_df, use_container_width=True, hide_index=True)
        st.download_button(
            "📥 CSV",
            data=coupons_df.to_csv(index=False),
            file_name="coupons.csv",
            mime="text/csv"
        )

    with st.expander("➕ New Coupon"):
        with st.form("new_coupon", clear_on_submit=True):
            f1, f2, f3 = st.columns(3)
            code = f1.text_input("Code")
            coupon_type = f2.selectbox("Type", ["percentage", "fixed", "free-delivery"])
            value = f3.number_input("Value", min_value=0.0, step=1.0)
            f4, f5, f6 = st.columns(3)
            min_order = f4.number_input(f"Min order ({money})", min_value=0.0, step=10.0)
            max_discount = f5.number_input(f"Max discount ({money}, 0 = none)", min_value=0.0, step=10.0)
            usage_limit = f6.number_input("Usage limit (0 = none)", min_value=0, step=1)
            expiry = st.date_input("Expiry date", value=None, min_value=date.today())
            description = st.text_input("Description")

            if st.form_submit_button("Create Coupon", type="primary"):
                try:
                    coupon_service.create_coupon(Coupon(
                        code=code,
                        type=coupon_type,
                        value=value,
                        min_order_amount=min_order,
                        max_discount_amount=max_discount or None,
                        usage_limit=int(usage_limit) or None,
                        expiry_date=expiry.isoformat() if expiry else None,
                        description=description or None,
                    ))
                    st.toast(f"Coupon {code.upper()} created")
                    st.rerun()
                except ValueError as e:
                    st.error(str(e))

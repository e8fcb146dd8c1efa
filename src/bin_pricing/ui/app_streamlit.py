"""
Streamlit quote preview for bin and dumpster cleaning requests.

Features:
- Request form for residential, commercial and HOA properties
- Price, estimate range and itemized breakdown
- Floor adjustments and manual review reasons
- Rate table viewer and CSV export of the quote
"""
import streamlit as st
import pandas as pd
import sys
from pathlib import Path
from datetime import datetime

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from bin_pricing.engine import Frequency, PropertyCategory, QuoteEngine, QuoteValidationError, build_request
from bin_pricing.config.settings import get_settings
from bin_pricing.rates.load_rate_card import load_rate_tables


st.set_page_config(
    page_title="Bin Cleaning Quote",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_engine():
    """Get cached engine instance."""
    return QuoteEngine(load_rate_tables(get_settings().rate_card_csv))


try:
    engine = get_engine()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


CATEGORY_LABELS = {
    PropertyCategory.RESIDENTIAL: "Residential",
    PropertyCategory.COMMERCIAL: "Commercial",
    PropertyCategory.HOA: "HOA / Neighborhood",
}

COMMERCIAL_SUBTYPES = ["Office Building", "Restaurant", "Retail", "Apartment Complex", "Other"]


# ============================================================================
# SIDEBAR: Service Request
# ============================================================================
with st.sidebar:
    st.header("🗑️ Service Request")

    with st.container(border=True):
        category = st.radio(
            "Property Type",
            options=list(PropertyCategory),
            format_func=lambda c: CATEGORY_LABELS[c],
        )
        frequency = st.selectbox(
            "Cleaning Frequency",
            options=list(Frequency),
            format_func=lambda f: f.value,
        )

        commercial_subtype = None
        has_pad_cleaning = False
        hoa_unit_count = None

        if category == PropertyCategory.RESIDENTIAL:
            unit_count = st.number_input("Number of Bins", min_value=1, value=1, step=1)
        elif category == PropertyCategory.COMMERCIAL:
            commercial_subtype = st.selectbox("Business Type", COMMERCIAL_SUBTYPES)
            unit_count = st.number_input("Number of Dumpsters", min_value=1, value=1, step=1)
            has_pad_cleaning = st.checkbox("Dumpster pad cleaning")
        else:
            hoa_unit_count = st.number_input("Housing Units", min_value=1, value=10, step=1)
            unit_count = st.number_input("Number of Bins", min_value=1, value=1, step=1)

        special_requirements = st.text_area("Special Requirements", placeholder="Grease traps, gated access...")


# ============================================================================
# MAIN CONTENT: TABBED INTERFACE
# ============================================================================
st.title("Bin Cleaning Quote")
st.caption(f"Rates: {engine.rates.source} | {datetime.now().strftime('%Y-%m-%d')}")

tab1, tab2 = st.tabs(["💲 Quote", "📋 Rate Tables"])


# ============================================================================
# TAB 1: QUOTE
# ============================================================================
with tab1:
    try:
        request = build_request(
            property_category=category,
            frequency=frequency,
            unit_count=int(unit_count),
            hoa_unit_count=int(hoa_unit_count) if hoa_unit_count is not None else None,
            commercial_subtype=commercial_subtype,
            has_pad_cleaning=has_pad_cleaning,
            special_requirements=special_requirements,
        )
    except QuoteValidationError as e:
        st.error(str(e))
        st.stop()

    result = engine.calculate(request)

    col1, col2 = st.columns([1.4, 1.6], gap="large")

    with col1:
        with st.container(border=True):
            m1, m2 = st.columns(2)
            m1.metric("Monthly Price", f"${result.final_price:,.2f}")
            m2.metric("Estimate Range", f"${result.low_estimate:,} – ${result.high_estimate:,}")

            if result.minimum_floor_applied:
                st.caption(f"Calculated ${result.calculated_price:,.2f} before minimum floor")

            for reason in result.floor_reasons:
                st.info(reason)

            st.divider()

            if result.requires_manual_review:
                st.warning("**A specialist will contact you** to confirm this quote.")
                for reason in result.review_reasons:
                    st.markdown(f"- {reason}")
            else:
                st.success("✅ Ready for automatic checkout")

    with col2:
        st.subheader("Breakdown")
        breakdown = result.breakdown
        breakdown_df = pd.DataFrame([
            {'Item': 'Unit cleaning', 'Amount': f"${breakdown.unit_cleaning:,.2f}"},
            {'Item': 'Pad cleaning', 'Amount': f"${breakdown.pad_cleaning:,.2f}"},
            {'Item': 'Frequency multiplier', 'Amount': f"×{breakdown.frequency_multiplier}"},
            {'Item': 'Total', 'Amount': f"${breakdown.total:,.2f}"},
        ])
        st.dataframe(breakdown_df, use_container_width=True, hide_index=True)

        with st.expander("🔍 Pricing Steps"):
            for t in result.trace:
                if t.value:
                    st.caption(f"**{t.step}**: {t.description} = `{t.value}`")
                else:
                    st.caption(f"**{t.step}**: {t.description}")

        export_df = pd.json_normalize(result.to_dict())
        st.download_button(
            "📥 CSV",
            data=export_df.to_csv(index=False),
            file_name=f"quote_{category.value}_{datetime.now().strftime('%Y%m%d')}.csv",
            mime="text/csv",
        )


# ============================================================================
# TAB 2: RATE TABLES
# ============================================================================
with tab2:
    rates = engine.rates

    st.subheader("Frequency Multipliers")
    st.dataframe(
        pd.DataFrame([{'Frequency': f.value, 'Multiplier': m} for f, m in rates.frequency_multipliers.items()]),
        use_container_width=True, hide_index=True
    )

    st.subheader("Minimum Floors")
    floors_df = pd.DataFrame({
        key: {f.value: v for f, v in table.items()}
        for key, table in rates.minimum_floors.items()
    })
    st.dataframe(floors_df, use_container_width=True)
    st.caption(f"Pad cleaning minimum: ${rates.pad_floor:,.0f}/month")

    if st.button("🔄 Reload Rate Card", type="secondary"):
        engine.reload_rates(load_rate_tables(get_settings().rate_card_csv))
        st.toast("Rate card reloaded")
        st.rerun()

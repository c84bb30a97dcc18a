import logging

import altair as alt
import pandas as pd
import streamlit as st
from streamlit_searchbox import st_searchbox

from utils.classifier import COLOR_MODES, DEFAULT_MODE, ParcelClassifier
from utils.db import get_connection, search_parcels
from utils.formatters import format_currency, format_number, format_percentage, format_text
from utils.map_layers import ParcelMapModel

logger = logging.getLogger(__name__)

# Access shared state (loads once per app)
try:
    conn, sources, store = get_connection()
except Exception as e:
    logger.exception("Lookup initialization failed")
    st.error(f"⚠️ Data failed to load: {e}")
    st.stop()

# Share the map page's active mode when it has been set
classifier = st.session_state.get('classifier') or ParcelClassifier(DEFAULT_MODE)
model = ParcelMapModel(sources.parcels, store, ParcelClassifier(classifier.mode))


def search(searchterm: str) -> list[tuple[str, str]]:
    """Search callback for the search box."""
    try:
        return search_parcels(conn, searchterm)
    except Exception as e:
        return [(f"Error searching parcels: {str(e)}", None)]


def create_source_chart(df: pd.DataFrame) -> alt.Chart:
    """
    Create a bar chart of how many parcels resolve to each data source.

    Args:
        df: DataFrame with label and parcels columns

    Returns:
        Altair Chart object
    """
    return alt.Chart(df).mark_bar(color='#224428').encode(
        x=alt.X('label:N', title='Data Source', sort=None, axis=alt.Axis(labelAngle=0)),
        y=alt.Y('parcels:Q', title='Parcels'),
        tooltip=[
            alt.Tooltip('label:N', title='Source'),
            alt.Tooltip('parcels:Q', title='Parcels', format=',')
        ]
    ).properties(
        title='Hybrid Matching',
        width='container',
        height=250
    ).configure_title(
        fontSize=14,
        anchor='start'
    )


def create_category_chart(df: pd.DataFrame, mode_label: str) -> alt.Chart:
    """
    Create a bar chart of colored parcels per category, using the scheme colors.

    Args:
        df: DataFrame with category, color and parcels columns
        mode_label: Display label of the active color mode

    Returns:
        Altair Chart object
    """
    color_scale = alt.Scale(domain=list(df['category']), range=list(df['color']))

    return alt.Chart(df).mark_bar().encode(
        x=alt.X('category:N', title=None, sort=list(df['category']), axis=alt.Axis(labelAngle=-30)),
        y=alt.Y('parcels:Q', title='Parcels'),
        color=alt.Color('category:N', scale=color_scale, legend=None),
        tooltip=[
            alt.Tooltip('category:N', title='Category'),
            alt.Tooltip('parcels:Q', title='Parcels', format=',')
        ]
    ).properties(
        title=f'{mode_label} Categories',
        width='container',
        height=250
    ).configure_title(
        fontSize=14,
        anchor='start'
    )


st.title("Parcel Lookup")

st.caption(
    f"📍 {format_number(len(model.features))} parcels · "
    f"{format_number(len(store.property_records))} property records · "
    f"{format_number(len(store.address_records))} address records"
)

search_col, status_col = st.columns([1, 1])
with search_col:
    selected_account = st_searchbox(
        search,
        key="parcel_search",
        placeholder="Search by address, account or subdivision",
        label="Find a Parcel",
        debounce=250,
        clear_on_submit=False,
    )

if selected_account:
    matches = [
        (feature, view)
        for feature, view in zip(model.features, model.resolved_views())
        if view.account_id == selected_account
    ]

    if matches:
        feature, view = matches[0]
        properties = feature.get('properties') or {}
        address = store.address_for(view.account_id)

        with status_col:
            st.write("")  # Spacer to align with search box label
            st.success(f"**{view.situs}**  (Account: {view.account_id})")

        left_col, right_col = st.columns(2)

        with left_col:
            st.markdown("#### Resolved Attributes")
            st.dataframe(pd.DataFrame({
                "Attribute": ["Data Source", "Situs", "Subdivision", "View", "Quality", "Value", "Year Built"],
                "Value": [
                    view.source,
                    view.situs,
                    view.subdivision,
                    view.view_category,
                    view.quality_category,
                    format_currency(view.total_value),
                    view.year_built,
                ],
            }), hide_index=True, width='stretch')

        with right_col:
            st.markdown("#### Parcel Layer")
            rows = {
                "Parcel #": format_text(properties.get('ParcelNumb')),
                "Owner": format_text(properties.get('OWNERNAME')),
                "Property Location": format_text(properties.get('PROPERTYLO')),
            }
            if address is not None:
                rows["Address Label"] = format_text(address.label)
                rows["Vacant"] = format_text(address.vacant)
            st.dataframe(pd.DataFrame({
                "Field": list(rows.keys()),
                "Value": list(rows.values()),
            }), hide_index=True, width='stretch')

            if len(matches) > 1:
                st.info(f"{len(matches)} parcel shapes share this account.")
    else:
        st.error("Parcel not found.")

# Coverage across the whole county
st.markdown("#### Coverage")
sources_df, categories_df = model.coverage_summary()
total = int(sources_df['parcels'].sum())

chart1_col, chart2_col = st.columns(2)
with chart1_col:
    st.altair_chart(create_source_chart(sources_df), width='stretch')
    if total:
        matched = int(sources_df.loc[sources_df['source'] == 'property', 'parcels'].sum())
        st.caption(f"{format_percentage(matched / total * 100)} of parcels have detailed property data")

with chart2_col:
    mode_label = COLOR_MODES[model.classifier.mode]['label'] if model.classifier.mode in COLOR_MODES else model.classifier.mode
    if categories_df.empty:
        st.info("No categories for the current color mode")
    else:
        st.altair_chart(create_category_chart(categories_df, mode_label), width='stretch')

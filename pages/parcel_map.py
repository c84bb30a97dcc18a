import logging

import pandas as pd
import streamlit as st

from components.glossary_dialog import render_glossary_button, render_legend_swatches
from utils.classifier import COLOR_MODES, DEFAULT_MODE, MODE_DISPLAY_ORDER, ParcelClassifier
from utils.db import get_connection
from utils.formatters import format_currency, format_number
from utils.map_layers import ParcelMapModel, build_address_geojson, build_subdivision_geojson

logger = logging.getLogger(__name__)

# Zoom presets: [lat, lon], zoom
ZOOM_PRESETS = {
    "county": {"label": "Gunnison County", "center": [38.7, -106.9], "zoom": 10},
    "gunnison": {"label": "Gunnison", "center": [38.545, -106.925], "zoom": 14},
    "crested_butte": {"label": "Crested Butte", "center": [38.9, -106.97], "zoom": 14},
}

DEFAULT_ZOOM = "county"

SOURCE_DISPLAY_NAMES = {
    "property": "property attributes",
    "parcels": "parcels",
    "subdivisions": "subdivisions",
    "addresses": "address points",
}

# Access shared state (loads once per app)
try:
    _, sources, store = get_connection()
except Exception as e:
    logger.exception("Map initialization failed")
    st.error(f"⚠️ Data failed to load: {e}")
    st.stop()


@st.cache_data
def build_overlay_layers(_sources) -> tuple[dict, dict]:
    """Subdivision and address overlays do not depend on the color mode."""
    return build_subdivision_geojson(_sources.subdivisions), build_address_geojson(_sources.addresses)


# One classifier per session holds the active mode
if 'classifier' not in st.session_state:
    st.session_state.classifier = ParcelClassifier(DEFAULT_MODE)

classifier = st.session_state.classifier

# Sidebar
with st.sidebar:
    st.title("Property Map")

    color_mode = st.selectbox(
        "Color by",
        options=MODE_DISPLAY_ORDER,
        format_func=lambda x: COLOR_MODES[x]["label"],
        index=MODE_DISPLAY_ORDER.index(classifier.mode) if classifier.mode in MODE_DISPLAY_ORDER else 0,
        key="color_mode_selector",
    )

    zoom_key = st.selectbox(
        "Zoom to",
        options=list(ZOOM_PRESETS.keys()),
        format_func=lambda x: ZOOM_PRESETS[x]["label"],
        index=list(ZOOM_PRESETS.keys()).index(DEFAULT_ZOOM),
    )

    show_addresses = st.toggle("Show Address Points", value=False)

model = ParcelMapModel(sources.parcels, store, classifier)
model.set_mode(color_mode)

parcels_geojson = model.parcel_geojson()
subdivisions_geojson, addresses_geojson = build_overlay_layers(sources)
sources_df, categories_df = model.coverage_summary()

with st.sidebar:
    # Legend
    st.markdown("### Legend")
    st.markdown(f"**{COLOR_MODES[color_mode]['label']}**")
    render_legend_swatches(classifier.legend())

    colored = int(categories_df["parcels"].sum())
    shown = int(sources_df["parcels"].sum())
    st.caption(f"Showing {format_number(colored)} colored of {format_number(shown)} parcels")

    counts = dict(zip(sources_df["source"], sources_df["parcels"]))
    st.caption(
        f"Property data: {format_number(counts['property'])} · "
        f"Parcel data: {format_number(counts['parcel'])} · "
        f"No data: {format_number(counts['none'])}"
    )

    if model.account_field is None and parcels_geojson["features"]:
        st.warning("Parcels carry no recognized account number; nothing can be colored.")

    # Glossary
    st.markdown("---")
    render_glossary_button()

if sources.failures:
    degraded = ", ".join(SOURCE_DISPLAY_NAMES[name] for name in sorted(sources.failures))
    st.warning(f"Some data could not be loaded ({degraded}). The map is shown with reduced coverage.")

# Import map component
from components.maplibre_parcel_map import render_property_map

preset = ZOOM_PRESETS[zoom_key]
component_value = render_property_map(
    layers={
        "parcels": parcels_geojson,
        "subdivisions": subdivisions_geojson,
        "addresses": addresses_geojson,
    },
    center=preset["center"],
    zoom=preset["zoom"],
    show_addresses=show_addresses,
)

# Details for the clicked parcel
selected_account = component_value.get('selected_account') if component_value else None

if selected_account:
    view = next((v for v in model.resolved_views() if v.account_id == selected_account), None)
    if view is not None:
        st.markdown(f"#### Account {selected_account}")
        details = pd.DataFrame({
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
        })
        st.dataframe(details, hide_index=True, width='stretch')
else:
    st.caption("Click a parcel to see its details.")

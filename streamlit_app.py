import logging
import os

import streamlit as st

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

st.set_page_config(layout="wide", page_title="Gunnison County Property Map")

# Define pages
pages = [
    st.Page("pages/home.py", title="Home", icon="🏠", default=True),
    st.Page("pages/parcel_map.py", title="Property Map", icon="🗺️"),
    st.Page("pages/parcel_lookup.py", title="Parcel Lookup", icon="🔍"),
]

# Top bar navigation
pg = st.navigation(pages, position="top")
pg.run()

import streamlit as st

st.title("Gunnison County Property Map")

st.markdown("""
An interactive map of Gunnison County tax parcels, colored by assessed value,
exterior quality or view description.
""")

st.markdown("### Features")

col1, col2 = st.columns(2)

with col1:
    st.markdown("""
    **Property Map**

    Color parcels by a selected attribute. Parcels with detailed property
    attributes use them; the rest fall back to the values recorded on the
    parcel layer itself.
    """)

with col2:
    st.markdown("""
    **Parcel Lookup**

    Search by address, account number or subdivision and see which data
    source each parcel resolves to.
    """)

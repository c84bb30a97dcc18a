"""Reusable glossary dialog component for displaying term definitions."""

import streamlit as st

from utils.classifier import ParcelClassifier


def render_glossary_button(button_label="📚 Glossary", help_text="View color modes and data sources", glossary_terms=None):
    """
    Render a button that opens a glossary dialog when clicked.

    Args:
        button_label: Text for the button (default: "📚 Glossary")
        help_text: Tooltip text for the button
        glossary_terms: Optional custom glossary dict (defaults to GLOSSARY_TERMS from glossary_definitions)
    """
    if glossary_terms is None:
        from components.glossary_definitions import GLOSSARY_TERMS
        glossary_terms = GLOSSARY_TERMS

    # Button to trigger dialog
    if st.button(button_label, help=help_text, use_container_width=True):
        show_glossary_dialog(glossary_terms)


def render_legend_swatches(entries: list[tuple[str, str]]):
    """Render (label, color) legend entries as colored swatches."""
    for label, color in entries:
        st.markdown(
            f'<div style="display: flex; align-items: center; gap: 8px; font-size: 13px;">'
            f'<div style="width: 16px; height: 16px; border-radius: 3px; background-color: {color};"></div>'
            f'<span>{label}</span></div>',
            unsafe_allow_html=True,
        )


@st.dialog("Glossary", width="large")
def show_glossary_dialog(glossary_terms):
    """
    Display glossary content in a modal dialog.

    Args:
        glossary_terms: Dictionary of glossary terms organized by category
    """
    st.markdown("### Color Modes and Data Sources")

    for category_key, category_data in glossary_terms.items():
        icon = category_data.get('icon', '•')
        label = category_data.get('label', category_key.title())

        with st.expander(f"{icon} {label}", expanded=True):
            terms = category_data.get('terms', {})
            for term_name, term_data in terms.items():
                st.markdown(f"**{term_name}**")

                if 'definition' in term_data:
                    st.markdown(term_data['definition'])

                if 'note' in term_data:
                    st.caption(term_data['note'])

                if 'legend_mode' in term_data:
                    render_legend_swatches(ParcelClassifier(term_data['legend_mode']).legend())
                    st.markdown("")

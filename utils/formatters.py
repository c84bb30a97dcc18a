"""Shared formatting helper functions for display values."""

import html

import pandas as pd


def format_currency(value) -> str:
    """Format a numeric value as currency."""
    if value is None or pd.isna(value):
        return "N/A"
    try:
        return f"${value:,.0f}"
    except (ValueError, TypeError):
        return "N/A"


def format_percentage(value, decimals=1) -> str:
    """Format a numeric value as percentage."""
    if value is None or pd.isna(value):
        return "N/A"
    try:
        return f"{value:.{decimals}f}%"
    except (ValueError, TypeError):
        return "N/A"


def format_number(value, decimals=0) -> str:
    """Format a numeric value with commas."""
    if value is None or pd.isna(value):
        return "N/A"
    try:
        if decimals == 0:
            return f"{value:,.0f}"
        else:
            return f"{value:,.{decimals}f}"
    except (ValueError, TypeError):
        return "N/A"


def format_text(value, default="N/A") -> str:
    """Format an optional attribute, substituting a placeholder for blanks."""
    if value is None:
        return default
    if isinstance(value, float) and pd.isna(value):
        return default
    text = str(value).strip()
    return text if text else default


def format_popup_sections(sections: list[tuple[str, list[tuple[str, str]]]]) -> str:
    """
    Render titled label/value sections as popup HTML.

    Every title, label and value is HTML-escaped.

    Args:
        sections: List of (title, [(label, value), ...])

    Returns:
        HTML string for the map popup
    """
    blocks = []
    for title, rows in sections:
        lines = [f"<strong>{html.escape(title)}</strong>"]
        lines.extend(f"{html.escape(label)}: {html.escape(str(value))}" for label, value in rows)
        blocks.append("<br>".join(lines))
    return "<br><br>".join(blocks)

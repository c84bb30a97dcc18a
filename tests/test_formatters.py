import math

from utils.formatters import (
    format_currency,
    format_number,
    format_percentage,
    format_popup_sections,
    format_text,
)


def test_format_currency():
    assert format_currency(350000.0) == "$350,000"
    assert format_currency(0) == "$0"
    assert format_currency(None) == "N/A"
    assert format_currency(math.nan) == "N/A"
    assert format_currency("abc") == "N/A"


def test_format_number_and_percentage():
    assert format_number(12345) == "12,345"
    assert format_number(1.5, decimals=2) == "1.50"
    assert format_percentage(42.123) == "42.1%"
    assert format_percentage(None) == "N/A"


def test_format_text():
    assert format_text(" Good ") == "Good"
    assert format_text("") == "N/A"
    assert format_text(None) == "N/A"
    assert format_text(math.nan) == "N/A"
    assert format_text(2023) == "2023"
    assert format_text(None, default="Unknown") == "Unknown"


def test_format_popup_sections():
    popup = format_popup_sections([
        ("Parcel Information", [("Account", "123")]),
        ("Address Info", [("Label", "<Elk & Main>")]),
    ])

    assert popup == (
        "<strong>Parcel Information</strong><br>Account: 123"
        "<br><br>"
        "<strong>Address Info</strong><br>Label: &lt;Elk &amp; Main&gt;"
    )

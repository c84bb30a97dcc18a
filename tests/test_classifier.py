import pytest

from utils.classifier import (
    COLOR_MODES,
    DEFAULT_MODE,
    QUALITY_SCHEME,
    TRANSPARENT_STYLE,
    VALUE_SCHEME,
    VIEW_SCHEME,
    ParcelClassifier,
    ParcelStyle,
    classify_value,
)
from utils.resolver import SOURCE_NONE, SOURCE_PARCEL, SOURCE_PROPERTY, ResolvedAttributeView


def property_view(**fields):
    return ResolvedAttributeView(source=SOURCE_PROPERTY, account_id="1", **fields)


def parcel_view(**fields):
    return ResolvedAttributeView(source=SOURCE_PARCEL, account_id="1", **fields)


@pytest.mark.parametrize(
    "value,bucket",
    [
        (1, "Low"),
        (199_999.99, "Low"),
        (200_000, "Medium"),
        (350_000, "Medium"),
        (399_999, "Medium"),
        (400_000, "High"),
        (799_999, "High"),
        (800_000, "Very High"),
        (5_000_000, "Very High"),
        (-10, "Low"),
        (0, None),
        (0.0, None),
    ],
)
def test_classify_value_half_open_buckets(value, bucket):
    assert classify_value(value) == bucket


def test_default_mode_is_total_value():
    assert ParcelClassifier().mode == DEFAULT_MODE == "SumOfACTUALVALUE"


@pytest.mark.parametrize("mode", ["SumOfACTUALVALUE", "TOTALACTUA"])
def test_value_modes_color_property_and_parcel_views(mode):
    classifier = ParcelClassifier(mode)

    assert classifier.style(property_view(total_value=350_000)) == ParcelStyle(
        VALUE_SCHEME["Medium"], 1, VALUE_SCHEME["Medium"], 0.8
    )
    assert classifier.style(parcel_view(total_value=850_000)).fill_color == VALUE_SCHEME["Very High"]


@pytest.mark.parametrize("mode", list(COLOR_MODES))
def test_zero_value_and_no_data_are_transparent_in_every_mode(mode):
    classifier = ParcelClassifier(mode)

    assert classifier.style(property_view(total_value=0.0)) == TRANSPARENT_STYLE
    assert classifier.style(parcel_view(total_value=0.0)) == TRANSPARENT_STYLE
    assert classifier.style(ResolvedAttributeView(source=SOURCE_NONE)) == TRANSPARENT_STYLE
    assert classifier.style(None) == TRANSPARENT_STYLE


def test_quality_mode_colors_known_property_categories():
    classifier = ParcelClassifier("EXT CONDITION")

    for category, color in QUALITY_SCHEME.items():
        style = classifier.style(property_view(quality_category=category))
        assert style == ParcelStyle(color, 1, color, 0.8)


def test_view_mode_colors_known_property_categories():
    classifier = ParcelClassifier("ATTRIBUTESUBTYPE")

    for category, color in VIEW_SCHEME.items():
        assert classifier.style(property_view(view_category=category)).fill_color == color


@pytest.mark.parametrize("mode,field", [("EXT CONDITION", "quality_category"), ("ATTRIBUTESUBTYPE", "view_category")])
def test_categorical_modes_never_color_parcel_views(mode, field):
    classifier = ParcelClassifier(mode)
    scheme = COLOR_MODES[mode]["scheme"]
    category = next(iter(scheme))

    view = parcel_view(total_value=500_000, **{field: category})

    assert classifier.style(view) == TRANSPARENT_STYLE
    assert classifier.category(view) is None


@pytest.mark.parametrize("value", ["Unknown", "", "Spectacular", "good"])
def test_categorical_mode_unrecognized_values_are_transparent(value):
    classifier = ParcelClassifier("EXT CONDITION")

    assert classifier.style(property_view(quality_category=value)) == TRANSPARENT_STYLE


def test_unknown_mode_fails_closed():
    classifier = ParcelClassifier("LOT_SIZE")

    assert classifier.style(property_view(total_value=350_000, quality_category="Good")) == TRANSPARENT_STYLE
    assert classifier.legend() == []


def test_set_mode_switches_styles():
    classifier = ParcelClassifier()
    view = property_view(total_value=350_000, quality_category="Good")

    assert classifier.style(view).fill_color == VALUE_SCHEME["Medium"]
    classifier.set_mode("EXT CONDITION")
    assert classifier.style(view).fill_color == QUALITY_SCHEME["Good"]
    classifier.set_mode("nonsense")
    assert classifier.style(view) == TRANSPARENT_STYLE


def test_style_is_idempotent():
    classifier = ParcelClassifier("ATTRIBUTESUBTYPE")
    view = property_view(view_category="SCENIC OR ABOVE AVERAGE")

    assert classifier.style(view) == classifier.style(view)


def test_classifiers_are_independent():
    quality = ParcelClassifier("EXT CONDITION")
    value = ParcelClassifier("SumOfACTUALVALUE")
    view = property_view(total_value=900_000, quality_category="Poor")

    assert quality.style(view).fill_color == QUALITY_SCHEME["Poor"]
    assert value.style(view).fill_color == VALUE_SCHEME["Very High"]


def test_value_legend_has_range_labels_in_order():
    legend = ParcelClassifier("TOTALACTUA").legend()

    assert legend == [
        ("Low (< $200K)", VALUE_SCHEME["Low"]),
        ("Medium ($200K-$400K)", VALUE_SCHEME["Medium"]),
        ("High ($400K-$800K)", VALUE_SCHEME["High"]),
        ("Very High (> $800K)", VALUE_SCHEME["Very High"]),
    ]


def test_categorical_legend_lists_scheme():
    assert ParcelClassifier("EXT CONDITION").legend() == list(QUALITY_SCHEME.items())


def test_style_properties_for_map_layer():
    assert TRANSPARENT_STYLE.to_properties() == {
        "strokeColor": "transparent",
        "strokeWeight": 0,
        "fillColor": "transparent",
        "fillOpacity": 0.0,
    }
    assert TRANSPARENT_STYLE.is_transparent
    assert not ParcelStyle.solid("#FFD700").is_transparent

"""Color classification of resolved parcel views per selectable mode."""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from utils.resolver import SOURCE_NONE, SOURCE_PROPERTY, UNKNOWN, ResolvedAttributeView

logger = logging.getLogger(__name__)

# Yellow -> crimson ramp shared by every mode
VALUE_SCHEME = {
    "Low": "#FFD700",
    "Medium": "#FFA500",
    "High": "#FF6347",
    "Very High": "#DC143C",
}

QUALITY_SCHEME = {
    "Poor": "#FFD700",
    "Fair": "#FFA500",
    "Average": "#FF6347",
    "Good": "#DC143C",
    "Very Good": "#B22222",
    "Excellent": "#8B0000",
}

VIEW_SCHEME = {
    "LIMITED OR BELOW AVERAGE": "#FFD700",
    "TYPICAL OR AVERAGE": "#FFA500",
    "SCENIC OR ABOVE AVERAGE": "#FF6347",
    "EXCELLENT OR SUPERIOR": "#DC143C",
}

# Half-open value ranges: [lower, upper)
VALUE_BREAKPOINTS = np.array([200_000, 400_000, 800_000], dtype=float)
VALUE_BUCKETS = ["Low", "Medium", "High", "Very High"]
VALUE_BUCKET_LABELS = {
    "Low": "Low (< $200K)",
    "Medium": "Medium ($200K-$400K)",
    "High": "High ($400K-$800K)",
    "Very High": "Very High (> $800K)",
}

# Mode configuration; keys double as UI selection identifiers
COLOR_MODES = {
    "SumOfACTUALVALUE": {
        "label": "Total Value",
        "kind": "value",
        "attribute": "total_value",
        "scheme": VALUE_SCHEME,
    },
    "TOTALACTUA": {
        "label": "Parcel Total Value",
        "kind": "value",
        "attribute": "total_value",
        "scheme": VALUE_SCHEME,
    },
    "EXT CONDITION": {
        "label": "Quality",
        "kind": "categorical",
        "attribute": "quality_category",
        "scheme": QUALITY_SCHEME,
    },
    "ATTRIBUTESUBTYPE": {
        "label": "View Description",
        "kind": "categorical",
        "attribute": "view_category",
        "scheme": VIEW_SCHEME,
    },
}

# Most parcels carry a value, so value mode is the default
DEFAULT_MODE = "SumOfACTUALVALUE"

MODE_DISPLAY_ORDER = ["SumOfACTUALVALUE", "TOTALACTUA", "EXT CONDITION", "ATTRIBUTESUBTYPE"]

COLORED_STROKE_WEIGHT = 1
COLORED_FILL_OPACITY = 0.8


@dataclass(frozen=True)
class ParcelStyle:
    stroke_color: str
    stroke_weight: float
    fill_color: str
    fill_opacity: float

    @classmethod
    def solid(cls, color: str) -> "ParcelStyle":
        return cls(color, COLORED_STROKE_WEIGHT, color, COLORED_FILL_OPACITY)

    @property
    def is_transparent(self) -> bool:
        return self.fill_opacity == 0 and self.stroke_weight == 0

    def to_properties(self) -> dict:
        """Style as GeoJSON feature properties for the map layer paint expressions."""
        return {
            "strokeColor": self.stroke_color,
            "strokeWeight": self.stroke_weight,
            "fillColor": self.fill_color,
            "fillOpacity": self.fill_opacity,
        }


TRANSPARENT_STYLE = ParcelStyle("transparent", 0, "transparent", 0.0)


def classify_value(value: float) -> Optional[str]:
    """
    Bucket a total value into Low/Medium/High/Very High.

    Breakpoints sit in the upper bucket: 200000 is Medium, 800000 is Very High.
    Zero means "no value" and returns None.
    """
    if value == 0:
        return None
    return VALUE_BUCKETS[int(np.searchsorted(VALUE_BREAKPOINTS, value, side="right"))]


class ParcelClassifier:
    """
    Maps resolved parcel views to styles for the active color mode.

    The active mode is the only mutable state; one classifier per map
    session.
    """

    def __init__(self, mode: str = DEFAULT_MODE, color_modes: Optional[dict] = None):
        self.color_modes = color_modes if color_modes is not None else COLOR_MODES
        self.mode = mode

    def set_mode(self, mode: str) -> None:
        if mode not in self.color_modes:
            logger.warning("Unknown color mode %r; parcels will render transparent", mode)
        self.mode = mode

    @property
    def mode_config(self) -> Optional[dict]:
        return self.color_modes.get(self.mode)

    def category(self, view: Optional[ResolvedAttributeView]) -> Optional[str]:
        """
        Category key for a view under the active mode.

        Returns:
            Scheme key, or None when the parcel should not be colored
        """
        config = self.mode_config
        if config is None or view is None:
            return None

        if config["kind"] == "categorical":
            # Only detailed property data is colored in categorical modes
            if view.source != SOURCE_PROPERTY:
                return None
            value = getattr(view, config["attribute"], None)
            if not value or value == UNKNOWN or value not in config["scheme"]:
                return None
            return value

        if config["kind"] == "value":
            if view.source == SOURCE_NONE:
                return None
            return classify_value(view.total_value)

        return None

    def style(self, view: Optional[ResolvedAttributeView]) -> ParcelStyle:
        category = self.category(view)
        if category is None:
            return TRANSPARENT_STYLE
        return ParcelStyle.solid(self.mode_config["scheme"][category])

    def legend(self) -> list[tuple[str, str]]:
        """
        Legend entries for the active mode.

        Returns:
            Ordered list of (label, color); empty for an unknown mode
        """
        config = self.mode_config
        if config is None:
            return []

        if config["kind"] == "value":
            return [(VALUE_BUCKET_LABELS[bucket], config["scheme"][bucket]) for bucket in VALUE_BUCKETS]

        return list(config["scheme"].items())

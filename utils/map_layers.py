"""Styled GeoJSON layers for the map component."""

import logging
from typing import Mapping, Optional

import pandas as pd

from utils.classifier import ParcelClassifier
from utils.formatters import format_currency, format_popup_sections, format_text
from utils.records import AddressRecord, FeatureRecordStore
from utils.resolver import (
    SOURCE_NONE,
    SOURCE_PARCEL,
    SOURCE_PROPERTY,
    HybridResolver,
    ResolvedAttributeView,
)

logger = logging.getLogger(__name__)

# Subdivision boundaries are drawn as plain outlines
SUBDIVISION_STYLE = {
    "strokeColor": "#666666",
    "strokeWeight": 1,
    "fillColor": "transparent",
    "fillOpacity": 0,
}

ADDRESS_POINT_STYLE = {
    "radius": 1,
    "strokeColor": "#FF6B6B",
    "strokeWeight": 0.5,
    "fillColor": "#FF6B6B",
    "fillOpacity": 0.3,
}

SOURCE_LABELS = {
    SOURCE_PROPERTY: "Property data",
    SOURCE_PARCEL: "Parcel data",
    SOURCE_NONE: "No data",
}


def build_parcel_popup(properties: Mapping, view: ResolvedAttributeView, address: Optional[AddressRecord]) -> str:
    """
    Build the click popup for one parcel.

    Args:
        properties: The parcel feature's own property block
        view: Resolved attributes for the parcel
        address: Matching address point, if any

    Returns:
        Popup HTML
    """
    sections = [
        ("Parcel Information", [
            ("Account", format_text(view.account_id)),
            ("Parcel #", format_text(properties.get("ParcelNumb"))),
            ("Owner", format_text(properties.get("OWNERNAME"))),
            ("Property Location", format_text(properties.get("PROPERTYLO"))),
        ]),
        ("Property Data", [
            ("Data Source", view.source),
            ("Situs", view.situs),
            ("Subdivision", view.subdivision),
            ("View", view.view_category),
            ("Quality", view.quality_category),
            ("Value", format_currency(view.total_value)),
            ("Year Built", view.year_built),
        ]),
    ]

    if address is not None:
        sections.append(("Address Info", [
            ("Label", format_text(address.label)),
            ("Vacant", format_text(address.vacant)),
        ]))

    return format_popup_sections(sections)


def build_address_popup(properties: Mapping) -> str:
    return format_popup_sections([
        ("Address Point", [
            ("Account", format_text(properties.get("ACCOUNTNO"))),
            ("Label", format_text(properties.get("Label"))),
            ("Vacant", format_text(properties.get("Vacant"))),
        ]),
    ])


def _features(collection: Optional[Mapping]) -> list:
    if not isinstance(collection, Mapping):
        return []
    return list(collection.get("features") or [])


def _has_geometry(feature) -> bool:
    return isinstance(feature, Mapping) and bool(feature.get("geometry"))


def build_subdivision_geojson(subdivisions: Mapping) -> dict:
    """Subdivision outlines with the fixed outline style."""
    features = []
    for feature in _features(subdivisions):
        if not _has_geometry(feature):
            continue
        features.append({
            "type": "Feature",
            "geometry": feature["geometry"],
            "properties": dict(SUBDIVISION_STYLE),
        })
    return {"type": "FeatureCollection", "features": features}


def build_address_geojson(addresses: Mapping) -> dict:
    """Address points with marker style and popup text."""
    features = []
    for feature in _features(addresses):
        if not _has_geometry(feature):
            continue
        properties = feature.get("properties")
        if not isinstance(properties, Mapping):
            properties = {}
        features.append({
            "type": "Feature",
            "geometry": feature["geometry"],
            "properties": {
                **ADDRESS_POINT_STYLE,
                "popup": build_address_popup(properties),
            },
        })
    return {"type": "FeatureCollection", "features": features}


class ParcelMapModel:
    """
    Joins loaded parcels with the record store and styles them per mode.

    The account field is detected once; styles are recomputed from the
    in-memory store every time parcel_geojson() is called.
    """

    def __init__(self, parcels: Mapping, store: FeatureRecordStore, classifier: Optional[ParcelClassifier] = None):
        self.features = _features(parcels)
        self.store = store
        self.classifier = classifier if classifier is not None else ParcelClassifier()
        self.resolver = HybridResolver.for_features(self.features, store)

    @property
    def account_field(self) -> Optional[str]:
        return self.resolver.account_field

    def set_mode(self, mode: str) -> None:
        logger.debug("Updating map colors to: %s", mode)
        self.classifier.set_mode(mode)

    def resolved_views(self) -> list[ResolvedAttributeView]:
        return self.resolver.resolve_all(self.features)

    def parcel_geojson(self) -> dict:
        """Build the parcel FeatureCollection styled for the active mode."""
        features = []
        for i, feature in enumerate(self.features):
            if not _has_geometry(feature):
                continue

            view = self.resolver.resolve(feature)
            properties = feature.get("properties")
            if not isinstance(properties, Mapping):
                properties = {}
            category = self.classifier.category(view)
            style = self.classifier.style(view)

            features.append({
                "type": "Feature",
                "id": i,  # Numeric ID for setFeatureState
                "geometry": feature["geometry"],
                "properties": {
                    "feature_id": i,
                    "account_id": view.account_id,
                    "source": view.source,
                    "category": category,
                    "tooltip": format_text(view.account_id),
                    "popup": build_parcel_popup(properties, view, self.store.address_for(view.account_id)),
                    **style.to_properties(),
                },
            })

        return {"type": "FeatureCollection", "features": features}

    def views_dataframe(self) -> pd.DataFrame:
        """Resolved views as a DataFrame, one row per parcel feature."""
        columns = [
            "source", "account_id", "total_value", "quality_category",
            "view_category", "situs", "subdivision", "year_built",
        ]
        rows = [view.to_dict() for view in self.resolved_views()]
        return pd.DataFrame(rows, columns=columns)

    def coverage_summary(self) -> tuple[pd.DataFrame, pd.DataFrame]:
        """
        Summarize hybrid matching and the active mode's category counts.

        Only parcels drawn on the map (those with a geometry) are counted.

        Returns:
            Tuple of (source counts with columns source/label/parcels,
            category counts with columns category/color/parcels)
        """
        views = [self.resolver.resolve(feature) for feature in self.features if _has_geometry(feature)]

        source_counts = {source: 0 for source in SOURCE_LABELS}
        category_counts = {}
        for view in views:
            source_counts[view.source] += 1
            category = self.classifier.category(view)
            if category is not None:
                category_counts[category] = category_counts.get(category, 0) + 1

        sources_df = pd.DataFrame({
            "source": list(source_counts.keys()),
            "label": [SOURCE_LABELS[source] for source in source_counts],
            "parcels": list(source_counts.values()),
        })

        scheme = (self.classifier.mode_config or {}).get("scheme", {})
        categories_df = pd.DataFrame({
            "category": list(scheme.keys()),
            "color": list(scheme.values()),
            "parcels": [category_counts.get(category, 0) for category in scheme],
        })

        logger.info(
            "Hybrid matching: %d property data, %d parcel data, %d no data",
            source_counts[SOURCE_PROPERTY], source_counts[SOURCE_PARCEL], source_counts[SOURCE_NONE],
        )
        return sources_df, categories_df

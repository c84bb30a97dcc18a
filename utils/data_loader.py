"""Loading of the four map data sources with per-source degradation."""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Mapping, Optional

import requests

from utils.tabular import ParseReport, parse_property_table

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30

SOURCE_NAMES = ("property", "parcels", "subdivisions", "addresses")


class DataUnavailableError(RuntimeError):
    """None of the map data sources could be loaded."""


def empty_collection() -> dict:
    return {"type": "FeatureCollection", "features": []}


@dataclass(frozen=True)
class SourceConfig:
    """Locations of the map data files, relative to data_dir unless absolute or URLs."""

    data_dir: str = "data"
    property_table: str = "Property_Attributes_cleaned.csv"
    parcels: str = "Taxparcelassessor_fixed.geojson"
    parcels_legacy: str = "Taxparcelassessor.geojson"
    subdivisions: str = "Subdivision.geojson"
    addresses: str = "Address.geojson"

    @classmethod
    def from_mapping(cls, overrides: Optional[Mapping] = None) -> "SourceConfig":
        """Build a config from e.g. the [data] table of Streamlit secrets; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        values = {key: str(value) for key, value in (overrides or {}).items() if key in known}
        return cls(**values)

    def locate(self, location: str) -> str:
        if is_url(location) or Path(location).is_absolute():
            return location
        if is_url(self.data_dir):
            return f"{self.data_dir.rstrip('/')}/{location}"
        return str(Path(self.data_dir) / location)


def is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def read_source_text(location: str) -> str:
    """Read a local file or fetch a URL as text."""
    if is_url(location):
        response = requests.get(location, timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
        return response.text
    return Path(location).read_text(encoding="utf-8-sig")


def load_geojson(location: str) -> dict:
    """
    Load a GeoJSON FeatureCollection.

    Raises:
        ValueError: if the document has no features list
    """
    data = json.loads(read_source_text(location))
    if not isinstance(data, dict) or not isinstance(data.get("features"), list):
        raise ValueError(f"{location} is not a GeoJSON FeatureCollection")
    return data


def load_property_table(config: SourceConfig) -> ParseReport:
    location = config.locate(config.property_table)
    logger.info("Loading property data from %s", location)
    return parse_property_table(read_source_text(location))


def load_parcels(config: SourceConfig) -> dict:
    """Load parcels from the primary path, falling back to the legacy path."""
    primary = config.locate(config.parcels)
    try:
        data = load_geojson(primary)
    except (OSError, ValueError, requests.RequestException) as e:
        legacy = config.locate(config.parcels_legacy)
        logger.info("Primary parcels file %s unavailable (%s); using %s", primary, e, legacy)
        data = load_geojson(legacy)

    logger.info("Parcels data loaded: %d features", len(data["features"]))
    return data


def load_subdivisions(config: SourceConfig) -> dict:
    data = load_geojson(config.locate(config.subdivisions))
    logger.info("Subdivision data loaded: %d features", len(data["features"]))
    return data


def load_addresses(config: SourceConfig) -> dict:
    data = load_geojson(config.locate(config.addresses))
    logger.info("Address data loaded: %d features", len(data["features"]))
    return data


@dataclass
class LoadedSources:
    property_report: ParseReport = field(default_factory=ParseReport)
    parcels: dict = field(default_factory=empty_collection)
    subdivisions: dict = field(default_factory=empty_collection)
    addresses: dict = field(default_factory=empty_collection)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def all_failed(self) -> bool:
        return all(name in self.failures for name in SOURCE_NAMES)


def _guarded(name: str, loader, config: SourceConfig, fallback):
    """Run one loader; on failure return (fallback, error message)."""
    try:
        return loader(config), None
    except (OSError, ValueError, requests.RequestException) as e:
        logger.error("Failed to load %s data: %s", name, e)
        return fallback, str(e)


def load_all_sources(config: SourceConfig, max_workers: int = 4) -> LoadedSources:
    """
    Load the property table and the three GeoJSON collections concurrently.

    Waits for all four before returning. A source that fails is replaced by an
    empty dataset and recorded in LoadedSources.failures.

    Args:
        config: Source locations
        max_workers: Thread pool size

    Returns:
        LoadedSources with every source populated (possibly empty)
    """
    loaders = {
        "property": (load_property_table, ParseReport),
        "parcels": (load_parcels, empty_collection),
        "subdivisions": (load_subdivisions, empty_collection),
        "addresses": (load_addresses, empty_collection),
    }

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            name: executor.submit(_guarded, name, loader, config, make_fallback())
            for name, (loader, make_fallback) in loaders.items()
        }
        results = {name: future.result() for name, future in futures.items()}

    failures = {name: error for name, (_, error) in results.items() if error is not None}
    if failures:
        logger.warning("Degraded load; failed sources: %s", ", ".join(sorted(failures)))

    return LoadedSources(
        property_report=results["property"][0],
        parcels=results["parcels"][0],
        subdivisions=results["subdivisions"][0],
        addresses=results["addresses"][0],
        failures=failures,
    )

"""Keyed property and address records shared by the resolver and popups."""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from utils.tabular import ACCOUNT_COLUMN, ParseReport

logger = logging.getLogger(__name__)

# Property table columns
QUALITY_COLUMN = "EXT CONDITION"
VIEW_COLUMN = "ATTRIBUTESUBTYPE"
VALUE_COLUMN = "SumOfACTUALVALUE"
SITUS_COLUMN = "SITUS"
SUBDIVISION_COLUMN = "SUBNAME"
YEAR_BUILT_COLUMN = "AYB"


def normalize_account_id(value: Any) -> Optional[str]:
    """Normalize a raw account identifier to its string join key, or None if blank."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if value != value:  # NaN
            return None
        if value.is_integer():
            value = int(value)
    text = str(value).strip()
    return text or None


def _blank_to_none(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class PropertyRecord:
    account_id: str
    quality_category: Optional[str] = None
    view_category: Optional[str] = None
    total_value: Optional[str] = None
    situs: Optional[str] = None
    subdivision: Optional[str] = None
    year_built: Optional[str] = None
    row: Mapping[str, str] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_row(cls, account_id: str, row: Mapping[str, str]) -> "PropertyRecord":
        return cls(
            account_id=account_id,
            quality_category=_blank_to_none(row.get(QUALITY_COLUMN)),
            view_category=_blank_to_none(row.get(VIEW_COLUMN)),
            total_value=_blank_to_none(row.get(VALUE_COLUMN)),
            situs=_blank_to_none(row.get(SITUS_COLUMN)),
            subdivision=_blank_to_none(row.get(SUBDIVISION_COLUMN)),
            year_built=_blank_to_none(row.get(YEAR_BUILT_COLUMN)),
            row=MappingProxyType(dict(row)),
        )


@dataclass(frozen=True)
class AddressRecord:
    account_id: str
    label: Optional[str] = None
    vacant: Optional[str] = None
    properties: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_properties(cls, account_id: str, properties: Mapping[str, Any]) -> "AddressRecord":
        return cls(
            account_id=account_id,
            label=_blank_to_none(properties.get("Label")),
            vacant=_blank_to_none(properties.get("Vacant")),
            properties=MappingProxyType(dict(properties)),
        )


def build_property_records(report: ParseReport) -> dict[str, PropertyRecord]:
    """Convert parsed table rows into PropertyRecords keyed by account identifier."""
    return {
        account_id: PropertyRecord.from_row(account_id, row)
        for account_id, row in report.records.items()
    }


def build_address_records(address_geojson: Mapping, account_field: str = ACCOUNT_COLUMN) -> dict[str, AddressRecord]:
    """
    Index address point features by account identifier.

    Features without an account identifier are left out of the index; they
    can still be drawn, only the popup enrichment is lost.

    Args:
        address_geojson: GeoJSON FeatureCollection of address points
        account_field: Property key holding the account identifier

    Returns:
        Dict of account_id -> AddressRecord
    """
    records = {}
    for feature in (address_geojson or {}).get("features") or []:
        properties = (feature or {}).get("properties")
        if not isinstance(properties, Mapping):
            continue
        account_id = normalize_account_id(properties.get(account_field))
        if account_id is None:
            continue
        records[account_id] = AddressRecord.from_properties(account_id, properties)

    logger.info("Parsed %d address records", len(records))
    return records


class FeatureRecordStore:
    """Read-only property and address lookups, built once per load."""

    def __init__(self, property_records: Mapping[str, PropertyRecord], address_records: Mapping[str, AddressRecord]):
        self.property_records = MappingProxyType(dict(property_records))
        self.address_records = MappingProxyType(dict(address_records))

    @classmethod
    def from_sources(cls, report: ParseReport, address_geojson: Mapping) -> "FeatureRecordStore":
        return cls(build_property_records(report), build_address_records(address_geojson))

    @classmethod
    def empty(cls) -> "FeatureRecordStore":
        return cls({}, {})

    def property_for(self, account_id: Optional[str]) -> Optional[PropertyRecord]:
        if account_id is None:
            return None
        return self.property_records.get(account_id)

    def address_for(self, account_id: Optional[str]) -> Optional[AddressRecord]:
        if account_id is None:
            return None
        return self.address_records.get(account_id)

    def __repr__(self):
        return (
            f"FeatureRecordStore(properties={len(self.property_records)}, "
            f"addresses={len(self.address_records)})"
        )

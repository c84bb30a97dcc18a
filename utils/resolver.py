"""Hybrid resolution of parcel features against the detailed property table.

Each parcel feature resolves to exactly one normalized view:

- ``property``: the account identifier matched a row of the property table
- ``parcel``: an account identifier exists but only the parcel's own coarse
  attributes are available
- ``none``: no account identifier could be read from the feature
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from utils.records import FeatureRecordStore, normalize_account_id

logger = logging.getLogger(__name__)

# Account identifier aliases, highest priority first
ACCOUNT_FIELD_CANDIDATES = ("ACCOUNTNO", "ACCOUNTNUM", "ACCOUNT", "ACCTNO", "ACCT_NUM")

# Parcel dataset fallback fields
PARCEL_VALUE_FIELD = "TOTALACTUA"
PARCEL_LOCATION_FIELD = "PROPERTYLO"
PARCEL_SUBDIVISION_FIELD = "SUBDIVISIO"
PARCEL_YEAR_FIELD = "TAXYEAR"

SOURCE_PROPERTY = "property"
SOURCE_PARCEL = "parcel"
SOURCE_NONE = "none"

UNKNOWN = "Unknown"
NOT_AVAILABLE = "N/A"


def parse_numeric(value: Any) -> float:
    """
    Coerce a raw attribute value to a float.

    Missing, blank, boolean, non-numeric, NaN and infinite inputs all give 0.0,
    which the classifier treats as "no value". Strings may carry a leading
    dollar sign and thousands separators ("$350,000").

    Args:
        value: Raw value from the property table or a feature property block

    Returns:
        Parsed float, or 0.0 when the input cannot be read as a number
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "").replace("$", "")
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0

    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


@dataclass(frozen=True)
class ResolvedAttributeView:
    source: str
    account_id: Optional[str] = None
    total_value: float = 0.0
    quality_category: str = UNKNOWN
    view_category: str = UNKNOWN
    situs: str = NOT_AVAILABLE
    subdivision: str = NOT_AVAILABLE
    year_built: str = NOT_AVAILABLE

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "account_id": self.account_id,
            "total_value": self.total_value,
            "quality_category": self.quality_category,
            "view_category": self.view_category,
            "situs": self.situs,
            "subdivision": self.subdivision,
            "year_built": self.year_built,
        }


NO_DATA_VIEW = ResolvedAttributeView(source=SOURCE_NONE)


def _text_or(value, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _feature_properties(feature) -> Mapping:
    if not isinstance(feature, Mapping):
        return {}
    properties = feature.get("properties")
    return properties if isinstance(properties, Mapping) else {}


def detect_account_field(features: Iterable[Mapping]) -> Optional[str]:
    """
    Pick the account identifier field for a parcel collection.

    Only the first feature is inspected; candidate names are tried in
    priority order.

    Args:
        features: Parcel GeoJSON features

    Returns:
        Field name, or None if the first feature carries none of the candidates
    """
    first_feature = next(iter(features or []), None)
    keys = set(_feature_properties(first_feature).keys())

    for candidate in ACCOUNT_FIELD_CANDIDATES:
        if candidate in keys:
            logger.info("Using account field: %s", candidate)
            return candidate

    logger.warning("No account identifier field found; parcels will resolve without data")
    return None


def extract_account_id(properties: Mapping, account_field: Optional[str]) -> Optional[str]:
    """Read and normalize the account identifier, or None if it cannot be extracted."""
    if account_field is None or not isinstance(properties, Mapping):
        return None
    return normalize_account_id(properties.get(account_field))


def resolve_feature(feature: Mapping, store: FeatureRecordStore, account_field: Optional[str]) -> ResolvedAttributeView:
    """
    Resolve one parcel feature into a ResolvedAttributeView.

    Detailed property data wins when the account identifier matches;
    otherwise the parcel's embedded fields are used. Never raises.

    Args:
        feature: Parcel GeoJSON feature
        store: Property and address lookups
        account_field: Account identifier field from detect_account_field

    Returns:
        ResolvedAttributeView tagged with its source
    """
    properties = _feature_properties(feature)
    account_id = extract_account_id(properties, account_field)

    if account_id is None:
        return NO_DATA_VIEW

    record = store.property_for(account_id)
    if record is not None:
        return ResolvedAttributeView(
            source=SOURCE_PROPERTY,
            account_id=account_id,
            total_value=parse_numeric(record.total_value),
            quality_category=_text_or(record.quality_category, UNKNOWN),
            view_category=_text_or(record.view_category, UNKNOWN),
            situs=_text_or(record.situs, NOT_AVAILABLE),
            subdivision=_text_or(record.subdivision, NOT_AVAILABLE),
            year_built=_text_or(record.year_built, NOT_AVAILABLE),
        )

    # Coarse parcel data never carries quality or view
    return ResolvedAttributeView(
        source=SOURCE_PARCEL,
        account_id=account_id,
        total_value=parse_numeric(properties.get(PARCEL_VALUE_FIELD)),
        situs=_text_or(properties.get(PARCEL_LOCATION_FIELD), NOT_AVAILABLE),
        subdivision=_text_or(properties.get(PARCEL_SUBDIVISION_FIELD), NOT_AVAILABLE),
        year_built=_text_or(properties.get(PARCEL_YEAR_FIELD), NOT_AVAILABLE),
    )


class HybridResolver:
    """Binds a record store and a detected account field for repeated resolution."""

    def __init__(self, store: FeatureRecordStore, account_field: Optional[str]):
        self.store = store
        self.account_field = account_field

    @classmethod
    def for_features(cls, features: Iterable[Mapping], store: FeatureRecordStore) -> "HybridResolver":
        return cls(store, detect_account_field(features))

    def resolve(self, feature: Mapping) -> ResolvedAttributeView:
        return resolve_feature(feature, self.store, self.account_field)

    def resolve_all(self, features: Iterable[Mapping]) -> list[ResolvedAttributeView]:
        return [self.resolve(feature) for feature in features or []]

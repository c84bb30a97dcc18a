import json

import pytest
import requests

from utils import data_loader
from utils.data_loader import (
    SourceConfig,
    load_all_sources,
    load_geojson,
    load_parcels,
    read_source_text,
)


def test_source_config_defaults_and_overrides():
    config = SourceConfig.from_mapping({"data_dir": "/srv/gis", "parcels": "Parcels2024.geojson", "unknown": "x"})

    assert config.data_dir == "/srv/gis"
    assert config.parcels == "Parcels2024.geojson"
    assert config.property_table == "Property_Attributes_cleaned.csv"
    assert SourceConfig.from_mapping(None) == SourceConfig()


def test_locate_resolves_relative_paths_and_urls():
    config = SourceConfig(data_dir="data")

    assert config.locate("Address.geojson").replace("\\", "/") == "data/Address.geojson"
    assert config.locate("https://example.org/a.geojson") == "https://example.org/a.geojson"
    assert SourceConfig(data_dir="https://example.org/gis/").locate("a.csv") == "https://example.org/gis/a.csv"


def test_load_all_sources(data_dir):
    sources = load_all_sources(SourceConfig(data_dir=str(data_dir)))

    assert sources.failures == {}
    assert not sources.all_failed
    assert sources.property_report.record_count == 3
    assert len(sources.parcels["features"]) == 4
    assert len(sources.subdivisions["features"]) == 1
    assert len(sources.addresses["features"]) == 2


def test_parcels_fall_back_to_legacy_file(data_dir):
    (data_dir / "Taxparcelassessor_fixed.geojson").rename(data_dir / "Taxparcelassessor.geojson")

    parcels = load_parcels(SourceConfig(data_dir=str(data_dir)))

    assert len(parcels["features"]) == 4


def test_primary_parcels_that_fail_to_parse_fall_back(data_dir, parcels_geojson):
    (data_dir / "Taxparcelassessor_fixed.geojson").write_text("{not json", encoding="utf-8")
    parcels_geojson["features"] = parcels_geojson["features"][:1]
    (data_dir / "Taxparcelassessor.geojson").write_text(json.dumps(parcels_geojson), encoding="utf-8")

    parcels = load_parcels(SourceConfig(data_dir=str(data_dir)))

    assert len(parcels["features"]) == 1


def test_failed_source_degrades_to_empty(data_dir):
    (data_dir / "Address.geojson").unlink()
    (data_dir / "Subdivision.geojson").write_text('{"type": "Topology"}', encoding="utf-8")

    sources = load_all_sources(SourceConfig(data_dir=str(data_dir)))

    assert set(sources.failures) == {"addresses", "subdivisions"}
    assert sources.addresses == {"type": "FeatureCollection", "features": []}
    assert sources.subdivisions["features"] == []
    assert sources.property_report.record_count == 3
    assert len(sources.parcels["features"]) == 4
    assert not sources.all_failed


def test_total_failure_is_flagged(tmp_path):
    sources = load_all_sources(SourceConfig(data_dir=str(tmp_path / "missing")))

    assert set(sources.failures) == {"property", "parcels", "subdivisions", "addresses"}
    assert sources.all_failed
    assert sources.property_report.record_count == 0
    assert sources.parcels["features"] == []


def test_load_geojson_rejects_non_collections(tmp_path):
    path = tmp_path / "bad.geojson"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    with pytest.raises(ValueError):
        load_geojson(str(path))


class FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_read_source_text_fetches_urls(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse("ACCOUNTNO\n1\n")

    monkeypatch.setattr(data_loader.requests, "get", fake_get)

    assert read_source_text("https://example.org/p.csv") == "ACCOUNTNO\n1\n"
    assert calls == [("https://example.org/p.csv", data_loader.REQUEST_TIMEOUT_SECONDS)]


def test_http_errors_degrade_the_source(monkeypatch, data_dir):
    monkeypatch.setattr(data_loader.requests, "get", lambda url, timeout: FakeResponse("", 404))
    config = SourceConfig(data_dir=str(data_dir), addresses="https://example.org/Address.geojson")

    sources = load_all_sources(config)

    assert list(sources.failures) == ["addresses"]
    assert sources.addresses["features"] == []


def test_property_table_with_byte_order_mark_still_joins(data_dir, property_csv):
    (data_dir / "Property_Attributes_cleaned.csv").write_bytes(property_csv.encode("utf-8-sig"))

    sources = load_all_sources(SourceConfig(data_dir=str(data_dir)))

    assert sources.property_report.headers[0] == "ACCOUNTNO"
    assert sorted(sources.property_report.records) == ["123", "456", "789"]

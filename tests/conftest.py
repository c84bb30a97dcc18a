import json
import sys
from pathlib import Path

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]

# Prefer repo sources over any installed package.
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


PROPERTY_CSV = """ACCOUNTNO,EXT CONDITION,ATTRIBUTESUBTYPE,SumOfACTUALVALUE,SITUS,SUBNAME,AYB
123,Good,TYPICAL OR AVERAGE,350000,"101 ELK AVE, CRESTED BUTTE",CRESTED BUTTE ORIGINAL,1998
456,Excellent,SCENIC OR ABOVE AVERAGE,1250000,22 GOTHIC RD,MT CRESTED BUTTE,2005
789,,,"",14 MAIN ST,GUNNISON ORIGINAL,
"""


def square(x, y):
    return {
        "type": "Polygon",
        "coordinates": [[[x, y], [x, y + 0.001], [x + 0.001, y + 0.001], [x + 0.001, y], [x, y]]],
    }


def parcel(account=None, field="ACCOUNTNO", **properties):
    props = dict(properties)
    if account is not None:
        props[field] = account
    return {"type": "Feature", "geometry": square(-106.9, 38.5), "properties": props}


@pytest.fixture
def property_csv():
    return PROPERTY_CSV


@pytest.fixture
def parcels_geojson():
    return {
        "type": "FeatureCollection",
        "features": [
            parcel("123", TOTALACTUA=300000, PROPERTYLO="101 ELK AVE", OWNERNAME="SMITH JOHN", ParcelNumb="3177-123"),
            parcel("456", TOTALACTUA=900000),
            parcel("999", TOTALACTUA=850000, PROPERTYLO="5 TAYLOR RIVER RD", SUBDIVISIO="TAYLOR PARK", TAXYEAR=2023),
            parcel("", TOTALACTUA=500000),
        ],
    }


@pytest.fixture
def addresses_geojson():
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [-106.98, 38.87]},
                "properties": {"ACCOUNTNO": "123", "Label": "101 Elk Ave", "Vacant": "N"},
            },
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [-106.93, 38.54]},
                "properties": {"Label": "Unassigned point", "Vacant": "Y"},
            },
        ],
    }


@pytest.fixture
def data_dir(tmp_path, property_csv, parcels_geojson, addresses_geojson):
    (tmp_path / "Property_Attributes_cleaned.csv").write_text(property_csv, encoding="utf-8")
    (tmp_path / "Taxparcelassessor_fixed.geojson").write_text(json.dumps(parcels_geojson), encoding="utf-8")
    (tmp_path / "Subdivision.geojson").write_text(
        json.dumps({"type": "FeatureCollection", "features": [parcel(NAME="TAYLOR PARK")]}),
        encoding="utf-8",
    )
    (tmp_path / "Address.geojson").write_text(json.dumps(addresses_geojson), encoding="utf-8")
    return tmp_path


@pytest.fixture
def make_parcel():
    return parcel

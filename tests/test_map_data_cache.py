import shutil

import pytest

from utils.data_loader import DataUnavailableError, SourceConfig
from utils.db import load_map_data


@pytest.fixture(autouse=True)
def clear_cache():
    load_map_data.clear()
    yield
    load_map_data.clear()


def test_total_failure_is_not_cached(tmp_path_factory, data_dir):
    target = tmp_path_factory.mktemp("late") / "data"
    config = SourceConfig(data_dir=str(target))

    with pytest.raises(DataUnavailableError):
        load_map_data(config)

    shutil.copytree(data_dir, target)
    sources, store = load_map_data(config)

    assert not sources.all_failed
    assert store.property_for("123") is not None


def test_configs_are_cached_separately(tmp_path, data_dir):
    sources, _ = load_map_data(SourceConfig(data_dir=str(data_dir)))

    with pytest.raises(DataUnavailableError):
        load_map_data(SourceConfig(data_dir=str(tmp_path / "missing")))

    assert len(sources.parcels["features"]) == 4

import json

import pytest

from app.core import dependencies
from app.core.dependencies import (
    CONFIG_FILE_NAME,
    DATA_ROOT_ENV_VAR,
    get_config,
    get_data_dir,
    get_readme_fetcher,
    get_record_store,
    load_config,
    reset_dependencies,
)
from app.domain.models import DirectoryConfig
from app.storage.json_record_store import JsonRecordStore


@pytest.fixture(autouse=True)
def fresh_singletons():
    reset_dependencies()
    yield
    reset_dependencies()


def test_data_dir_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv(DATA_ROOT_ENV_VAR, str(tmp_path))
    assert get_data_dir() == tmp_path


def test_data_dir_default(monkeypatch):
    monkeypatch.delenv(DATA_ROOT_ENV_VAR, raising=False)
    assert get_data_dir() == dependencies._DEFAULT_DATA_DIR
    assert get_data_dir().name == "data"


def test_load_config_defaults_without_file(tmp_path):
    config = load_config(tmp_path)
    assert config.records_dir_name == "mcps-data"
    assert config.malformed_records == "fail"
    assert config.readme_branches == ["main", "master"]


def test_load_config_partial_file(tmp_path):
    (tmp_path / CONFIG_FILE_NAME).write_text(json.dumps({
        "records_dir_name": "records",
        "malformed_records": "skip",
    }))
    config = load_config(tmp_path)
    assert config.records_dir_name == "records"
    assert config.malformed_records == "skip"
    assert config.readme_cache_ttl_seconds == 3600


@pytest.mark.parametrize("content", ["{broken", json.dumps({"malformed_records": "explode"})])
def test_load_config_invalid_file_falls_back(tmp_path, content):
    (tmp_path / CONFIG_FILE_NAME).write_text(content)
    assert load_config(tmp_path).malformed_records == "fail"


def test_record_store_uses_configuration(monkeypatch, tmp_path):
    (tmp_path / CONFIG_FILE_NAME).write_text(json.dumps({"records_dir_name": "records"}))
    monkeypatch.setenv(DATA_ROOT_ENV_VAR, str(tmp_path))

    store = get_record_store()
    assert isinstance(store, JsonRecordStore)
    assert store.records_dir == tmp_path / "records"
    assert get_record_store() is store


def test_singletons_reset(monkeypatch, tmp_path):
    monkeypatch.setenv(DATA_ROOT_ENV_VAR, str(tmp_path))
    config = get_config()
    fetcher = get_readme_fetcher()
    assert fetcher.config is config

    reset_dependencies()
    assert get_config() is not config
    assert get_readme_fetcher() is not fetcher


def test_record_store_honours_malformed_policy(mocker, tmp_path):
    mocker.patch("app.core.dependencies.get_data_dir", return_value=tmp_path)
    mocker.patch(
        "app.core.dependencies.load_config",
        return_value=DirectoryConfig(records_dir_name="elsewhere", malformed_records="skip"),
    )

    (tmp_path / "elsewhere").mkdir()
    (tmp_path / "elsewhere" / "broken.json").write_text("{oops")
    assert get_record_store().list_all() == []

from pathlib import Path
from typing import Optional
import json
import logging
import os

from pydantic import ValidationError

from app.domain.models import DirectoryConfig
from app.services.readme_fetcher import GitHubReadmeFetcher
from app.storage.json_record_store import JsonRecordStore
from app.storage.record_store import RecordStore

logger = logging.getLogger(__name__)

DATA_ROOT_ENV_VAR = "MCP_DIRECTORY_DATA_DIR"
CONFIG_FILE_NAME = "directory.json"
_REPO_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_DATA_DIR = _REPO_ROOT / "data"

_config: Optional[DirectoryConfig] = None
_record_store: Optional[RecordStore] = None
_readme_fetcher: Optional[GitHubReadmeFetcher] = None


def get_data_dir() -> Path:
    """
    Determine the data directory path.

    Priority:
    1. Environment variable MCP_DIRECTORY_DATA_DIR
    2. '<project root>/data'

    The directory is only read, never created.
    """
    env_path = os.environ.get(DATA_ROOT_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return _DEFAULT_DATA_DIR


def load_config(data_dir: Path) -> DirectoryConfig:
    """
    Load directory.json from the data directory, using defaults for any
    missing field. A missing file yields the defaults; an unreadable or
    invalid one is logged and replaced by the defaults.
    """
    path = data_dir / CONFIG_FILE_NAME
    if not path.exists():
        return DirectoryConfig()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return DirectoryConfig.model_validate(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.warning("Ignoring invalid configuration file %s: %s", path, e)
        return DirectoryConfig()


def get_config() -> DirectoryConfig:
    global _config
    if _config is None:
        _config = load_config(get_data_dir())
    return _config


def get_record_store() -> RecordStore:
    global _record_store
    if _record_store is None:
        config = get_config()
        _record_store = JsonRecordStore(
            get_data_dir() / config.records_dir_name,
            malformed_records=config.malformed_records,
        )
    return _record_store


def get_readme_fetcher() -> GitHubReadmeFetcher:
    global _readme_fetcher
    if _readme_fetcher is None:
        _readme_fetcher = GitHubReadmeFetcher(get_config())
    return _readme_fetcher


def reset_dependencies() -> None:
    """Forget the cached singletons so the next access re-reads configuration."""
    global _config, _record_store, _readme_fetcher
    _config = None
    _record_store = None
    _readme_fetcher = None

import copy
import json

import pytest


BASE_RECORD = {
    "identifier": "acme/my-package",
    "name": "My Package",
    "description": "A package used in tests.",
    "platform": "nodejs",
    "firstReleaseDate": "2024-01-01T00:00:00Z",
    "isOfficial": False,
    "isCommunity": True,
    "repository": {"provider": "github", "url": "https://github.com/acme/my-package"},
    "versions": [
        {
            "version": "1.0.0",
            "license": "MIT",
            "releaseDate": "2024-01-01T00:00:00Z",
            "securityReview": {
                "scores": {
                    "supplyChainSecurity": 90,
                    "vulnerability": 10,
                    "quality": 80,
                    "maintainabile": 70,
                    "license": 100,
                },
                "isMalicious": False,
                "weeklyDownloads": 500,
                "trend": "stable",
                "vulnerabilities": [],
            },
        }
    ],
}


@pytest.fixture
def make_record():
    """Factory for raw (camelCase) record dicts with top-level overrides."""
    def _make(**overrides):
        record = copy.deepcopy(BASE_RECORD)
        record.update(overrides)
        return record
    return _make


@pytest.fixture
def records_dir(tmp_path):
    d = tmp_path / "mcps-data"
    d.mkdir()
    return d


@pytest.fixture
def write_record(records_dir):
    """Write a record (dict or raw text) into the records directory."""
    def _write(filename, data):
        path = records_dir / filename
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write

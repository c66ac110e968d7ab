import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional

from pydantic import ValidationError

from app.domain.directory_utils import extract_file_date
from app.domain.models import MalformedRecordPolicy, PackageRecord
from app.storage.record_store import DirectorySnapshot, RecordParseError, RecordStore

logger = logging.getLogger(__name__)


class JsonRecordStore(RecordStore):
    """
    Reads package records from a flat directory of JSON files.

    Nothing is cached: every query enumerates and parses the files again.
    """

    def __init__(self, records_dir: Path, malformed_records: MalformedRecordPolicy = "fail"):
        self._records_dir = records_dir
        self._malformed_records = malformed_records

    @property
    def records_dir(self) -> Path:
        return self._records_dir

    def _record_files(self) -> List[Path]:
        if not self._records_dir.is_dir():
            logger.warning("Records directory not found: %s", self._records_dir)
            return []
        # Sorted so that "first match" is stable across platforms.
        return sorted(
            (p for p in self._records_dir.iterdir() if p.is_file() and p.suffix == ".json"),
            key=lambda p: p.name,
        )

    def _parse_file(self, path: Path) -> PackageRecord:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise RecordParseError(path, str(e)) from e

        if not isinstance(raw, dict):
            raise RecordParseError(path, "top-level JSON value is not an object")

        # The file name is the only source of the "added" timestamp; the JSON
        # value is kept when the name carries none.
        file_date = extract_file_date(path.name)
        if file_date is not None:
            raw["_fileDate"] = file_date

        try:
            return PackageRecord.model_validate(raw)
        except ValidationError as e:
            raise RecordParseError(path, str(e)) from e

    def _load_file(self, path: Path) -> Optional[PackageRecord]:
        try:
            return self._parse_file(path)
        except RecordParseError as e:
            if self._malformed_records == "skip":
                logger.warning("Skipping malformed record: %s", e)
                return None
            raise

    def iter_records(self) -> Iterator[PackageRecord]:
        for path in self._record_files():
            record = self._load_file(path)
            if record is not None:
                yield record

    def load_snapshot(self) -> DirectorySnapshot:
        records = tuple(self.iter_records())
        logger.debug("Loaded %d package records from %s", len(records), self._records_dir)
        return DirectorySnapshot(
            records=records,
            loaded_at=datetime.now(timezone.utc),
            source_dir=self._records_dir,
        )

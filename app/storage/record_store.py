from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from app.domain.directory_utils import matches_package_name
from app.domain.models import PackageRecord


class RecordParseError(ValueError):
    """A record file could not be read, decoded or validated."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to load package record {path.name}: {reason}")
        self.path = path
        self.reason = reason


def find_record(records, name: str) -> Optional[PackageRecord]:
    """Return the first record, in order, that answers a find-by-name query."""
    for record in records:
        if matches_package_name(name, record.name, record.identifier):
            return record
    return None


@dataclass(frozen=True)
class DirectorySnapshot:
    """
    Every record read in a single pass over the source directory.

    A snapshot never changes after it is built; load a new one to observe
    changes on disk.
    """

    records: Tuple[PackageRecord, ...]
    loaded_at: datetime
    source_dir: Optional[Path] = None

    def find_by_name(self, name: str) -> Optional[PackageRecord]:
        return find_record(self.records, name)

    def list_all(self) -> List[PackageRecord]:
        return list(self.records)


class RecordStore(ABC):
    """
    Abstract base class for package record sources.
    """

    @abstractmethod
    def iter_records(self) -> Iterator[PackageRecord]:
        """Yield records lazily, in enumeration order."""
        pass

    @abstractmethod
    def load_snapshot(self) -> DirectorySnapshot:
        """Read every record once into an immutable snapshot."""
        pass

    def find_by_name(self, name: str) -> Optional[PackageRecord]:
        """
        Find a package by display name or identifier.

        Re-reads the source on every call and stops at the first match, so
        records after the match are never parsed.
        """
        return find_record(self.iter_records(), name)

    def list_all(self) -> List[PackageRecord]:
        """Return every record, unfiltered, re-reading the source on every call."""
        return list(self.iter_records())

import re
from typing import Iterable, Optional

# Timestamp fragment embedded in record file names, e.g. "pdf-reader_2025-01-31T08-15-00.json".
_FILE_DATE_PATTERN = re.compile(r"(\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2})")
_FILE_TIME_PATTERN = re.compile(r"T(\d{2})-(\d{2})-(\d{2})")
_SEPARATORS = re.compile(r"[-_\s]")


def normalize_name(value: str) -> str:
    """
    Lowercase a package name and drop hyphens, underscores and whitespace.

    "My-Package", "my_package" and "My Package" all normalize to "mypackage".
    """
    return _SEPARATORS.sub("", (value or "").lower())


def extract_file_date(filename: str) -> Optional[str]:
    """
    Derive an ISO timestamp from the fragment embedded in a record file name.

    ``2025-01-31T08-15-00`` becomes ``2025-01-31T08:15:00``. Returns None when
    the name carries no such fragment.
    """
    match = _FILE_DATE_PATTERN.search(filename)
    if not match:
        return None
    return _FILE_TIME_PATTERN.sub(r"T\1:\2:\3", match.group(1))


def matches_package_name(query: str, display_name: str, identifier: str) -> bool:
    """
    Decide whether a record answers a find-by-name query.

    Matches when the normalized query equals the normalized display name or
    the normalized last segment of the identifier, or when the identifier
    contains the raw query (case-insensitive).
    """
    normalized_query = normalize_name(query)
    last_segment = identifier.split("/")[-1]

    if normalize_name(display_name) == normalized_query:
        return True
    if normalize_name(last_segment) == normalized_query:
        return True
    return (query or "").lower() in identifier.lower()


def match_text(values: Iterable[str], keyword: Optional[str]) -> bool:
    """
    Case-insensitive substring search across several fields.

    An empty keyword matches everything.
    """
    if not keyword:
        return True
    k = keyword.lower()
    return any(k in (v or "").lower() for v in values)


def slugify(value: str) -> str:
    """Lowercase and replace whitespace runs with hyphens."""
    return re.sub(r"\s+", "-", (value or "").lower())

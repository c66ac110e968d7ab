from typing import Dict, List, Optional
import re
from datetime import datetime, timedelta, timezone

from app.domain.directory_utils import match_text, slugify
from app.domain.models import (
    CategoryCount,
    DirectoryStats,
    PackageOverview,
    PackageRecord,
    PackageSummary,
    Version,
    VersionDetail,
    VulnerabilityPreview,
    as_utc,
)
from app.domain.scoring import calculate_overall_score, normalize_severity, score_band
from app.storage.record_store import DirectorySnapshot


LOW_POPULARITY_THRESHOLD = 100
PREVIEW_DESCRIPTION_LENGTH = 100
DEFAULT_PREVIEW_DESCRIPTION = "Security vulnerability detected in this package."

# Temporary checkout prefix left in finding paths by the scanner.
_SCAN_DIR_PATTERN = re.compile(r"^.*/mcp-scan-[a-f0-9-]+/")

# Name fragments mapped to a browsing category; first hit wins.
_NAME_CATEGORIES = [
    (("database", "mongo", "sql"), "Databases"),
    (("gitlab", "github"), "Version Control"),
    (("pdf", "excel", "reader"), "Document Processing"),
    (("earth", "data"), "Data Sources"),
    (("inspector", "toolkit"), "Development Tools"),
]
FALLBACK_CATEGORY = "Other Servers"

SORT_OPTIONS = ("popular", "recent", "security", "vulnerabilities")


def normalize_file_path(file_path: str) -> str:
    """Strip the scanner's temporary checkout prefix and make the path relative."""
    if not file_path:
        return ""
    normalized = _SCAN_DIR_PATTERN.sub("", file_path)
    return normalized[1:] if normalized.startswith("/") else normalized


def name_category(name: str) -> str:
    lowered = name.lower()
    for fragments, category in _NAME_CATEGORIES:
        if any(f in lowered for f in fragments):
            return category
    return FALLBACK_CATEGORY


class Package:
    """
    Read-only view over a single package record.

    Wraps the record with the derived values the listing and detail views
    need (latest version, category, score, previews, ...).
    """

    def __init__(self, record: PackageRecord):
        self.record = record
        self.versions = record.versions

    @property
    def package_id(self) -> str:
        return self.record.identifier

    @property
    def package_name(self) -> str:
        return self.record.identifier.split("/")[-1]

    @property
    def author(self) -> str:
        return self.record.identifier.split("/")[0]

    @property
    def latest_version(self) -> Optional[Version]:
        return self.versions[0] if self.versions else None

    def select_version(self, version: Optional[str] = None) -> Optional[Version]:
        """Return the requested version, falling back to the latest one."""
        if version is not None:
            for v in self.versions:
                if v.version == version:
                    return v
        return self.latest_version

    def select_version_index(self, index: int) -> Optional[Version]:
        if 0 <= index < len(self.versions):
            return self.versions[index]
        return self.latest_version

    @property
    def category(self) -> str:
        if self.record.is_official:
            return "Official"
        if self.record.is_community:
            return "Community"
        return FALLBACK_CATEGORY

    @property
    def tags(self) -> List[str]:
        return [self.record.platform, "official" if self.record.is_official else "community"]

    def categories(self) -> List[str]:
        """All browsing categories this package belongs to."""
        result = []
        if self.record.is_official:
            result.append("Official")
        if self.record.is_community:
            result.append("Community")
        if self.record.platform:
            result.append(self.record.platform)
        result.append(name_category(self.record.name))
        return result

    @property
    def security_score(self) -> Optional[int]:
        latest = self.latest_version
        if latest is None or latest.security_review is None:
            return None
        return calculate_overall_score(latest.security_review.scores)

    def weekly_downloads_for(self, version: Optional[Version]) -> int:
        if version is None or version.security_review is None:
            return 0
        return version.security_review.weekly_downloads

    @property
    def weekly_downloads(self) -> int:
        return self.weekly_downloads_for(self.latest_version)

    @property
    def vulnerability_count(self) -> int:
        latest = self.latest_version
        if latest is None or latest.security_review is None:
            return 0
        return len(latest.security_review.vulnerabilities)

    @property
    def install_command(self) -> str:
        return f"npm i {self.package_name or slugify(self.record.name)}"

    @property
    def keywords(self) -> List[str]:
        words = [self.record.name]
        parts = self.record.identifier.split("/")
        if parts[0]:
            words.append(parts[0])
        if len(parts) > 1 and parts[1] and parts[1] != slugify(self.record.name):
            words.append(parts[1])
        return words

    def updated_text(self, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        latest = self.latest_version
        released = latest.release_date if latest else self.record.first_release_date
        days = (as_utc(now) - as_utc(released)).days
        if days == 0:
            return "today"
        if days == 1:
            return "yesterday"
        return f"{days} days ago"

    def is_low_popularity(self, version: Optional[Version] = None) -> bool:
        version = version or self.latest_version
        return self.weekly_downloads_for(version) < LOW_POPULARITY_THRESHOLD

    def vulnerability_previews(self, version: Optional[Version] = None, limit: int = 2) -> List[VulnerabilityPreview]:
        """Short cards for the first few findings of a version."""
        version = version or self.latest_version
        if version is None or version.security_review is None:
            return []

        previews = []
        for vuln in version.security_review.vulnerabilities[:limit]:
            description = vuln.description
            if not description:
                description = DEFAULT_PREVIEW_DESCRIPTION
            elif len(description) > PREVIEW_DESCRIPTION_LENGTH:
                description = description[:PREVIEW_DESCRIPTION_LENGTH] + "..."
            previews.append(VulnerabilityPreview(
                id=vuln.id,
                severity=normalize_severity(vuln.severity),
                description=description,
            ))
        return previews

    def summary(self, now: Optional[datetime] = None) -> PackageSummary:
        weekly = self.weekly_downloads
        return PackageSummary(
            name=self.package_name,
            display_name=self.record.name,
            identifier=self.package_id,
            author=self.author,
            description=self.record.description,
            tags=self.tags,
            category=self.category,
            weekly_downloads=weekly,
            total_downloads=weekly * 52,
            updated=self.updated_text(now),
            vulnerabilities=self.vulnerability_count,
            security_score=self.security_score,
            is_official=self.record.is_official,
            is_community=self.record.is_community,
        )

    def version_detail(self, version: Optional[str] = None) -> Optional[VersionDetail]:
        selected = self.select_version(version)
        if selected is None:
            return None

        overall = None
        if selected.security_review is not None:
            overall = calculate_overall_score(selected.security_review.scores)

        return VersionDetail(
            package=self.record.name,
            version=selected,
            is_latest=selected is self.latest_version,
            available_versions=[v.version for v in self.versions],
            overall_score=overall,
            score_band=score_band(overall),
            is_low_popularity=self.is_low_popularity(selected),
            vulnerability_previews=self.vulnerability_previews(selected),
        )

    def overview(self, version_index: int = 0, now: Optional[datetime] = None) -> Optional[PackageOverview]:
        """
        Overview of the package for the version at ``version_index``.

        An out-of-range index falls back to the latest version.
        """
        selected = self.select_version_index(version_index)
        if selected is None:
            return None

        vulnerabilities = []
        if selected.security_review is not None:
            for vuln in selected.security_review.vulnerabilities:
                if vuln.location is not None:
                    location = vuln.location.model_copy(update={"file": normalize_file_path(vuln.location.file)})
                    vuln = vuln.model_copy(update={"location": location})
                vulnerabilities.append(vuln)

        return PackageOverview(
            summary=self.summary(now),
            repository_url=self.record.repository.url,
            install_command=self.install_command,
            keywords=self.keywords,
            selected=self.version_detail(selected.version),
            vulnerabilities=vulnerabilities,
        )


class Directory:
    """
    Query surface over one snapshot of the package records.
    """

    def __init__(self, snapshot: DirectorySnapshot):
        self.snapshot = snapshot

    def get_package(self, name: str) -> Optional[Package]:
        record = self.snapshot.find_by_name(name)
        return Package(record) if record else None

    def get_all_packages(self) -> List[Package]:
        return [Package(r) for r in self.snapshot.records]

    def search_packages(self, query: Optional[str] = None, sort: str = "popular") -> List[Package]:
        """
        Filter packages by a free-text query and order them.

        The query is matched case-insensitively against display name, package
        name, description, author and tags.
        """
        if sort not in SORT_OPTIONS:
            raise ValueError(f"Unknown sort option: {sort}")

        results = [
            pkg for pkg in self.get_all_packages()
            if match_text(
                [pkg.record.name, pkg.package_name, pkg.record.description, pkg.author, *pkg.tags],
                query,
            )
        ]

        if sort == "popular":
            results.sort(key=lambda p: p.weekly_downloads, reverse=True)
        elif sort == "security":
            results.sort(key=lambda p: p.security_score or 0, reverse=True)
        elif sort == "vulnerabilities":
            results.sort(key=lambda p: p.vulnerability_count, reverse=True)
        return results

    def categories(self) -> List[CategoryCount]:
        counts: Dict[str, int] = {}
        for pkg in self.get_all_packages():
            for category in pkg.categories():
                counts[category] = counts.get(category, 0) + 1
        return [CategoryCount(name=name, count=count) for name, count in counts.items()]

    def stats(self, now: Optional[datetime] = None) -> DirectoryStats:
        now = as_utc(now or datetime.now(timezone.utc))
        added = [r.added_at for r in self.snapshot.records]

        def added_since(delta: timedelta) -> int:
            return sum(1 for a in added if a >= now - delta)

        return DirectoryStats(
            total=len(added),
            daily=added_since(timedelta(days=1)),
            weekly=added_since(timedelta(days=7)),
            monthly=added_since(timedelta(days=30)),
            categories=self.categories(),
        )

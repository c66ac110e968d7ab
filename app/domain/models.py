"""
Pydantic models for the MCP directory.

This module defines all data models used throughout the application, including:
- Directory configuration and settings
- Package records, versions and security reviews as stored on disk
- Listing and statistics models returned by the JSON API

Record models mirror the camelCase keys of the on-disk JSON files through
aliases, so they can be built from raw JSON and dumped back with
``by_alias=True``. Records are frozen: nothing in this service mutates them.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# Scores arrive as integers in practice, but producers occasionally emit floats.
Score = Union[int, float]

Trend = Literal["increasing", "decreasing", "stable"]

MalformedRecordPolicy = Literal["fail", "skip"]


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class RecordModel(BaseModel):
    """Base class for models parsed from package record files."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


# ---------------------------------------------------------------------------
# Directory Configuration Models
# ---------------------------------------------------------------------------


class DirectoryConfig(BaseModel):
    """
    Top-level configuration for the directory service.

    Every field has a default, so a missing or partial configuration file is
    valid.

    Persisted at: <DATA_DIR>/directory.json (optional)
    """

    records_dir_name: str = Field(
        default="mcps-data",
        description="Name of the folder under the data directory holding one JSON file per package.",
    )
    malformed_records: MalformedRecordPolicy = Field(
        default="fail",
        description="'fail' aborts a scan on the first unparsable record file; 'skip' logs and leaves it out.",
    )
    readme_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout applied to every individual README request.",
    )
    readme_cache_ttl_seconds: int = Field(
        default=3600,
        ge=0,
        description="How long a fetched README is served from memory before it is fetched again. 0 disables caching.",
    )
    readme_variants: List[str] = Field(
        default_factory=lambda: ["README.md", "Readme.md", "readme.md", "README.MD", "README"],
        description="README file names tried, in order, at the repository root.",
    )
    readme_branches: List[str] = Field(
        default_factory=lambda: ["main", "master"],
        description="Branches tried, in order, against raw.githubusercontent.com.",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="Base URL of the GitHub REST API.",
    )
    github_raw_url: str = Field(
        default="https://raw.githubusercontent.com",
        description="Base URL for raw repository content.",
    )


# ---------------------------------------------------------------------------
# Vulnerability Models
# ---------------------------------------------------------------------------


class CvssV3(RecordModel):
    """CVSS v3 sub-metrics attached to a vulnerability finding."""

    version: Optional[str] = None
    vector_string: Optional[str] = Field(default=None, alias="vectorString")
    attack_vector: Optional[str] = Field(default=None, alias="attackVector")
    attack_complexity: Optional[str] = Field(default=None, alias="attackComplexity")
    privileges_required: Optional[str] = Field(default=None, alias="privilegesRequired")
    user_interaction: Optional[str] = Field(default=None, alias="userInteraction")
    scope: Optional[str] = None
    confidentiality_impact: Optional[str] = Field(default=None, alias="confidentialityImpact")
    integrity_impact: Optional[str] = Field(default=None, alias="integrityImpact")
    availability_impact: Optional[str] = Field(default=None, alias="availabilityImpact")
    base_score: Optional[float] = Field(default=None, alias="baseScore")
    base_severity: Optional[str] = Field(default=None, alias="baseSeverity")


class BaseMetricV3(RecordModel):
    cvss_v3: Optional[CvssV3] = Field(default=None, alias="cvssV3")
    exploitability_score: Optional[float] = Field(default=None, alias="exploitabilityScore")
    impact_score: Optional[float] = Field(default=None, alias="impactScore")


class VulnerabilityLocation(RecordModel):
    """Source location where a finding was detected."""

    file: str = Field(description="Path of the affected file, as reported by the scanner.")
    line: int = Field(default=0, description="1-based line number within the file.")
    snippet: str = Field(default="", description="Excerpt of the offending code.")


class Vulnerability(RecordModel):
    """
    A single security finding reported for a package version.
    """

    id: str = Field(default="", description="Finding identifier (CVE, GHSA or scanner-specific).")
    description: str = Field(default="", description="Free-text description of the finding.")
    severity: Optional[str] = Field(default=None, description="Severity label such as CRITICAL or LOW.")
    category: Optional[str] = Field(default=None, description="Finding category reported by the scanner.")
    cwe: Optional[str] = Field(default=None, description="CWE identifier, when known.")
    is_ox_original: bool = Field(
        default=False,
        alias="isOxOriginal",
        description="True when the finding was discovered by the review itself rather than a public database.",
    )
    exploitation_steps: Optional[str] = Field(
        default=None,
        alias="exploitationSteps",
        description="Optional notes describing how the issue can be exploited.",
    )
    base_metric_v3: Optional[BaseMetricV3] = Field(default=None, alias="baseMetricV3")
    location: Optional[VulnerabilityLocation] = None


# ---------------------------------------------------------------------------
# Security Review Models
# ---------------------------------------------------------------------------


class SecurityScores(RecordModel):
    """
    The five review dimensions, each on a 0-100 scale.

    ``vulnerability`` is inverted: lower is better. Values are used as stored;
    producers are responsible for keeping them within range.
    """

    supply_chain_security: Score = Field(default=0, alias="supplyChainSecurity")
    vulnerability: Score = 0
    quality: Score = 0
    # The on-disk key is spelled "maintainabile".
    maintainability: Score = Field(default=0, alias="maintainabile")
    license: Score = 0


class SecurityReview(RecordModel):
    """Per-version bundle of scores, findings and download trend."""

    scores: SecurityScores = Field(default_factory=SecurityScores)
    is_malicious: bool = Field(default=False, alias="isMalicious")
    weekly_downloads: int = Field(default=0, alias="weeklyDownloads")
    trend: Trend = Field(default="stable", description="Direction of the weekly download count.")
    vulnerabilities: List[Vulnerability] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Package Record Models
# ---------------------------------------------------------------------------


class RepositoryRef(RecordModel):
    provider: str = ""
    url: str = ""


class Version(RecordModel):
    """A released version of a package."""

    version: str
    license: str = ""
    release_date: datetime = Field(alias="releaseDate")
    security_review: Optional[SecurityReview] = Field(default=None, alias="securityReview")


class PackageRecord(RecordModel):
    """
    One package's metadata plus its version history.

    Loaded from: <DATA_DIR>/<records_dir_name>/<name>_<timestamp>.json

    ``versions`` is ordered newest first; ``versions[0]`` is the latest
    release. ``file_date`` is not part of the authored data: it is derived
    from the timestamp embedded in the file name when the record is loaded.
    """

    identifier: str = Field(description="Owner/name style identifier, e.g. 'acme/pdf-reader'.")
    name: str = Field(description="Human-friendly display name.")
    description: str = ""
    platform: str = Field(default="", description="Runtime platform tag such as 'nodejs' or 'python'.")
    first_release_date: datetime = Field(alias="firstReleaseDate")
    is_official: bool = Field(default=False, alias="isOfficial")
    is_community: bool = Field(default=False, alias="isCommunity")
    is_hostable: bool = Field(default=False, alias="isHostable")
    repository: RepositoryRef = Field(default_factory=RepositoryRef)
    versions: List[Version] = Field(default_factory=list)
    file_date: Optional[str] = Field(
        default=None,
        alias="_fileDate",
        description="ISO timestamp derived from the record's file name.",
    )

    @property
    def added_at(self) -> datetime:
        """
        When the record was added to the directory.

        Falls back to the first release date when the file name carries no
        timestamp (or an unparsable one).
        """
        if self.file_date:
            try:
                return as_utc(datetime.fromisoformat(self.file_date.replace("Z", "+00:00")))
            except ValueError:
                pass
        return as_utc(self.first_release_date)


# ---------------------------------------------------------------------------
# API Response Models
# ---------------------------------------------------------------------------


class PackageSummary(BaseModel):
    """
    Listing entry for a single package.

    Built from the latest version of a record; this is what the package list
    searches and sorts over.
    """

    name: str = Field(description="Last segment of the identifier; used in package URLs.")
    display_name: str
    identifier: str
    author: str = Field(description="First segment of the identifier.")
    description: str
    tags: List[str]
    category: str
    weekly_downloads: int
    total_downloads: int
    updated: str = Field(description="Relative age of the latest release, e.g. '3 days ago'.")
    vulnerabilities: int
    security_score: Optional[int] = Field(
        default=None,
        description="Overall score of the latest version, or None when it has no security review.",
    )
    is_official: bool
    is_community: bool


class CategoryCount(BaseModel):
    name: str
    count: int


class DirectoryStats(BaseModel):
    """Counts of packages added to the directory over recent periods."""

    total: int
    daily: int
    weekly: int
    monthly: int
    categories: List[CategoryCount] = Field(default_factory=list)


class VulnerabilityPreview(BaseModel):
    id: str
    severity: str
    description: str


class VersionDetail(BaseModel):
    """Security analysis for one selected version of a package."""

    package: str
    version: Version
    is_latest: bool
    available_versions: List[str]
    overall_score: Optional[int] = None
    score_band: Optional[str] = None
    is_low_popularity: bool
    vulnerability_previews: List[VulnerabilityPreview] = Field(default_factory=list)


class PackageOverview(BaseModel):
    """Everything shown on a package's overview, for one selected version."""

    summary: PackageSummary
    repository_url: str
    install_command: str
    keywords: List[str]
    selected: VersionDetail
    vulnerabilities: List[Vulnerability] = Field(
        default_factory=list,
        description="Findings of the selected version, with scanner checkout prefixes removed from file paths.",
    )

from __future__ import annotations

from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from app.core.dependencies import get_readme_fetcher, get_record_store
from app.domain.entities import Directory, Package
from app.domain.models import (
    DirectoryStats,
    PackageOverview,
    PackageSummary,
    VersionDetail,
)
from app.services.markdown_renderer import render_markdown
from app.services.readme_fetcher import GitHubReadmeFetcher
from app.storage.record_store import RecordParseError, RecordStore

logger = logging.getLogger(__name__)
router = APIRouter()


class MarkdownRequest(BaseModel):
    content: str = Field(default="", description="Markdown source to render.")


class MarkdownResponse(BaseModel):
    html: str = Field(description="Rendered HTML fragment. Input HTML is not escaped.")


class ReadmeResponse(BaseModel):
    content: str = Field(description="README text as fetched from the repository.")
    html: str = Field(description="README rendered to an HTML fragment.")


def _internal_error(e: RecordParseError) -> HTTPException:
    logger.error("Error loading package records: %s", e, exc_info=True)
    return HTTPException(status_code=500, detail="Internal server error")


def get_directory(store: RecordStore = Depends(get_record_store)) -> Directory:
    """
    One snapshot of the records per request.
    """
    try:
        return Directory(store.load_snapshot())
    except RecordParseError as e:
        raise _internal_error(e)


def get_package_or_404(name: str, store: RecordStore = Depends(get_record_store)) -> Package:
    """
    Resolve a package name against the records on disk.

    A plain ``def`` so FastAPI runs the directory scan in its threadpool.

    Raises:
        HTTPException: 404 if no record matches, 500 if a record file is malformed.
    """
    try:
        record = store.find_by_name(name)
    except RecordParseError as e:
        raise _internal_error(e)
    if record is None:
        raise HTTPException(status_code=404, detail="Package not found")
    return Package(record)


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

@router.get("/packages", response_model=List[PackageSummary])
async def list_packages(
    q: Optional[str] = Query(None, description="Case-insensitive text to search for."),
    sort: str = Query("popular", pattern="^(popular|recent|security|vulnerabilities)$"),
    directory: Directory = Depends(get_directory),
) -> List[PackageSummary]:
    """
    List packages, optionally filtered by a search query.
    """
    return [pkg.summary() for pkg in directory.search_packages(q, sort)]


@router.get("/stats", response_model=DirectoryStats)
async def get_stats(directory: Directory = Depends(get_directory)) -> DirectoryStats:
    """
    Totals, recently added counts and per-category counts.
    """
    return directory.stats()


# ---------------------------------------------------------------------------
# Package detail
# ---------------------------------------------------------------------------

@router.get("/package/{name}")
async def get_package(pkg: Package = Depends(get_package_or_404)) -> dict:
    """
    Full package record, in its on-disk (camelCase) shape.
    """
    return pkg.record.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.get("/package/{name}/overview", response_model=PackageOverview)
async def get_package_overview(
    version_index: int = Query(0, ge=0, description="Index into the version list; 0 is the latest."),
    pkg: Package = Depends(get_package_or_404),
) -> PackageOverview:
    overview = pkg.overview(version_index)
    if overview is None:
        raise HTTPException(status_code=404, detail="Package has no versions")
    return overview


@router.get("/package/{name}/versions/{version}", response_model=VersionDetail)
async def get_package_version(
    version: str,
    pkg: Package = Depends(get_package_or_404),
) -> VersionDetail:
    """
    Security analysis for one version. Unknown versions fall back to the latest.
    """
    detail = pkg.version_detail(version)
    if detail is None:
        raise HTTPException(status_code=404, detail="Package has no versions")
    return detail


@router.get("/package/{name}/readme", response_model=ReadmeResponse)
async def get_package_readme(
    pkg: Package = Depends(get_package_or_404),
    fetcher: GitHubReadmeFetcher = Depends(get_readme_fetcher),
) -> ReadmeResponse:
    content = None
    if pkg.record.repository.url:
        content = await fetcher.fetch_readme(pkg.record.repository.url)
    if not content:
        raise HTTPException(status_code=404, detail="README not found")

    return ReadmeResponse(content=content, html=render_markdown(content))


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

@router.post("/markdown", response_model=MarkdownResponse)
async def render(body: MarkdownRequest) -> MarkdownResponse:
    return MarkdownResponse(html=render_markdown(body.content))

"""
Best-effort README retrieval from GitHub repositories.

Tries the GitHub contents API first, then raw.githubusercontent.com on each
configured branch, for every README file name variant. The first successful
response wins; when every attempt fails the README is reported as absent.
"""
from __future__ import annotations

import logging
import os
import re
import time
from typing import Dict, List, Optional, Tuple

import httpx

from app.domain.models import DirectoryConfig

logger = logging.getLogger(__name__)

GITHUB_TOKEN_ENV_VAR = "GITHUB_TOKEN"

_GITHUB_URL_PATTERN = re.compile(r"github\.com/([^/]+)/([^/]+)")


def parse_github_url(url: str) -> Optional[Tuple[str, str]]:
    """
    Extract ``(owner, repo)`` from a GitHub repository URL.

    A trailing ``.git`` is removed from the repository name. Returns None for
    anything that is not a github.com URL.
    """
    match = _GITHUB_URL_PATTERN.search(url or "")
    if not match:
        return None
    owner, repo = match.group(1), match.group(2)
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return owner, repo


class GitHubReadmeFetcher:
    """
    Fetches README text for a repository URL, with an in-memory TTL cache.
    """

    def __init__(
        self,
        config: Optional[DirectoryConfig] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or DirectoryConfig()
        self.token = token if token is not None else os.environ.get(GITHUB_TOKEN_ENV_VAR)
        self._transport = transport
        self._cache: Dict[str, Tuple[float, Optional[str]]] = {}

    def _candidate_requests(self, owner: str, repo: str) -> List[Tuple[str, Dict[str, str]]]:
        """Every (url, headers) pair to try, in order."""
        api_headers = {"Accept": "application/vnd.github.v3.raw"}
        if self.token:
            api_headers["Authorization"] = f"Bearer {self.token}"

        api_base = self.config.github_api_url.rstrip("/")
        raw_base = self.config.github_raw_url.rstrip("/")

        candidates = [
            (f"{api_base}/repos/{owner}/{repo}/contents/{variant}", api_headers)
            for variant in self.config.readme_variants
        ]
        for variant in self.config.readme_variants:
            for branch in self.config.readme_branches:
                candidates.append((f"{raw_base}/{owner}/{repo}/{branch}/{variant}", {}))
        return candidates

    def _cached(self, repository_url: str) -> Tuple[bool, Optional[str]]:
        """Return ``(hit, content)``; a hit may carry None for a known-missing README."""
        entry = self._cache.get(repository_url)
        if entry is None:
            return False, None
        expires_at, content = entry
        if time.monotonic() >= expires_at:
            del self._cache[repository_url]
            return False, None
        return True, content

    def _remember(self, repository_url: str, content: Optional[str]) -> None:
        ttl = self.config.readme_cache_ttl_seconds
        if ttl <= 0:
            return
        now = time.monotonic()
        for url in [u for u, (expires_at, _) in self._cache.items() if expires_at <= now]:
            del self._cache[url]
        self._cache[repository_url] = (now + ttl, content)

    def clear_cache(self) -> None:
        self._cache.clear()

    async def fetch_readme(self, repository_url: str) -> Optional[str]:
        """
        Fetch the README of a GitHub repository.

        Both found READMEs and confirmed misses are cached for the configured
        TTL. A miss is only cached when every attempt got an HTTP answer, so a
        network outage is retried on the next call.

        Args:
            repository_url: Repository URL as stored in the package record.

        Returns:
            The README text, or None when the URL is not a GitHub URL or no
            attempt succeeded. Network failures are never raised.
        """
        parsed = parse_github_url(repository_url)
        if parsed is None:
            logger.info("Not a GitHub repository URL: %s", repository_url)
            return None

        hit, cached = self._cached(repository_url)
        if hit:
            return cached

        owner, repo = parsed
        network_error = False
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.config.readme_timeout_seconds,
            transport=self._transport,
        ) as client:
            for url, headers in self._candidate_requests(owner, repo):
                try:
                    response = await client.get(url, headers=headers)
                except httpx.HTTPError as e:
                    logger.debug("README request failed for %s: %s", url, e)
                    network_error = True
                    continue

                if response.is_success:
                    content = response.text
                    self._remember(repository_url, content)
                    logger.debug("Fetched README for %s/%s from %s", owner, repo, url)
                    return content

                logger.debug("README not at %s (HTTP %s)", url, response.status_code)

        logger.info("No README found for %s/%s", owner, repo)
        if not network_error:
            self._remember(repository_url, None)
        return None

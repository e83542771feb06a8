#!/usr/bin/env python3
"""
Minimal GitHub REST client for repository traffic metrics.
"""

import logging
from typing import Any, List, Optional

import requests

from . import __version__
from .exceptions import AccessForbiddenError, GitHubApiError
from .models import MetricKind, RepoInfo, TrafficWindow

GITHUB_API_URL = "https://api.github.com"

logger = logging.getLogger(__name__)


class GitHubClient:
    """Fetches daily clone and view windows from the GitHub traffic API."""

    def __init__(self, access_token: str, username: Optional[str] = None,
                 session: Optional[requests.Session] = None, timeout: float = 30,
                 base_url: str = GITHUB_API_URL):
        """
        Initialize the client.

        Args:
            access_token: GitHub Personal Access Token with push access to the repos
            username: GitHub username, only needed to list repositories
            session: Optional pre-built requests session (used by tests)
            timeout: Per-request timeout in seconds
            base_url: API root, overridable for GitHub Enterprise
        """
        self.username = username
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"token {access_token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": f"git-traffic-history v{__version__}",
        })

    def _get(self, path: str, params: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        response = self.session.get(url, params=params, timeout=self.timeout)
        if response.status_code == 403:
            raise AccessForbiddenError(url)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            raise GitHubApiError(f"Response from {url} is not JSON: {e}") from e

    def _fetch_traffic(self, kind: MetricKind, repo: str) -> TrafficWindow:
        logger.debug(f"Fetching {kind.value} for {repo}")
        payload = self._get(f"/repos/{repo}/traffic/{kind.value}", params={"per": "day"})
        try:
            return TrafficWindow.from_github_response(kind, payload)
        except ValueError as e:
            raise GitHubApiError(f"Unexpected {kind.value} response for {repo}: {e}") from e

    def fetch_clones(self, repo: str) -> TrafficWindow:
        """Fetch the daily clone window for an owner/name repository."""
        return self._fetch_traffic(MetricKind.CLONES, repo)

    def fetch_views(self, repo: str) -> TrafficWindow:
        """Fetch the daily view window for an owner/name repository."""
        return self._fetch_traffic(MetricKind.VIEWS, repo)

    def list_user_repos(self) -> List[RepoInfo]:
        """List the public repositories of the configured user."""
        if not self.username:
            raise GitHubApiError("A username is required to list repositories")
        payload = self._get(f"/users/{self.username}/repos", params={"per_page": 100})
        if not isinstance(payload, list):
            raise GitHubApiError(f"Unexpected repository listing for {self.username}")
        try:
            return [RepoInfo.from_github_entry(entry) for entry in payload]
        except (KeyError, TypeError) as e:
            raise GitHubApiError(f"Unexpected repository entry for {self.username}: {e}") from e

#!/usr/bin/env python3
"""
Exceptions raised by git-traffic-history.
"""


class TrafficHistoryError(Exception):
    """Base class for all errors raised by this package."""


class HistoryStoreError(TrafficHistoryError):
    """The persisted history could not be read, parsed or written."""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class GitHubApiError(TrafficHistoryError):
    """The GitHub API returned something we cannot use."""


class AccessForbiddenError(GitHubApiError):
    """GitHub answered 403 Access Forbidden."""

    def __init__(self, url: str):
        super().__init__(f"403 Access Forbidden: {url}")
        self.url = url


class ConfigurationError(TrafficHistoryError, ValueError):
    """Required configuration is missing or invalid."""

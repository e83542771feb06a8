#!/usr/bin/env python3
"""
Data models for GitHub repository traffic history.

Contains the core data classes used throughout the application: the daily
traffic point, the per-repository history, the fetched rolling window and
the summaries derived from them.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

GITHUB_TIMESTAMP_SUFFIX = "T00:00:00Z"

# A bare day, or a day followed by a time part.
_DAY_RE = re.compile(r"(\d{4}-\d{2}-\d{2})(?:T.*)?\Z")


class MetricKind(str, Enum):
    """The two traffic metrics GitHub reports per day."""
    CLONES = "clones"
    VIEWS = "views"


def parse_day(value: Any) -> date:
    """Parse a GitHub timestamp or a bare ISO day into a calendar day."""
    if isinstance(value, date):
        return value
    match = _DAY_RE.match(value) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"invalid timestamp: {value!r}")
    return date.fromisoformat(match.group(1))


def _non_negative_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    return value


@dataclass(frozen=True)
class TrafficPoint:
    """One day's total and unique count for a single metric of one repository."""
    timestamp: date
    count: int
    uniques: int

    def __post_init__(self):
        if not isinstance(self.timestamp, date):
            raise ValueError(f"timestamp must be a date, got {self.timestamp!r}")
        _non_negative_int("count", self.count)
        _non_negative_int("uniques", self.uniques)

    def __str__(self) -> str:
        return f"{self.count} {self.timestamp.isoformat()} {self.uniques}"

    @classmethod
    def from_github_entry(cls, entry: Dict[str, Any]) -> 'TrafficPoint':
        """Create a TrafficPoint from a GitHub API (or persisted) entry."""
        if not isinstance(entry, dict):
            raise ValueError(f"traffic entry must be an object, got {entry!r}")
        try:
            return cls(parse_day(entry["timestamp"]), entry["count"], entry["uniques"])
        except KeyError as e:
            raise ValueError(f"traffic entry is missing {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat() + GITHUB_TIMESTAMP_SUFFIX,
            "count": self.count,
            "uniques": self.uniques,
        }


def _points_from_list(kind: str, entries: Any) -> List[TrafficPoint]:
    if not isinstance(entries, list):
        raise ValueError(f"'{kind}' must be a list, got {type(entries).__name__}")
    return [TrafficPoint.from_github_entry(entry) for entry in entries]


@dataclass
class RepoHistory:
    """Accumulated clone and view history of one repository, oldest day first."""
    clones: List[TrafficPoint] = field(default_factory=list)
    views: List[TrafficPoint] = field(default_factory=list)

    def metric(self, kind: MetricKind) -> List[TrafficPoint]:
        return self.clones if kind is MetricKind.CLONES else self.views

    def set_metric(self, kind: MetricKind, points: List[TrafficPoint]) -> None:
        if kind is MetricKind.CLONES:
            self.clones = points
        else:
            self.views = points

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RepoHistory':
        if not isinstance(data, dict):
            raise ValueError(f"repository history must be an object, got {data!r}")
        return cls(
            clones=_points_from_list("clones", data.get("clones", [])),
            views=_points_from_list("views", data.get("views", [])),
        )

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "clones": [point.to_dict() for point in self.clones],
            "views": [point.to_dict() for point in self.views],
        }


# Keyed by repository identifier ("owner/name").
History = Dict[str, RepoHistory]


def history_from_dict(data: Any) -> History:
    """Build a History from the persisted JSON object."""
    if not isinstance(data, dict):
        raise ValueError(f"history must be a JSON object, got {type(data).__name__}")
    return {repo: RepoHistory.from_dict(repo_data) for repo, repo_data in data.items()}


def history_to_dict(history: History) -> Dict[str, Any]:
    return {repo: repo_history.to_dict() for repo, repo_history in history.items()}


@dataclass
class TrafficWindow:
    """The rolling window of daily samples GitHub returns for one metric."""
    kind: MetricKind
    count: int
    uniques: int
    items: List[TrafficPoint] = field(default_factory=list)

    @classmethod
    def from_github_response(cls, kind: MetricKind, payload: Dict[str, Any]) -> 'TrafficWindow':
        """
        Create a TrafficWindow from a /traffic/clones or /traffic/views response.

        The daily entries live under a key named after the metric
        ("clones" or "views").
        """
        if not isinstance(payload, dict):
            raise ValueError(f"traffic response must be an object, got {type(payload).__name__}")
        try:
            return cls(
                kind=kind,
                count=_non_negative_int("count", payload["count"]),
                uniques=_non_negative_int("uniques", payload["uniques"]),
                items=_points_from_list(kind.value, payload[kind.value]),
            )
        except KeyError as e:
            raise ValueError(f"traffic response is missing {e}") from e


@dataclass
class RepoInfo:
    """A repository as listed by the GitHub API."""
    id: int
    name: str
    full_name: str
    private: bool = False
    fork: bool = False

    @classmethod
    def from_github_entry(cls, entry: Dict[str, Any]) -> 'RepoInfo':
        return cls(
            id=entry["id"],
            name=entry["name"],
            full_name=entry["full_name"],
            private=entry.get("private", False),
            fork=entry.get("fork", False),
        )


@dataclass
class RepoTotals:
    """All-time totals over the tracked history of one repository."""
    repo: str
    total_clones: int = 0
    total_unique_clones: int = 0
    total_views: int = 0
    total_unique_views: int = 0
    first_day: Optional[date] = None
    last_day: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repo": self.repo,
            "total_clones": self.total_clones,
            "total_unique_clones": self.total_unique_clones,
            "total_views": self.total_views,
            "total_unique_views": self.total_unique_views,
            "first_day": self.first_day.isoformat() if self.first_day else None,
            "last_day": self.last_day.isoformat() if self.last_day else None,
        }


def summarize(history: History) -> List[RepoTotals]:
    """Compute per-repository totals, ordered by repository name."""
    summary = []
    for repo in sorted(history):
        repo_history = history[repo]
        days = [point.timestamp for point in repo_history.clones + repo_history.views]
        summary.append(RepoTotals(
            repo=repo,
            total_clones=sum(point.count for point in repo_history.clones),
            total_unique_clones=sum(point.uniques for point in repo_history.clones),
            total_views=sum(point.count for point in repo_history.views),
            total_unique_views=sum(point.uniques for point in repo_history.views),
            first_day=min(days) if days else None,
            last_day=max(days) if days else None,
        ))
    return summary

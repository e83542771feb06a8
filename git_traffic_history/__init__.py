"""
GitHub Repository Traffic History

Keeps an ever-growing record of GitHub clone and view traffic. GitHub only
exposes the last 14 days; this tool fetches that window periodically and
merges it into a JSON history file that never forgets.
"""

__version__ = "1.0.0"

from .exceptions import AccessForbiddenError, HistoryStoreError, TrafficHistoryError
from .github import GitHubClient
from .merge import upsert
from .models import History, RepoHistory, TrafficPoint, TrafficWindow
from .store import CorruptionPolicy, JsonHistoryStore
from .sync import SyncReport, TrafficSync

__all__ = [
    "AccessForbiddenError",
    "CorruptionPolicy",
    "GitHubClient",
    "History",
    "HistoryStoreError",
    "JsonHistoryStore",
    "RepoHistory",
    "SyncReport",
    "TrafficHistoryError",
    "TrafficPoint",
    "TrafficSync",
    "TrafficWindow",
    "upsert",
]

#!/usr/bin/env python3
"""
Periodic synchronization of GitHub traffic into the persisted history.

Each cycle reloads the history file, fetches the clone and view windows of
every configured repository one after the other, merges them and writes the
file back once. The file is the only state kept between cycles.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import requests

from .exceptions import GitHubApiError
from .merge import merge_window
from .models import History, RepoHistory
from .store import CorruptionPolicy, JsonHistoryStore

logger = logging.getLogger(__name__)


@dataclass
class RepoResult:
    """Outcome of syncing one repository within a cycle."""
    repo: str
    added: int = 0
    updated: int = 0
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SyncReport:
    """Outcome of one sync cycle."""
    results: List[RepoResult] = field(default_factory=list)
    saved: bool = False

    @property
    def succeeded(self) -> List[RepoResult]:
        return [result for result in self.results if result.ok]

    @property
    def failed(self) -> List[RepoResult]:
        return [result for result in self.results if not result.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


class TrafficSync:
    """Drives the fetch, merge and persist cycle for a set of repositories."""

    def __init__(self, client, store: JsonHistoryStore, repos: Iterable[str] = (),
                 fail_fast: bool = False):
        """
        Initialize the sync.

        Args:
            client: Object with fetch_clones(repo) and fetch_views(repo), usually a GitHubClient
            store: Where the history is persisted
            repos: owner/name identifiers to track
            fail_fast: Abort the whole cycle, without saving, on the first fetch error
                instead of recording the failure and carrying on with the other repositories
        """
        self.client = client
        self.store = store
        self.repos_to_sync: List[str] = list(repos)
        self.fail_fast = fail_fast
        self._stop_event = threading.Event()

    def add_repo(self, repo: str) -> None:
        self.repos_to_sync.append(repo)

    def _sync_repository(self, history: History, repo: str) -> RepoResult:
        # Both windows are fetched before either is merged so a repository
        # is never left with only one metric updated.
        clones = self.client.fetch_clones(repo)
        views = self.client.fetch_views(repo)

        repo_history = history.setdefault(repo, RepoHistory())
        result = RepoResult(repo)
        for window in (clones, views):
            added, updated = merge_window(repo_history, window)
            result.added += added
            result.updated += updated
        logger.info(f"{repo}: {result.added} new days, {result.updated} revised days")
        return result

    def do_sync(self) -> SyncReport:
        """
        Run one cycle over all configured repositories.

        Returns:
            A SyncReport with one RepoResult per repository.

        Raises:
            requests.RequestException, GitHubApiError: a fetch failed and fail_fast is set.
                Nothing is saved in that case.
            HistoryStoreError: the updated history could not be written.
        """
        logger.info(f"Starting sync of {len(self.repos_to_sync)} repositories")
        history = self.store.load(CorruptionPolicy.IGNORE)
        report = SyncReport()

        for repo in self.repos_to_sync:
            try:
                report.results.append(self._sync_repository(history, repo))
            except (requests.RequestException, GitHubApiError) as e:
                if self.fail_fast:
                    logger.error(f"Failed to sync {repo}, aborting cycle: {e}")
                    raise
                logger.error(f"Failed to sync {repo}: {e}")
                report.results.append(RepoResult(repo, error=e))

        if report.results and not report.succeeded:
            logger.warning("No repository synced successfully, history left untouched")
            return report

        self.store.save(history)
        report.saved = True
        logger.info(f"Sync finished: {len(report.succeeded)} succeeded, {len(report.failed)} failed")
        return report

    def run(self, interval: float) -> None:
        """
        Sync every interval seconds until stop() is called.

        Errors escaping do_sync() end the loop and propagate to the caller.
        """
        logger.info(f"Starting sync loop (interval: {interval}s)")
        while not self._stop_event.is_set():
            self.do_sync()
            if self.wait(interval):
                break
        logger.info("Sync loop stopped")

    def stop(self) -> None:
        """Stop the loop after the current cycle, or wake it from its wait."""
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to timeout seconds. Returns True if stop() was called."""
        return self._stop_event.wait(timeout)


class BackgroundSyncThread(threading.Thread):
    """A background thread running the sync loop next to the web server."""

    def __init__(self, sync: TrafficSync, interval: float = 6 * 60 * 60):
        """
        Initialize the background sync thread.

        Args:
            sync: The configured TrafficSync
            interval: Sync interval in seconds (default: 6 hours)
        """
        super().__init__(name="traffic-sync", daemon=True)
        self.sync = sync
        self.interval = interval
        self.error: Optional[Exception] = None

    def run(self):
        """Run the background sync loop. A failed cycle is logged and retried next interval."""
        logger.info(f"Starting background sync thread (interval: {self.interval}s)")

        while not self.sync.stopped:
            try:
                report = self.sync.do_sync()
                self.error = None
                if not report.ok:
                    logger.warning(f"Scheduled sync finished with {len(report.failed)} failed repositories")
            except Exception as e:
                self.error = e
                logger.exception(f"Error in background sync: {e}")

            if self.sync.wait(self.interval):
                break
        logger.info("Background sync thread stopped")

    def stop(self):
        """Stop the background sync thread."""
        self.sync.stop()

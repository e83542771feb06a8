#!/usr/bin/env python3
"""
Read-only web API over the persisted traffic history.
"""

import http.server
import json
import logging
import urllib.parse
from http import HTTPStatus
from typing import Any, Optional

from .config import Config
from .exceptions import HistoryStoreError
from .github import GitHubClient
from .models import summarize
from .store import CorruptionPolicy, JsonHistoryStore
from .sync import BackgroundSyncThread, TrafficSync

logger = logging.getLogger(__name__)


def api_ok(data: Any) -> dict:
    return {"code": "ok", "data": data}


def api_err(message: str) -> dict:
    return {"code": "err", "message": message}


class TrafficRequestHandler(http.server.BaseHTTPRequestHandler):
    """Serves the history file as JSON. Every load surfaces store errors."""

    server_version = "git-traffic-history"

    @property
    def store(self) -> JsonHistoryStore:
        return self.server.store

    def _send_json_response(self, data: dict, status: HTTPStatus = HTTPStatus.OK):
        """Send a JSON response with consistent headers."""
        body = json.dumps(data, indent=2).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Cache-Control", "no-cache")
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        logger.debug(f"{self.address_string()} - {format % args}")

    def do_GET(self):
        """Handle GET requests."""
        path = urllib.parse.urlparse(self.path).path.rstrip("/")

        if path == "/api/traffics":
            self.send_traffics()
        elif path.startswith("/api/traffics/"):
            self.send_repo_traffics(urllib.parse.unquote(path[len("/api/traffics/"):]))
        elif path == "/api/summary":
            self.send_summary()
        else:
            self._send_json_response(api_err(f"Not found: {path or '/'}"), HTTPStatus.NOT_FOUND)

    def _load(self) -> Optional[dict]:
        try:
            return self.store.load(CorruptionPolicy.SURFACE)
        except HistoryStoreError as e:
            logger.error(f"Failed to load history: {e}")
            self._send_json_response(api_err(str(e)))
            return None

    def send_traffics(self):
        """Send the full history of every repository."""
        history = self._load()
        if history is not None:
            self._send_json_response(api_ok(
                {repo: repo_history.to_dict() for repo, repo_history in history.items()}
            ))

    def send_repo_traffics(self, repo: str):
        """Send the history of a single owner/name repository."""
        history = self._load()
        if history is None:
            return
        if repo not in history:
            self._send_json_response(api_err(f"Repository not tracked: {repo}"))
            return
        self._send_json_response(api_ok(history[repo].to_dict()))

    def send_summary(self):
        """Send all-time totals per repository."""
        history = self._load()
        if history is not None:
            self._send_json_response(api_ok([totals.to_dict() for totals in summarize(history)]))


class TrafficServer(http.server.ThreadingHTTPServer):
    """HTTP server carrying the history store its handlers read from."""

    def __init__(self, address, store: JsonHistoryStore):
        self.store = store
        super().__init__(address, TrafficRequestHandler)


def run_server(config: Config, enable_background_sync: bool = True, host: str = ""):
    """
    Run the traffic web server.

    Args:
        config: Loaded configuration
        enable_background_sync: Whether to run the sync loop in a background thread
        host: Interface to bind (default: all)
    """
    store = JsonHistoryStore(config.database_path)

    sync_thread = None
    if enable_background_sync:
        client = GitHubClient(config.access_token, config.username)
        sync = TrafficSync(client, store, config.repos)
        sync_thread = BackgroundSyncThread(sync, config.sync_interval)
        sync_thread.start()

    with TrafficServer((host, config.port), store) as httpd:
        logger.info(f"Starting server on port {config.port}")
        logger.info(f"Visit http://localhost:{config.port}/api/traffics to view traffic history")
        if enable_background_sync:
            logger.info(f"Background sync enabled (interval: {config.sync_interval}s)")

        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            logger.info("Server stopped by user")
        finally:
            if sync_thread is not None:
                sync_thread.stop()

#!/usr/bin/env python3
"""
Configuration loaded from environment variables.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from .exceptions import ConfigurationError

DEFAULT_SYNC_INTERVAL = 6 * 60 * 60
DEFAULT_DATABASE_PATH = "traffics.json"
DEFAULT_PORT = 8000

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Everything the sync loop and the server need to run."""
    access_token: str
    username: Optional[str] = None
    repos: List[str] = field(default_factory=list)
    sync_interval: int = DEFAULT_SYNC_INTERVAL
    database_path: str = DEFAULT_DATABASE_PATH
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    def __repr__(self) -> str:
        # Keep the token out of logs and tracebacks.
        return (f"Config(username={self.username!r}, repos={self.repos!r}, "
                f"sync_interval={self.sync_interval!r}, database_path={self.database_path!r}, "
                f"port={self.port!r}, log_level={self.log_level!r})")


def parse_repo_list(value: str, username: Optional[str] = None) -> List[str]:
    """
    Split a GITHUB_REPOS value into owner/name identifiers.

    Entries are separated by ':' or ','. A bare name is taken to belong to
    username. Duplicates are dropped, first occurrence wins.
    """
    repos: List[str] = []
    for entry in re.split(r"[:,]", value):
        entry = entry.strip()
        if not entry:
            continue
        if "/" not in entry:
            if not username:
                raise ConfigurationError(
                    f"Repository '{entry}' has no owner and GITHUB_USERNAME is not set."
                )
            entry = f"{username}/{entry}"
        if entry not in repos:
            repos.append(entry)
    return repos


def _int_setting(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}, using default {default}")
        return default
    if value <= 0:
        logger.warning(f"{name} must be positive, using default {default}")
        return default
    return value


def _log_level(environ: Mapping[str, str]) -> str:
    level = (environ.get("LOG_LEVEL") or "INFO").upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning(f"Unknown LOG_LEVEL={level!r}, using INFO")
        return "INFO"
    return level


def load_configuration(environ: Optional[Mapping[str, str]] = None,
                       require_repos: bool = True) -> Config:
    """Load configuration from environment variables."""
    if environ is None:
        environ = os.environ

    access_token = environ.get("GITHUB_ACCESS_TOKEN") or environ.get("GITHUB_TOKEN")
    if not access_token:
        raise ConfigurationError("GITHUB_ACCESS_TOKEN environment variable not set.")

    username = environ.get("GITHUB_USERNAME") or None
    repos = parse_repo_list(environ.get("GITHUB_REPOS", ""), username)
    if require_repos and not repos:
        raise ConfigurationError("GITHUB_REPOS environment variable not set.")

    return Config(
        access_token=access_token,
        username=username,
        repos=repos,
        sync_interval=_int_setting(environ, "GITHUB_SYNC_DURATION", DEFAULT_SYNC_INTERVAL),
        database_path=environ.get("DATABASE_PATH") or DEFAULT_DATABASE_PATH,
        port=_int_setting(environ, "PORT", DEFAULT_PORT),
        log_level=_log_level(environ),
    )

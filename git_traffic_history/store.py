#!/usr/bin/env python3
"""
JSON file storage for the accumulated traffic history.

The whole history lives in a single JSON object keyed by repository. It is
read in full at the start of every sync cycle and rewritten in full at the
end; writes go through a temporary file and an atomic rename so concurrent
readers see either the old or the new content.
"""

import json
import logging
import os
import stat
import tempfile
import threading
from enum import Enum

from .exceptions import HistoryStoreError
from .models import History, history_from_dict, history_to_dict


class CorruptionPolicy(Enum):
    """What load() does when the file exists but cannot be read or parsed."""
    IGNORE = "ignore"    # log a warning and start from an empty history
    SURFACE = "surface"  # raise HistoryStoreError


class JsonHistoryStore:
    """Handles loading and saving the traffic history file."""

    def __init__(self, path: str):
        """
        Initialize the store.

        Args:
            path: Path to the JSON history file. It does not need to exist yet.
        """
        self.path = os.path.abspath(path)
        self.logger = logging.getLogger(__name__)
        self._write_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"JsonHistoryStore({self.path!r})"

    def load(self, policy: CorruptionPolicy = CorruptionPolicy.SURFACE) -> History:
        """
        Read the full history.

        A missing file is the first-run case and yields an empty history.

        Raises:
            HistoryStoreError: the file is unreadable or malformed and
                policy is SURFACE.
        """
        try:
            return self._read()
        except HistoryStoreError as e:
            if policy is CorruptionPolicy.SURFACE:
                raise
            self.logger.warning(f"Failed to read persisted history, using empty instead: {e}")
            return {}

    def _read(self) -> History:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                content = f.read()
        except FileNotFoundError:
            self.logger.info(f"No history file at {self.path}, starting empty")
            return {}
        except (OSError, UnicodeDecodeError) as e:
            raise HistoryStoreError(self.path, f"cannot read file: {e}") from e

        try:
            return history_from_dict(json.loads(content))
        except ValueError as e:
            # json.JSONDecodeError is a ValueError too
            raise HistoryStoreError(self.path, f"malformed history: {e}") from e

    def _file_mode(self) -> int:
        # Keep the mode of the file being replaced; a new file gets the
        # permissions open() would give it under the current umask.
        try:
            return stat.S_IMODE(os.stat(self.path).st_mode)
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask

    def save(self, history: History) -> None:
        """
        Overwrite the history file with the given history.

        Raises:
            HistoryStoreError: the history cannot be serialized or written.
        """
        try:
            content = json.dumps(history_to_dict(history), indent=2, sort_keys=True)
        except (TypeError, ValueError, AttributeError) as e:
            raise HistoryStoreError(self.path, f"cannot serialize history: {e}") from e

        directory = os.path.dirname(self.path) or "."
        with self._write_lock:
            tmp_path = None
            try:
                os.makedirs(directory, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(
                    prefix=f".{os.path.basename(self.path)}.", suffix=".tmp", dir=directory
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    os.chmod(tmp_path, self._file_mode())
                    f.write(content)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self.path)
                tmp_path = None
            except OSError as e:
                raise HistoryStoreError(self.path, f"cannot write file: {e}") from e
            finally:
                if tmp_path is not None and os.path.exists(tmp_path):
                    os.remove(tmp_path)

        self.logger.info(f"Saved history for {len(history)} repositories to {self.path}")

from __future__ import annotations

import json
import os
import stat
from datetime import date

import pytest

from git_traffic_history.exceptions import HistoryStoreError
from git_traffic_history.models import RepoHistory, TrafficPoint
from git_traffic_history.store import CorruptionPolicy, JsonHistoryStore


def _history() -> dict:
    return {
        "octo/cat": RepoHistory(
            clones=[TrafficPoint(date(2024, 1, 1), 3, 2), TrafficPoint(date(2024, 1, 2), 1, 1)],
            views=[TrafficPoint(date(2024, 1, 1), 20, 4)],
        )
    }


def test_missing_file_loads_empty_history(tmp_path) -> None:
    store = JsonHistoryStore(str(tmp_path / "missing.json"))
    assert store.load() == {}
    assert store.load(CorruptionPolicy.IGNORE) == {}


def test_save_then_load(tmp_path) -> None:
    store = JsonHistoryStore(str(tmp_path / "traffics.json"))
    store.save(_history())
    assert store.load() == _history()


def test_saved_file_format(tmp_path) -> None:
    path = tmp_path / "traffics.json"
    JsonHistoryStore(str(path)).save(_history())

    data = json.loads(path.read_text())
    assert data == {
        "octo/cat": {
            "clones": [
                {"timestamp": "2024-01-01T00:00:00Z", "count": 3, "uniques": 2},
                {"timestamp": "2024-01-02T00:00:00Z", "count": 1, "uniques": 1},
            ],
            "views": [{"timestamp": "2024-01-01T00:00:00Z", "count": 20, "uniques": 4}],
        }
    }


def test_save_overwrites_previous_content(tmp_path) -> None:
    store = JsonHistoryStore(str(tmp_path / "traffics.json"))
    store.save(_history())
    store.save({})
    assert store.load() == {}


def test_save_creates_parent_directory_and_leaves_no_temp_files(tmp_path) -> None:
    path = tmp_path / "data" / "traffics.json"
    JsonHistoryStore(str(path)).save(_history())

    assert [p.name for p in (tmp_path / "data").iterdir()] == ["traffics.json"]


@pytest.mark.parametrize("content", ["{not json", "[]", '{"octo/cat": {"clones": [{"count": 1}]}}', ""])
def test_corrupt_file_surfaces_error(tmp_path, content) -> None:
    path = tmp_path / "traffics.json"
    path.write_text(content)

    with pytest.raises(HistoryStoreError):
        JsonHistoryStore(str(path)).load(CorruptionPolicy.SURFACE)


def test_corrupt_file_ignored_when_asked(tmp_path, caplog) -> None:
    path = tmp_path / "traffics.json"
    path.write_text("{not json")

    assert JsonHistoryStore(str(path)).load(CorruptionPolicy.IGNORE) == {}
    assert "using empty instead" in caplog.text
    # The corrupt file is left for inspection.
    assert path.read_text() == "{not json"


def test_write_failure_raises_store_error(tmp_path) -> None:
    target = tmp_path / "traffics.json"
    target.mkdir()

    with pytest.raises(HistoryStoreError):
        JsonHistoryStore(str(target)).save(_history())
    assert [p.name for p in tmp_path.iterdir()] == ["traffics.json"]


def test_save_keeps_mode_of_existing_file(tmp_path) -> None:
    path = tmp_path / "traffics.json"
    path.write_text("{}")
    os.chmod(path, 0o600)

    JsonHistoryStore(str(path)).save(_history())

    assert stat.S_IMODE(os.stat(path).st_mode) == 0o600


def test_new_file_mode_follows_umask(tmp_path) -> None:
    path = tmp_path / "traffics.json"
    previous = os.umask(0o027)
    try:
        JsonHistoryStore(str(path)).save(_history())
    finally:
        os.umask(previous)

    assert stat.S_IMODE(os.stat(path).st_mode) == 0o640

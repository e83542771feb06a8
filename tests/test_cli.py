from __future__ import annotations

from datetime import date

import pytest
import requests

from git_traffic_history import cli
from git_traffic_history.models import MetricKind, RepoHistory, TrafficPoint, TrafficWindow
from git_traffic_history.store import JsonHistoryStore
from git_traffic_history.sync import TrafficSync


class FakeGitHubClient:
    fail_for: set = set()

    def __init__(self, access_token, username=None):
        self.access_token = access_token

    def fetch_clones(self, repo):
        if repo in self.fail_for:
            raise requests.ConnectionError("down")
        return TrafficWindow(MetricKind.CLONES, 2, 1, [TrafficPoint(date(2024, 2, 1), 2, 1)])

    def fetch_views(self, repo):
        return TrafficWindow(MetricKind.VIEWS, 0, 0, [])


@pytest.fixture
def env(tmp_path, monkeypatch):
    path = tmp_path / "traffics.json"
    monkeypatch.setenv("GITHUB_ACCESS_TOKEN", "t")
    monkeypatch.setenv("GITHUB_REPOS", "octo/a:octo/b")
    monkeypatch.setenv("DATABASE_PATH", str(path))
    monkeypatch.delenv("GITHUB_SYNC_DURATION", raising=False)
    monkeypatch.setattr(cli, "GitHubClient", FakeGitHubClient)
    monkeypatch.setattr(FakeGitHubClient, "fail_for", set())
    return path


def test_no_command_prints_help(capsys) -> None:
    assert cli.main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_sync_command(env) -> None:
    assert cli.main(["sync"]) == 0
    history = JsonHistoryStore(str(env)).load()
    assert sorted(history) == ["octo/a", "octo/b"]


def test_sync_command_reports_failed_repo(env, capsys) -> None:
    FakeGitHubClient.fail_for = {"octo/b"}

    assert cli.main(["sync"]) == 1
    assert "octo/b: down" in capsys.readouterr().err
    assert list(JsonHistoryStore(str(env)).load()) == ["octo/a"]


def test_missing_configuration_exits_non_zero(env, monkeypatch) -> None:
    monkeypatch.delenv("GITHUB_ACCESS_TOKEN")
    assert cli.main(["sync"]) == 1


def test_show_command(env, capsys) -> None:
    JsonHistoryStore(str(env)).save({
        "octo/a": RepoHistory(clones=[TrafficPoint(date(2024, 2, 1), 12, 5)]),
    })

    assert cli.main(["show"]) == 0
    out = capsys.readouterr().out
    assert "octo/a" in out
    assert "2024-02-01" in out


def test_show_command_on_corrupt_file_fails(env) -> None:
    env.write_text("{oops")
    assert cli.main(["show"]) == 1


@pytest.mark.parametrize("argv, expected", [(["run", "--interval", "0"], 0), (["run"], 6 * 60 * 60)])
def test_run_command_interval(env, monkeypatch, argv, expected) -> None:
    intervals = []
    monkeypatch.setattr(TrafficSync, "run", lambda self, interval: intervals.append(interval))

    assert cli.main(argv) == 0
    assert intervals == [expected]

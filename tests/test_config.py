from __future__ import annotations

import pytest

from git_traffic_history.config import (
    DEFAULT_DATABASE_PATH,
    DEFAULT_SYNC_INTERVAL,
    load_configuration,
    parse_repo_list,
)
from git_traffic_history.exceptions import ConfigurationError


def test_defaults() -> None:
    config = load_configuration({"GITHUB_ACCESS_TOKEN": "t", "GITHUB_REPOS": "octo/a:octo/b"})

    assert config.repos == ["octo/a", "octo/b"]
    assert config.sync_interval == DEFAULT_SYNC_INTERVAL
    assert config.database_path == DEFAULT_DATABASE_PATH
    assert config.port == 8000
    assert config.log_level == "INFO"


def test_token_falls_back_to_github_token() -> None:
    config = load_configuration({"GITHUB_TOKEN": "t", "GITHUB_REPOS": "octo/a"})
    assert config.access_token == "t"


def test_missing_token_is_an_error() -> None:
    with pytest.raises(ConfigurationError):
        load_configuration({"GITHUB_REPOS": "octo/a"})


def test_missing_repos_is_an_error_unless_optional() -> None:
    with pytest.raises(ConfigurationError):
        load_configuration({"GITHUB_ACCESS_TOKEN": "t"})
    assert load_configuration({"GITHUB_ACCESS_TOKEN": "t"}, require_repos=False).repos == []


def test_overrides() -> None:
    config = load_configuration({
        "GITHUB_ACCESS_TOKEN": "t",
        "GITHUB_REPOS": "octo/a",
        "GITHUB_SYNC_DURATION": "600",
        "DATABASE_PATH": "/data/traffics.json",
        "PORT": "9000",
        "LOG_LEVEL": "debug",
    })

    assert config.sync_interval == 600
    assert config.database_path == "/data/traffics.json"
    assert config.port == 9000
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("value", ["soon", "0", "-5"])
def test_invalid_interval_falls_back_to_default(value) -> None:
    config = load_configuration({"GITHUB_ACCESS_TOKEN": "t", "GITHUB_REPOS": "octo/a",
                                 "GITHUB_SYNC_DURATION": value})
    assert config.sync_interval == DEFAULT_SYNC_INTERVAL


def test_unknown_log_level_falls_back_to_info() -> None:
    config = load_configuration({"GITHUB_ACCESS_TOKEN": "t", "GITHUB_REPOS": "octo/a", "LOG_LEVEL": "loud"})
    assert config.log_level == "INFO"


def test_parse_repo_list_qualifies_bare_names_and_dedupes() -> None:
    assert parse_repo_list("cat, octo/dog:cat::", "octo") == ["octo/cat", "octo/dog"]


def test_parse_repo_list_bare_name_without_username() -> None:
    with pytest.raises(ConfigurationError):
        parse_repo_list("cat")


def test_token_not_in_repr() -> None:
    config = load_configuration({"GITHUB_ACCESS_TOKEN": "supersecret", "GITHUB_REPOS": "octo/a"})
    assert "supersecret" not in repr(config)

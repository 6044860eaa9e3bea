"""Test fixtures for pytest."""

import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Generator
from unittest.mock import MagicMock

import pytest

from request_review.data_types import PullRequest, ReviewConfig
from request_review.env_constants import ActionSettings, reset_settings

CONFIG: Dict[str, Any] = {
    "reviewers": {
        "defaults": ["dr-mario"],
        "groups": {
            "mario-brothers": ["mario", "luigi"],
        },
    },
    "files": {
        "**/*.js": ["mario-brothers", "princess-peach"],
        "**/*.rb": ["wario", "waluigi"],
    },
}

PULL_REQUEST_PAYLOAD: Dict[str, Any] = {
    "pull_request": {
        "number": 18,
        "title": "Extract GitHub related functions into a github module",
        "draft": False,
        "user": {"login": "necojackarc"},
    }
}

REPOSITORY = "necojackarc/auto-request-review"


@pytest.fixture(scope="function", autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Isolate tests from cached process settings."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(scope="function")
def config() -> ReviewConfig:
    """Provide a fresh copy of the reviewers document used by most tests."""
    return ReviewConfig.from_dict(deepcopy(CONFIG))


@pytest.fixture(scope="function")
def event_file(tmp_path: Path) -> Path:
    """Write a pull_request webhook payload the way the runner does."""
    path = tmp_path / "event.json"
    path.write_text(json.dumps(PULL_REQUEST_PAYLOAD), encoding="utf-8")
    return path


@pytest.fixture(scope="function")
def settings(event_file: Path) -> ActionSettings:
    return ActionSettings(
        token="fake_github_token",
        repository=REPOSITORY,
        event_path=str(event_file),
        ref="refs/pull/18/merge",
    )


@pytest.fixture(scope="function")
def mocked_client() -> MagicMock:
    """Provide a GitHub collaborator with a plain, non-draft PR by luigi."""
    client = MagicMock()
    client.get_pull_request.return_value = PullRequest(
        title="Nice Pull Request", is_draft=False, author="luigi", number=18
    )
    client.fetch_changed_files.return_value = []
    client.fetch_current_reviewers.return_value = []
    client.check_access.return_value = ([], [])
    client.get_existing_comment.return_value = None
    return client

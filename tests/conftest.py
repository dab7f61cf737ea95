"""Pytest configuration and shared builders for all tests."""

from datetime import datetime, timezone
from typing import Iterable, Optional
from unittest.mock import Mock

import pytest

from ghclient.client import RepoClient


def make_label(name: str) -> Mock:
    label = Mock()
    # Mock(name=...) names the mock itself, so set the attribute afterwards
    label.name = name
    return label


def make_issue(
    number: int,
    title: str = "Change",
    is_pr: bool = True,
    merged: bool = True,
    state: str = "closed",
    labels: Iterable[str] = (),
    milestone: Optional[str] = None,
    merge_commit_sha: str = "abc123",
) -> Mock:
    """Build a mock PyGithub Issue, optionally backed by a pull request."""
    issue = Mock()
    issue.number = number
    issue.title = title
    issue.state = state
    issue.labels = [make_label(name) for name in labels]

    if milestone is None:
        issue.milestone = None
    else:
        issue.milestone = Mock()
        issue.milestone.title = milestone

    if is_pr:
        issue.pull_request = Mock()
        issue.pull_request.merged_at = (
            datetime(2024, 1, 2, tzinfo=timezone.utc) if merged else None
        )
        pr = Mock()
        pr.merged = merged
        pr.merge_commit_sha = merge_commit_sha if merged else None
        issue.as_pull_request.return_value = pr
    else:
        issue.pull_request = None
        issue.as_pull_request.side_effect = AssertionError("not a pull request")

    return issue


@pytest.fixture
def mock_github():
    """PyGithub handle with a mock repository behind get_repo."""
    github = Mock()
    github.get_repo.return_value = Mock()
    return github


@pytest.fixture
def mock_repo(mock_github):
    return mock_github.get_repo.return_value


@pytest.fixture
def client(mock_github):
    return RepoClient(mock_github, "grpc", "grpc-go")


@pytest.fixture
def settings_env(monkeypatch):
    """Set the minimal environment for GhClientSettings."""
    monkeypatch.setenv("GHCLIENT_GITHUB_TOKEN", "ghp_testtoken123")
    monkeypatch.setenv("GHCLIENT_OWNER", "grpc")
    monkeypatch.setenv("GHCLIENT_REPO", "grpc-go")
    monkeypatch.setenv("GHCLIENT_LOG_JSON", "false")

"""Repository-scoped GitHub helpers for release automation.

This package wraps PyGithub with:
- Merged pull request lookup by milestone or label
- Organization membership and merge commit lookup
- Branch, pull request and draft release creation
- Authenticated account information
"""

__version__ = "0.1.0"

from ghclient.client import AUTHENTICATED_USER, RepoClient
from ghclient.errors import (
    AccessDeniedError,
    GitHubAPIError,
    GitHubClientError,
    NoEmailError,
    NotFoundError,
)

__all__ = [
    "AUTHENTICATED_USER",
    "AccessDeniedError",
    "GitHubAPIError",
    "GitHubClientError",
    "NoEmailError",
    "NotFoundError",
    "RepoClient",
]

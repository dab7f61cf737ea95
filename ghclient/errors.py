"""Exception hierarchy for ghclient.

PyGithub raises ``GithubException`` for every failed request. Callers of
``RepoClient`` only ever see the classes defined here.
"""

from typing import Optional

from github import GithubException


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""
    pass


class NotFoundError(GitHubClientError):
    """Raised when a resource is not found (404)."""
    pass


class AccessDeniedError(GitHubClientError):
    """Raised when access to a resource is denied (403)."""
    pass


class GitHubAPIError(GitHubClientError):
    """Raised for other GitHub API errors.

    Attributes:
        status: HTTP status code, if the failure came from a response.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class NoEmailError(GitHubClientError):
    """Raised when the authenticated account has no email addresses."""
    pass


def _error_message(exc: GithubException) -> str:
    data = exc.data
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return str(exc)


def translate_github_exception(
    exc: GithubException,
    context: str,
) -> GitHubClientError:
    """
    Map a PyGithub exception onto the ghclient hierarchy.

    Args:
        exc: Exception raised by PyGithub
        context: Short description of what was being attempted, used as
                 the message prefix

    Returns:
        The exception to raise; the caller chains it with ``from exc``
    """
    message = _error_message(exc)

    if exc.status == 404:
        return NotFoundError(f"{context}: {message}")
    if exc.status == 403:
        # 403 can be access denied or rate limit
        if "rate limit" in message.lower():
            return GitHubAPIError(f"{context}: {message}", status=exc.status)
        return AccessDeniedError(f"{context}: {message}")
    return GitHubAPIError(f"{context}: {message}", status=exc.status)

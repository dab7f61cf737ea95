"""Repository-scoped GitHub client built on PyGithub.

RepoClient wraps a caller-supplied ``github.Github`` handle and exposes the
handful of operations the release tooling needs: merged pull request lookup,
branch/PR/draft-release creation and account information.
"""

from typing import Any, Iterable, List, Optional, Set

import structlog
from github import Auth, Github, GithubException
from github.GithubObject import NotSet
from github.Issue import Issue
from github.Repository import Repository

from ghclient.config import GhClientSettings
from ghclient.errors import (
    GitHubAPIError,
    NoEmailError,
    NotFoundError,
    translate_github_exception,
)

# Github.get_user() without a login resolves to the token owner.
AUTHENTICATED_USER = NotSet


def is_merged_pr(issue: Issue) -> bool:
    """Return True if the issue is a pull request that has been merged.

    Uses the merge time carried in the issue payload, so no extra request
    is made per issue.
    """
    if issue.pull_request is None:
        return False
    return issue.pull_request.merged_at is not None


def search_qualifier(name: str, value: str) -> str:
    """Build a quoted search qualifier such as label:"bug".

    Raises:
        ValueError: If the value contains a double quote
    """
    if '"' in value:
        raise ValueError(f"{name} cannot contain a double quote: {value!r}")
    return f'{name}:"{value}"'


def has_labels(issue: Issue, labels: Iterable[str]) -> bool:
    """Return True if the issue carries every label in ``labels``."""
    names = {label.name for label in issue.labels}
    return all(label in names for label in labels)


def in_milestone(issue: Issue, milestone: str) -> bool:
    return issue.milestone is not None and issue.milestone.title == milestone


class RepoClient:
    """
    Client for a single GitHub repository.

    The owner and repository are fixed for the lifetime of the client. Every
    operation is a blocking call against the GitHub API; failures surface as
    ``GitHubClientError`` subclasses and are never retried here.
    """

    def __init__(
        self,
        github: Github,
        owner: str,
        repo: str,
        logger: Optional[Any] = None,
    ):
        """
        Initialize the client.

        Args:
            github: Authenticated PyGithub handle
            owner: Repository owner (user or organization)
            repo: Repository name
            logger: Optional structlog logger; defaults to the module logger

        Raises:
            ValueError: If owner or repo is empty
        """
        if not owner or not owner.strip():
            raise ValueError("owner cannot be empty")
        if not repo or not repo.strip():
            raise ValueError("repo cannot be empty")

        self._github = github
        self._owner = owner
        self._repo_name = repo
        self._repository: Optional[Repository] = None
        self._logger = (logger or structlog.get_logger()).bind(
            owner=owner, repo=repo
        )

    @classmethod
    def from_settings(
        cls,
        settings: GhClientSettings,
        logger: Optional[Any] = None,
    ) -> "RepoClient":
        """Build a client authenticated with the configured token."""
        github = Github(
            auth=Auth.Token(settings.github_token),
            base_url=settings.github_base_url,
        )
        return cls(github, settings.owner, settings.repo, logger=logger)

    @property
    def owner(self) -> str:
        """Owner this client was built with."""
        return self._owner

    @property
    def repo(self) -> str:
        """Repository name this client was built with."""
        return self._repo_name

    @property
    def full_name(self) -> str:
        return f"{self._owner}/{self._repo_name}"

    def _repository_handle(self) -> Repository:
        if self._repository is None:
            self._repository = self._github.get_repo(self.full_name, lazy=True)
        return self._repository

    def _search_merged_prs(self, qualifiers: List[str]) -> List[Issue]:
        query = " ".join([f"repo:{self.full_name}", "is:pr", "is:merged"] + qualifiers)
        self._logger.debug("Searching issues", query=query)
        try:
            return list(self._github.search_issues(query))
        except GithubException as e:
            raise translate_github_exception(
                e, f"failed to search issues in {self.full_name}"
            ) from e

    def merged_prs_for_milestone(self, milestone: str) -> List[Issue]:
        """
        Get merged pull requests in a milestone.

        Args:
            milestone: Milestone title

        Returns:
            Issues that are merged pull requests of this milestone

        Raises:
            ValueError: If the title contains a double quote
            GitHubClientError: If the search fails
        """
        candidates = self._search_merged_prs([search_qualifier("milestone", milestone)])
        try:
            prs = [
                issue for issue in candidates
                if in_milestone(issue, milestone) and is_merged_pr(issue)
            ]
        except GithubException as e:
            raise translate_github_exception(
                e, f"failed to read pull requests for milestone {milestone}"
            ) from e

        self._logger.info(
            "Merged pull requests for milestone",
            milestone=milestone,
            count=len(prs),
        )
        return prs

    def merged_prs_for_labels(self, labels: List[str]) -> List[Issue]:
        """
        Get merged pull requests carrying all of the given labels.

        Args:
            labels: Label names; an issue must have every one of them

        Returns:
            Matching issues ordered by number, without duplicates

        Raises:
            ValueError: If no labels are given or a label contains a double quote
            GitHubClientError: If the search fails
        """
        if not labels:
            raise ValueError("at least one label is required")

        candidates = self._search_merged_prs(
            [search_qualifier("label", label) for label in labels]
        )
        seen: Set[int] = set()
        prs = []
        try:
            for issue in candidates:
                if issue.number in seen:
                    continue
                if has_labels(issue, labels) and is_merged_pr(issue):
                    seen.add(issue.number)
                    prs.append(issue)
        except GithubException as e:
            raise translate_github_exception(
                e, f"failed to read pull requests for labels {labels}"
            ) from e

        prs.sort(key=lambda issue: issue.number)
        self._logger.info(
            "Merged pull requests for labels",
            labels=labels,
            count=len(prs),
        )
        return prs

    def org_members(self, org: str) -> Set[str]:
        """
        Get the logins of all members of an organization.

        Raises:
            NotFoundError: If the organization does not exist
            GitHubClientError: For other API errors
        """
        try:
            organization = self._github.get_organization(org)
            members = {member.login for member in organization.get_members()}
        except GithubException as e:
            raise translate_github_exception(
                e, f"failed to list members of {org}"
            ) from e

        self._logger.debug("Organization members", org=org, count=len(members))
        return members

    def commit_id_for_merged_pr(self, issue: Issue) -> str:
        """
        Get the merge commit SHA of a pull request.

        Returns:
            The merge commit SHA, or "" if the issue is not a merged PR
        """
        if not is_merged_pr(issue):
            return ""
        try:
            pr = issue.as_pull_request()
        except GithubException as e:
            raise translate_github_exception(
                e, f"failed to get pull request #{issue.number}"
            ) from e
        if not pr.merged:
            return ""
        return pr.merge_commit_sha or ""

    def new_branch_from_head(self, branch_name: str) -> None:
        """
        Create a new branch at the current head of the default branch.

        Does nothing if the branch already exists.

        Raises:
            GitHubAPIError: If the head cannot be read or the ref cannot be created
            GitHubClientError: If checking for the existing branch fails
        """
        self._logger.info("Creating branch", branch=branch_name)
        repository = self._repository_handle()
        ref_name = f"heads/{branch_name}"

        try:
            ref = repository.get_git_ref(ref_name)
            self._logger.info("Ref already exists", ref=ref.ref, sha=ref.object.sha)
            return
        except GithubException as e:
            error = translate_github_exception(e, f"failed to look up {ref_name}")
            if not isinstance(error, NotFoundError):
                raise error from e

        try:
            default_branch = repository.default_branch
        except GithubException as e:
            raise GitHubAPIError(
                f"failed to get default branch: {e}", status=e.status
            ) from e

        try:
            head = repository.get_git_ref(f"heads/{default_branch}")
        except GithubException as e:
            raise GitHubAPIError(
                f"failed to get {default_branch} hash: {e}", status=e.status
            ) from e
        sha = head.object.sha
        self._logger.info("Hash for HEAD", default_branch=default_branch, sha=sha)

        try:
            new_ref = repository.create_git_ref(ref=f"refs/{ref_name}", sha=sha)
        except GithubException as e:
            raise GitHubAPIError(f"failed to create ref: {e}", status=e.status) from e

        self._logger.info("New ref created", ref=new_ref.ref, sha=sha)

    def new_pull_request(
        self,
        head_user: str,
        head_branch: str,
        base: str,
        title: str,
        body: str,
    ) -> str:
        """
        Create a pull request against this repository.

        Args:
            head_user: Owner of the branch the change comes from
            head_branch: Branch the change comes from
            base: Branch to merge into
            title: Pull request title
            body: Pull request description

        Returns:
            HTML URL of the created pull request
        """
        head = f"{head_user}:{head_branch}"
        try:
            pr = self._repository_handle().create_pull(
                base=base,
                head=head,
                title=title,
                body=body,
                maintainer_can_modify=True,
            )
        except GithubException as e:
            raise translate_github_exception(
                e, f"failed to create pull request from {head}"
            ) from e

        self._logger.info("PR created", head=head, base=base, url=pr.html_url)
        return pr.html_url

    def new_draft_release(
        self,
        tag_name: str,
        target_branch: str,
        title: str,
        body: str,
    ) -> str:
        """
        Create a draft release.

        Returns:
            HTML URL of the created release
        """
        try:
            release = self._repository_handle().create_git_release(
                tag=tag_name,
                name=title,
                message=body,
                draft=True,
                target_commitish=target_branch,
            )
        except GithubException as e:
            raise translate_github_exception(
                e, f"failed to create draft release {tag_name}"
            ) from e

        self._logger.info("Draft release created", tag=tag_name, url=release.html_url)
        return release.html_url

    def primary_email(self) -> str:
        """
        Get the primary email address of the token owner.

        When no address is flagged primary, the first verified address is
        returned, or the first address if none is verified.

        Raises:
            NoEmailError: If the account has no email addresses
        """
        try:
            emails = list(self._github.get_user(AUTHENTICATED_USER).get_emails())
        except GithubException as e:
            raise translate_github_exception(e, "failed to list emails") from e

        if not emails:
            raise NoEmailError("no email address found")

        for entry in emails:
            if entry.primary:
                return entry.email

        fallback = next((entry for entry in emails if entry.verified), emails[0])
        self._logger.warning(
            "No primary email found, using fallback",
            email=fallback.email,
            verified=fallback.verified,
        )
        return fallback.email

    def login(self) -> str:
        """Get the login of the token owner."""
        try:
            return self._github.get_user(AUTHENTICATED_USER).login
        except GithubException as e:
            raise translate_github_exception(e, "failed to get authenticated user") from e

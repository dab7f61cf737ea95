"""Command-line entry point for release tooling."""

import sys
from typing import List

import click
import structlog
from pydantic import ValidationError

from ghclient import __version__
from ghclient.client import RepoClient
from ghclient.config import GhClientSettings, get_settings, redact_secret
from ghclient.errors import GitHubClientError
from ghclient.logging import configure_logging

logger = structlog.get_logger()


def _log_configuration(settings: GhClientSettings) -> None:
    """Log configuration values with the token redacted."""
    logger.info(
        "ghclient configuration",
        github_base_url=settings.github_base_url,
        github_token=redact_secret(settings.github_token),
        owner=settings.owner,
        repo=settings.repo,
        log_level=settings.log_level,
    )


def _client(ctx: click.Context) -> RepoClient:
    """Load settings and build the client on first use by a subcommand."""
    if "client" not in ctx.obj:
        try:
            settings = get_settings()
        except ValidationError as e:
            click.echo(f"Invalid configuration: {e}", err=True)
            ctx.exit(1)

        configure_logging(settings.log_level, settings.log_json)
        _log_configuration(settings)

        ctx.obj["settings"] = settings
        ctx.obj["client"] = RepoClient.from_settings(settings)
    return ctx.obj["client"]


def _fail(ctx: click.Context, action: str, error: Exception) -> None:
    logger.error("Command failed", action=action, error=str(error))
    ctx.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """
    Repository helpers for release automation.

    The target repository and token are read from GHCLIENT_* environment
    variables.
    """
    ctx.ensure_object(dict)


@cli.command()
@click.pass_context
def login(ctx: click.Context) -> None:
    """Print the login of the token owner."""
    try:
        click.echo(_client(ctx).login())
    except GitHubClientError as e:
        _fail(ctx, "login", e)


@cli.command()
@click.pass_context
def email(ctx: click.Context) -> None:
    """Print the primary email of the token owner."""
    try:
        click.echo(_client(ctx).primary_email())
    except GitHubClientError as e:
        _fail(ctx, "email", e)


@cli.command()
@click.argument("name")
@click.option(
    "--commits/--no-commits",
    default=False,
    help="Also print the merge commit of each pull request",
)
@click.pass_context
def milestone(ctx: click.Context, name: str, commits: bool) -> None:
    """Print merged pull requests of milestone NAME."""
    client = _client(ctx)
    try:
        for issue in client.merged_prs_for_milestone(name):
            line = f"#{issue.number}\t{issue.title}"
            if commits:
                line += f"\t{client.commit_id_for_merged_pr(issue)}"
            click.echo(line)
    except (GitHubClientError, ValueError) as e:
        _fail(ctx, "milestone", e)


@cli.command()
@click.argument("label_names", nargs=-1, required=True)
@click.pass_context
def labels(ctx: click.Context, label_names: List[str]) -> None:
    """Print merged pull requests carrying every one of LABEL_NAMES."""
    try:
        for issue in _client(ctx).merged_prs_for_labels(list(label_names)):
            click.echo(f"#{issue.number}\t{issue.title}")
    except (GitHubClientError, ValueError) as e:
        _fail(ctx, "labels", e)


@cli.command()
@click.argument("org")
@click.pass_context
def members(ctx: click.Context, org: str) -> None:
    """Print the member logins of ORG, sorted."""
    try:
        for member in sorted(_client(ctx).org_members(org)):
            click.echo(member)
    except GitHubClientError as e:
        _fail(ctx, "members", e)


def main() -> None:
    """Main entrypoint."""
    cli(obj={})


if __name__ == "__main__":
    sys.exit(main())

"""CLI commands for authentication.

This module provides the ``atlassian-cli auth`` command group for logging
in to an Atlassian instance, checking and re-validating stored credentials,
and logging out.

Credentials are validated against the live API before they are stored, and
stored through whichever token manager the root command selected (OS
keyring, encrypted file or memory).

Commands:
    - login: Validate an email / API token pair and store it
    - logout: Remove stored credentials for a server
    - status: Show whether credentials are stored for a server
    - validate: Re-check stored credentials against the API

Example:
    Log in and check the result::

        $ atlassian-cli auth login --server https://your-domain.atlassian.net \\
            --email user@example.com --token your-api-token
        $ atlassian-cli auth validate --server https://your-domain.atlassian.net
"""

import sys
from typing import Any, NoReturn

import click

from atlassian_cli.credentials import TokenManager, coerce_record
from atlassian_cli.exceptions import (
    TOKEN_MANAGEMENT_URL,
    AtlassianCliError,
    CredentialNotFoundError,
)

SERVER_OPTION_HELP = "Atlassian instance URL (e.g. https://your-domain.atlassian.net)"


@click.group(name="auth")
def auth_group():
    """Manage authentication with Atlassian instances.

    Examples:

        # Log in and store credentials
        atlassian-cli auth login --server https://your-domain.atlassian.net --email user@example.com

        # Show stored credentials for a server
        atlassian-cli auth status --server https://your-domain.atlassian.net

        # Forget stored credentials
        atlassian-cli auth logout --server https://your-domain.atlassian.net
    """
    pass


@auth_group.command(name="login")
@click.option("--server", "server_url", required=True, help=SERVER_OPTION_HELP)
@click.option("--email", required=True, help="Account email")
@click.option(
    "--token",
    prompt="API token",
    hide_input=True,
    help=f"API token (will prompt if not provided). Create one at {TOKEN_MANAGEMENT_URL}",
)
@click.option("--no-store", is_flag=True, help="Validate only, don't store credentials")
@click.pass_obj
def login(obj: dict[str, Any], server_url: str, email: str, token: str, no_store: bool):
    """Authenticate with an Atlassian instance.

    The email / API token pair is checked against the API first and only
    stored if it is accepted.

    Example:

        atlassian-cli auth login --server https://your-domain.atlassian.net --email user@example.com
    """
    manager: TokenManager = obj["token_manager"]

    try:
        record = coerce_record({"server_url": server_url, "email": email, "token": token})
        user = manager.validate(record.server_url, record.email, record.token)
        click.echo(click.style(f"Authenticated as {user.display_name} ({record.email})", fg="green"))

        if not no_store:
            manager.store(record)
            click.echo("  Credentials stored securely")

    except AtlassianCliError as e:
        _exit_with_error(e)


@auth_group.command(name="logout")
@click.option("--server", "server_url", required=True, help=SERVER_OPTION_HELP)
@click.pass_obj
def logout(obj: dict[str, Any], server_url: str):
    """Remove stored credentials for a server."""
    manager: TokenManager = obj["token_manager"]

    try:
        manager.delete(server_url)
    except AtlassianCliError as e:
        _exit_with_error(e)

    click.echo(click.style(f"Logged out from {server_url}", fg="green"))


@auth_group.command(name="status")
@click.option("--server", "server_url", required=True, help=SERVER_OPTION_HELP)
@click.pass_obj
def status(obj: dict[str, Any], server_url: str):
    """Show authentication status for a server."""
    manager: TokenManager = obj["token_manager"]

    try:
        record = manager.get(server_url)
    except CredentialNotFoundError:
        click.echo(f"Not authenticated for {server_url}")
        return
    except AtlassianCliError as e:
        _exit_with_error(e)

    click.echo(click.style(f"Authenticated as {record.email} for {server_url}", fg="green"))
    click.echo(f"  Backend: {manager.name}")


@auth_group.command(name="validate")
@click.option("--server", "server_url", required=True, help=SERVER_OPTION_HELP)
@click.pass_obj
def validate(obj: dict[str, Any], server_url: str):
    """Re-validate stored credentials against the Atlassian API."""
    manager: TokenManager = obj["token_manager"]

    try:
        record = manager.get(server_url)
    except CredentialNotFoundError:
        click.echo(
            click.style(f"Error: No stored credentials found for {server_url}", fg="red"), err=True
        )
        click.echo(click.style("Suggestion: Run 'auth login' first", fg="yellow"), err=True)
        sys.exit(1)
    except AtlassianCliError as e:
        _exit_with_error(e)

    try:
        user = manager.validate(server_url, record.email, record.token)
    except AtlassianCliError as e:
        _exit_with_error(e)

    click.echo(click.style("Credentials are valid", fg="green"))
    click.echo(f"  Authenticated as {user.display_name} ({record.email})")
    click.echo(f"  Account status: {'Active' if user.active else 'Inactive'}")


def _exit_with_error(error: AtlassianCliError) -> NoReturn:
    """Print an error and its suggestion to stderr and exit with status 1."""
    click.echo(click.style(f"Error: {error.message}", fg="red"), err=True)
    suggestion = getattr(error, "suggestion", None)
    if suggestion:
        click.echo(click.style(f"Suggestion: {suggestion}", fg="yellow"), err=True)
    sys.exit(1)

"""CLI entry point for atlassian-cli."""

import sys
from pathlib import Path

import click
import structlog

from atlassian_cli.cli.auth import auth_group
from atlassian_cli.config.settings import VaultSettings
from atlassian_cli.credentials import create_token_manager
from atlassian_cli.enums import BackendType
from atlassian_cli.exceptions import AtlassianCliError
from atlassian_cli.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)


@click.group()
@click.option(
    "--backend",
    type=click.Choice([b.value for b in BackendType]),
    default=None,
    help="Credential storage backend [env: ATLASSIAN_CLI_BACKEND, default: auto]",
)
@click.option(
    "--credentials-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Encrypted credentials file [env: ATLASSIAN_CLI_CREDENTIALS_FILE]",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Logging level [env: ATLASSIAN_CLI_LOG_LEVEL, default: WARNING]",
)
@click.pass_context
def cli(ctx: click.Context, backend: str | None, credentials_file: Path | None, log_level: str | None) -> None:
    """atlassian-cli: work with Jira and Confluence from the terminal."""
    try:
        settings = VaultSettings.load(
            backend=backend,
            credentials_file=credentials_file,
            log_level=log_level.upper() if log_level else None,
        )
        configure_logging(settings.log_level)
        token_manager = create_token_manager(settings)
    except AtlassianCliError as e:
        click.echo(f"Error: {e}", err=True)
        log.debug("startup_error", exc_info=True)
        sys.exit(1)

    log.debug("cli_started", backend=token_manager.name)
    ctx.obj = {"settings": settings, "token_manager": token_manager}


cli.add_command(auth_group)


def main() -> None:
    """Run the CLI."""
    cli()


if __name__ == "__main__":
    main()

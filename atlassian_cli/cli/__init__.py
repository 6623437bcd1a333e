"""CLI commands for atlassian-cli.

The CLI is built using Click with the entry point ``atlassian-cli``. The
root command (``atlassian_cli.main``) loads settings, configures logging
and selects the token manager; command groups receive it through the
Click context object.

Key Commands:
    auth (atlassian_cli.cli.auth):
        Log in to an Atlassian instance, check or re-validate stored
        credentials, and log out.
"""

"""atlassian-cli: credential vault and authentication for the Atlassian command-line tool."""

__version__ = "0.1.0"

"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    GH_TOKEN / GITHUB_TOKEN            — API token (GH_TOKEN wins when both are set)
    GITHUB_ACTIONS_REMOTE              — git remote to inspect (default: origin)
    GITHUB_ACTIONS_FAILED_OUTPUT_LINES — log lines shown for a failed job (default: 100)
    GITHUB_ACTIONS_TIMEOUT             — max seconds to wait for runs (default: 3600)
    GITHUB_ACTIONS_LOG_FILE            — optional path for a persistent log file

Token Lookup:
    When neither token variable is set, the first existing TOML file among
    $XDG_CONFIG_HOME/github-actions, ~/cfg/github-actions and ~/.github-actions
    is read:

        default = "github.com"

        [hosts."github.com"]
        token = "ghp_xxxx"

    The token for the requested host wins, then the `default` host, then
    github.com.

These values are process-wide. The CLI reads them and passes them into the
run monitor; nothing below the CLI reads the environment.
"""
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from ghactions.core.constants import (
    DEFAULT_FAILED_OUTPUT_LINES,
    DEFAULT_HOST,
    DEFAULT_REMOTE,
    DEFAULT_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

load_dotenv()

REMOTE = os.getenv("GITHUB_ACTIONS_REMOTE", DEFAULT_REMOTE)
FAILED_OUTPUT_LINES = int(os.getenv("GITHUB_ACTIONS_FAILED_OUTPUT_LINES", DEFAULT_FAILED_OUTPUT_LINES))
TIMEOUT_SECONDS = float(os.getenv("GITHUB_ACTIONS_TIMEOUT", DEFAULT_TIMEOUT_SECONDS))
LOG_FILE = os.getenv("GITHUB_ACTIONS_LOG_FILE", "")

CONFIG_FILE_NAME = "github-actions"


class TokenNotFoundError(Exception):
    """No token for the host in the environment or any config file."""

    def __init__(self, host: str) -> None:
        self.host = host
        super().__init__(token_not_found_message(host))


def token_not_found_message(host: str) -> str:
    return f"""Couldn't find a GitHub token for host "{host}".

Set the GH_TOKEN or GITHUB_TOKEN environment variable, or add a configuration file:

$XDG_CONFIG_HOME/github-actions or $HOME/cfg/github-actions or $HOME/.github-actions

default = "github.com"

[hosts]

[hosts."github.com"]
token = "ghp_xxxx"

Go to https://github.com/settings/tokens to create a token.
"""


def config_file_candidates() -> list[Path]:
    """Config locations in lookup order; XDG only counts when the variable is set."""
    candidates: list[Path] = []
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg is not None:
        candidates.append(Path(xdg) / CONFIG_FILE_NAME)
    home = Path.home()
    candidates.append(home / "cfg" / CONFIG_FILE_NAME)
    candidates.append(home / f".{CONFIG_FILE_NAME}")
    return candidates


def find_config_file() -> Optional[Path]:
    for path in config_file_candidates():
        if path.exists():
            return path
    return None


def _host_token(hosts: dict[str, Any], host: str) -> str:
    entry = hosts.get(host)
    if isinstance(entry, dict):
        return entry.get("token", "") or ""
    return ""


def token_from_config(data: dict[str, Any], host: str) -> str:
    """Pick a token out of a parsed config file, or "" when none applies."""
    hosts = data.get("hosts", {}) or {}
    token = _host_token(hosts, host)
    if token:
        return token
    default = data.get("default", "")
    if default:
        token = _host_token(hosts, default)
        if token:
            return token
    return _host_token(hosts, DEFAULT_HOST)


def get_token(host: str) -> str:
    """
    Resolve the API token for ``host``.

    Raises
    ------
    TokenNotFoundError
        When no environment variable or config entry provides one.
    tomllib.TOMLDecodeError
        When the config file exists but is not valid TOML.
    """
    for var in ("GH_TOKEN", "GITHUB_TOKEN"):
        token = os.environ.get(var, "")
        if token:
            logger.debug("Using token from %s", var)
            return token

    path = find_config_file()
    if path is None:
        raise TokenNotFoundError(host)

    logger.debug("Reading token for %s from %s", host, path)
    with open(path, "rb") as f:
        data = tomllib.load(f)

    token = token_from_config(data, host)
    if not token:
        raise TokenNotFoundError(host)
    return token

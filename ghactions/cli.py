"""Top-level Click group for the github-actions CLI."""

import asyncio
import logging
import re
import sys
import tomllib

import click

from ghactions.agents.run_monitor import BuildFailedError, RunMonitor, SessionTimeoutError
from ghactions.core import config
from ghactions.core.constants import VERSION
from ghactions.services import repo_service
from ghactions.services.browser import open_url
from ghactions.services.github_client import GitHubClient
from ghactions.services.notifier import DesktopNotifier
from ghactions.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(h|ms|m|s)")
_UNIT_SECONDS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


class DurationParamType(click.ParamType):
    """Accepts plain seconds (``90``) or unit strings (``90s``, ``15m``, ``1h30m``)."""

    name = "duration"

    def convert(self, value, param, ctx):
        if isinstance(value, (int, float)):
            return float(value)
        text = str(value).strip()
        try:
            return float(text)
        except ValueError:
            pass
        parts = _DURATION_PART.findall(text)
        if not parts or "".join(num + unit for num, unit in parts) != text:
            self.fail(f"{value!r} is not a valid duration (e.g. 90s, 15m, 1h30m)", param, ctx)
        return sum(float(num) * _UNIT_SECONDS[unit] for num, unit in parts)


DURATION = DurationParamType()


def _fail(err, msg=""):
    if msg:
        click.echo(f"Error {msg}: {err}", err=True)
    else:
        click.echo(f"Error: {err}", err=True)
    sys.exit(1)


def _resolve_target(branch, remote):
    """Branch, commit SHA, remote and token; any failure ends the process."""
    try:
        branch = branch or repo_service.current_branch()
        sha = repo_service.get_tip(branch)
    except repo_service.GitError as e:
        _fail(e, "getting git branch")

    try:
        remote_url = repo_service.get_remote_url(remote)
    except repo_service.GitError as e:
        _fail(e, "loading git info")

    try:
        token = config.get_token(remote_url.host)
    except (config.TokenNotFoundError, tomllib.TOMLDecodeError, OSError) as e:
        _fail(e, "getting GitHub token")

    return branch, sha, remote_url, token


async def _wait(branch, sha, remote_url, token, failed_output_lines, timeout):
    async with GitHubClient(token, remote_url.host) as client:
        monitor = RunMonitor(
            client.repo(remote_url.owner, remote_url.repo),
            remote_url,
            branch,
            notifier=DesktopNotifier(remote_url.repo),
            out=sys.stdout,
            is_tty=sys.stdout.isatty(),
        )
        return await monitor.run_session(sha, failed_output_lines, timeout)


async def _open(branch, sha, remote_url, token):
    async with GitHubClient(token, remote_url.host) as client:
        monitor = RunMonitor(client.repo(remote_url.owner, remote_url.repo), remote_url, branch)
        return await monitor.open(sha, opener=open_url)


@click.group()
@click.option("--debug", is_flag=True, help="Enable the debug log level")
def main(debug):
    """github-actions - interact with GitHub Actions from a git checkout."""
    setup_logging(logging.DEBUG if debug else logging.WARNING, log_file=config.LOG_FILE or None)


@main.command("version")
def version_cmd():
    """Print the current version."""
    click.echo(f"github-actions version {VERSION}")


@main.command("wait")
@click.argument("branch", required=False)
@click.option("--remote", default=config.REMOTE, show_default=True, help="Git remote to use")
@click.option("--failed-output-lines", type=int, default=config.FAILED_OUTPUT_LINES, show_default=True,
              help="Number of lines of failed output to display")
@click.option("--timeout", type=DURATION, default=config.TIMEOUT_SECONDS, show_default=True,
              help="Maximum time to wait (seconds, or e.g. 15m, 1h)")
def wait_cmd(branch, remote, failed_output_lines, timeout):
    """Wait for workflow runs to finish on a branch.

    Waits on the current branch unless BRANCH is given, then prints a
    job summary on success or the tail of the failed job's log on failure.
    """
    branch, sha, remote_url, token = _resolve_target(branch, remote)
    try:
        asyncio.run(_wait(branch, sha, remote_url, token, failed_output_lines, timeout))
    except (BuildFailedError, SessionTimeoutError) as e:
        _fail(e, "waiting for workflow runs")
    except KeyboardInterrupt:
        _fail("interrupted", "waiting for workflow runs")
    except Exception as e:
        logger.debug("wait failed", exc_info=True)
        _fail(e, "waiting for workflow runs")


@main.command("open")
@click.argument("branch", required=False)
@click.option("--remote", default=config.REMOTE, show_default=True, help="Git remote to use")
def open_cmd(branch, remote):
    """Open the workflow run for a branch in your browser."""
    branch, sha, remote_url, token = _resolve_target(branch, remote)
    try:
        asyncio.run(_open(branch, sha, remote_url, token))
    except KeyboardInterrupt:
        _fail("interrupted", "opening workflow run")
    except Exception as e:
        logger.debug("open failed", exc_info=True)
        _fail(e, "opening workflow run")


if __name__ == "__main__":
    main()

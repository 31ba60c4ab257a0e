"""
Repo Service
============
Reads what the monitor needs from the local git checkout.

    - current_branch()          -> the checked-out branch name
    - get_tip(ref)              -> full commit SHA of a branch or ref
    - get_remote_url(remote)    -> host / owner / repo of a named remote

Every lookup shells out to git; failures raise GitError.
"""
import logging
import re
import subprocess
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


class GitError(RuntimeError):
    """A git command failed or returned something we could not parse."""


@dataclass(frozen=True)
class RemoteURL:
    host: str
    owner: str
    repo: str
    url: str = ""


# https://host/owner/repo(.git), ssh://git@host[:port]/owner/repo(.git)
_URL_REMOTE = re.compile(
    r"^(?:https?|ssh|git)://(?:[^@/]+@)?(?P<host>[^/:]+)(?::\d+)?/(?P<owner>.+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
)
# git@host:owner/repo(.git)
_SCP_REMOTE = re.compile(
    r"^(?:[^@/]+@)?(?P<host>[^/:]+):(?P<owner>.+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
)


def parse_remote_url(url: str) -> RemoteURL:
    """
    Split a git remote URL into host, owner and repository name.

    Raises
    ------
    GitError
        When the URL is not in a recognised form.
    """
    url = url.strip()
    match = _URL_REMOTE.match(url) or _SCP_REMOTE.match(url)
    if not match:
        raise GitError(f"Could not parse remote URL: {url!r}")
    return RemoteURL(
        host=match.group("host"),
        owner=match.group("owner"),
        repo=match.group("repo"),
        url=url,
    )


def _git(*args: str, cwd: Optional[str] = None) -> str:
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            check=True,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        raise GitError("git executable not found") from e
    except subprocess.CalledProcessError as e:
        logger.debug("git %s failed: %s", " ".join(args), e.stderr)
        raise GitError(f"git {' '.join(args)}: {e.stderr.strip() or e}") from e
    return result.stdout.strip()


def current_branch(cwd: Optional[str] = None) -> str:
    branch = _git("rev-parse", "--abbrev-ref", "HEAD", cwd=cwd)
    if branch == "HEAD":
        raise GitError("Not on a branch (detached HEAD); pass a branch name")
    return branch


def get_tip(ref: str, cwd: Optional[str] = None) -> str:
    """Full commit SHA that ``ref`` points at."""
    return _git("rev-parse", f"{ref}^{{commit}}", cwd=cwd)


def get_remote_url(remote: str, cwd: Optional[str] = None) -> RemoteURL:
    return parse_remote_url(_git("remote", "get-url", remote, cwd=cwd))

"""
GitHub Client
=============
Thin asynchronous wrapper over the GitHub Actions REST API.

Only the three calls the run monitor needs are exposed per repository:
    - list_runs_for_commit(sha)   -> runs for a commit, most recent first
    - list_jobs(run_id)           -> jobs of a run
    - get_job_logs(job_id)        -> raw log bytes of a job

Non-2xx API responses raise GitHubAPIError carrying the status code and the
message GitHub put in the JSON body. Transport failures (DNS, connect,
timeouts) propagate as httpx exceptions so the caller can classify them.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from ghactions.core.constants import DEFAULT_HOST, JOBS_PER_PAGE, RUNS_PER_PAGE, USER_AGENT
from ghactions.models.job import Job, JobsResponse
from ghactions.models.workflow_run import WorkflowRun, WorkflowRunsResponse

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 20.0


class GitHubAPIError(Exception):
    """A non-2xx response from the GitHub API."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)


def api_base_url(host: str) -> str:
    """github.com uses api.github.com; Enterprise hosts serve the API under /api/v3."""
    if not host or host == DEFAULT_HOST:
        return "https://api.github.com"
    return f"https://{host}/api/v3"


def parse_error_response(response: httpx.Response) -> GitHubAPIError:
    try:
        data = response.json()
    except ValueError as exc:
        return GitHubAPIError(
            response.status_code,
            f"could not decode {response.status_code} error response as a GitHub error: {exc}",
        )
    message = data.get("message", "") if isinstance(data, dict) else ""
    return GitHubAPIError(response.status_code, message)


class GitHubClient:
    """
    Authenticated GitHub API client for one host.

    Use as an async context manager, or call ``aclose()`` when done.
    """

    def __init__(
        self,
        token: str,
        host: str = DEFAULT_HOST,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.host = host or DEFAULT_HOST
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.AsyncClient(
            base_url=api_base_url(self.host),
            headers=headers,
            timeout=REQUEST_TIMEOUT,
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def repo(self, owner: str, repo: str) -> "RepoService":
        return RepoService(self, owner, repo)

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        logger.debug("GET %s params=%s", path, params)
        response = await self._http.get(path, params=params)
        if response.status_code >= 300:
            raise parse_error_response(response)
        return response.json()

    async def download(self, path: str) -> bytes:
        """
        Fetch raw bytes, following GitHub's redirect to a storage URL by hand
        so the API token is never sent to the storage host.
        """
        logger.debug("GET %s (raw)", path)
        response = await self._http.get(path)

        if response.status_code == 302:
            location = response.headers.get("Location", "")
            if not location:
                raise GitHubAPIError(302, "redirect without location header")
            request = self._http.build_request("GET", location)
            request.headers.pop("Authorization", None)
            logger.debug("Following log redirect to %s", httpx.URL(location).host)
            response = await self._http.send(request, follow_redirects=True)

        if response.status_code >= 300:
            raise GitHubAPIError(response.status_code, f"HTTP {response.status_code}: {response.text}")
        # httpx has already undone any gzip Content-Encoding
        return response.content


class RepoService:
    """API calls scoped to a single owner/repo."""

    def __init__(self, client: GitHubClient, owner: str, repo: str) -> None:
        self.client = client
        self.owner = owner
        self.repo = repo

    @property
    def _prefix(self) -> str:
        return f"/repos/{self.owner}/{self.repo}/actions"

    async def list_workflow_runs(self, params: Optional[Dict[str, Any]] = None) -> WorkflowRunsResponse:
        data = await self.client.get_json(f"{self._prefix}/runs", params=params)
        return WorkflowRunsResponse.model_validate(data)

    async def list_runs_for_commit(self, sha: str) -> List[WorkflowRun]:
        resp = await self.list_workflow_runs({"head_sha": sha, "per_page": RUNS_PER_PAGE})
        return resp.workflow_runs

    async def list_jobs(self, run_id: int) -> List[Job]:
        data = await self.client.get_json(
            f"{self._prefix}/runs/{run_id}/jobs", params={"per_page": JOBS_PER_PAGE}
        )
        return JobsResponse.model_validate(data).jobs

    async def get_job_logs(self, job_id: int) -> bytes:
        return await self.client.download(f"{self._prefix}/jobs/{job_id}/logs")

"""
Run Monitor
===========
Polls GitHub Actions until every workflow run for a commit has finished,
then reports the result.

Session states:
    polling      -> fetch runs for the commit
    retrying     -> transient network error: notice, short backoff, poll again
    no runs yet  -> nothing registered for the commit: notice, longer backoff
    in progress  -> some runs still going: throttled status lines, poll again
    success      -> every run completed and none failed (terminal)
    failure      -> every run completed and one failed (terminal)
    aborted      -> fatal error, deadline or cancellation (terminal)

The session is one coroutine with a single request in flight at a time.
The deadline wraps the whole coroutine, so it interrupts whatever is being
awaited (a request or a backoff) the moment it expires.
"""
import asyncio
import logging
import sys
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Protocol, TextIO

from ghactions.core.constants import (
    DEFAULT_FAILED_OUTPUT_LINES,
    NO_RUNS_BACKOFF,
    POLL_INTERVAL,
    RETRY_BACKOFF,
    SUMMARY_TIMEOUT,
)
from ghactions.core.output_formatter import (
    build_jobs_summary,
    format_failure_report,
    format_failure_url,
    format_jobs_error,
    format_network_retry,
    format_no_runs,
    format_run_header,
    format_run_status,
    format_success_footer,
    format_waiting_banner,
    strip_leading_blank,
)
from ghactions.models.job import Job
from ghactions.models.workflow_run import WorkflowRun
from ghactions.parser.classification import is_retryable
from ghactions.parser.failure_parser import find_build_failure
from ghactions.services.browser import open_url
from ghactions.services.repo_service import RemoteURL
from ghactions.utils.print_throttle import should_print

logger = logging.getLogger(__name__)


class SessionOutcome(str, Enum):
    SUCCESS = "completed_success"
    FAILURE = "completed_failure"


class BuildFailedError(Exception):
    """The monitored workflow failed. Not a defect of the monitor itself."""

    def __init__(self, branch: str, run: Optional[WorkflowRun] = None) -> None:
        self.branch = branch
        self.run = run
        super().__init__(f"Build on {branch} failed!")


class SessionTimeoutError(Exception):
    """The session deadline expired before every run completed."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"timed out after {timeout:g}s waiting for workflow runs")


class RunsSource(Protocol):
    """The slice of the GitHub API the monitor depends on."""

    async def list_runs_for_commit(self, sha: str) -> List[WorkflowRun]: ...

    async def list_jobs(self, run_id: int) -> List[Job]: ...

    async def get_job_logs(self, job_id: int) -> bytes: ...


class Notifier(Protocol):
    def notify(self, message: str) -> bool: ...


class RunMonitor:
    """
    Watches the workflow runs of one commit on one branch.

    Args:
        runs: Source of runs, jobs and job logs (a RepoService in production).
        remote: Host / owner / repo the runs belong to, used for links.
        branch: Branch name shown to the operator.
        notifier: Desktop notifier; None disables notifications.
        out: Stream for operator output; defaults to stdout at write time.
        is_tty: Whether ``out`` is an interactive terminal (enables color).
    """

    def __init__(
        self,
        runs: RunsSource,
        remote: RemoteURL,
        branch: str,
        notifier: Optional[Notifier] = None,
        out: Optional[TextIO] = None,
        is_tty: bool = False,
    ) -> None:
        self.runs = runs
        self.remote = remote
        self.branch = branch
        self.notifier = notifier
        self._out = out
        self.is_tty = is_tty

        self.start_time = 0.0
        self.last_printed_at = 0.0

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def _write(self, text: str) -> None:
        out = self._out or sys.stdout
        out.write(text)
        out.flush()

    async def _notify(self, message: str) -> None:
        # notify() may block; it runs on a worker thread.
        if self.notifier is not None:
            await asyncio.to_thread(self.notifier.notify, message)

    def _mark_printed(self) -> None:
        self.last_printed_at = max(self.last_printed_at, time.time())

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------
    async def _poll_runs(self, sha: str) -> Optional[List[WorkflowRun]]:
        """
        One poll. Returns the runs, or None after backing off from a
        transient error or an empty result. Fatal errors propagate.
        """
        try:
            runs = await self.runs.list_runs_for_commit(sha)
        except Exception as exc:
            if not is_retryable(exc):
                logger.error("Polling aborted: %s", exc)
                raise
            logger.info("Transient network error, retrying in %ss: %s", RETRY_BACKOFF, exc)
            self._write(format_network_retry(exc))
            self._mark_printed()
            await asyncio.sleep(RETRY_BACKOFF)
            return None

        if not runs:
            logger.debug("No runs for %s yet", sha)
            self._write(format_no_runs(sha))
            self._mark_printed()
            await asyncio.sleep(NO_RUNS_BACKOFF)
            return None

        return runs

    async def wait(self, sha: str, failed_output_lines: int = DEFAULT_FAILED_OUTPUT_LINES) -> SessionOutcome:
        """
        Poll until every run for ``sha`` has completed.

        Returns SessionOutcome.SUCCESS when all runs passed.

        Raises
        ------
        BuildFailedError
            After the failure report is written, when any run failed.
        """
        self._write(format_waiting_banner(self.branch))
        self.start_time = time.time()
        self.last_printed_at = 0.0

        while True:
            runs = await self._poll_runs(sha)
            if runs is None:
                continue

            all_complete = all(run.is_completed for run in runs)
            failed_run = next((run for run in runs if run.is_failed), None)

            if all_complete:
                if failed_run is not None:
                    logger.info("Run %s (%s) failed", failed_run.id, failed_run.name)
                    await self.report_failure(failed_run, failed_output_lines)
                    raise BuildFailedError(self.branch, failed_run)
                logger.info("All %d runs for %s succeeded", len(runs), sha)
                await self.report_success(runs)
                return SessionOutcome.SUCCESS

            elapsed = round(time.time() - self.start_time)
            if should_print(self.last_printed_at, elapsed):
                now = datetime.now(timezone.utc)
                for run in runs:
                    self._write(format_run_status(run, now))
                self._mark_printed()

            await asyncio.sleep(POLL_INTERVAL)

    async def run_session(
        self,
        sha: str,
        failed_output_lines: int = DEFAULT_FAILED_OUTPUT_LINES,
        timeout: Optional[float] = None,
    ) -> SessionOutcome:
        """
        Entry point for one ``wait`` invocation, bounded by ``timeout`` seconds.

        Raises
        ------
        SessionTimeoutError
            When the deadline expires first.
        """
        try:
            return await asyncio.wait_for(self.wait(sha, failed_output_lines), timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Session deadline of %ss expired", timeout)
            raise SessionTimeoutError(timeout) from exc

    async def open(
        self,
        sha: str,
        opener: Callable[[str], None] = open_url,
        timeout: Optional[float] = None,
    ) -> WorkflowRun:
        """Wait for the commit's most recent run to appear, then open it in a browser."""
        async def first_run() -> WorkflowRun:
            while True:
                runs = await self._poll_runs(sha)
                if runs:
                    return runs[0]

        try:
            run = await asyncio.wait_for(first_run(), timeout)
        except asyncio.TimeoutError as exc:
            raise SessionTimeoutError(timeout) from exc
        opener(run.html_url)
        return run

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------
    async def _list_jobs(self, run: WorkflowRun) -> List[Job]:
        return await asyncio.wait_for(self.runs.list_jobs(run.id), SUMMARY_TIMEOUT)

    async def build_jobs_table(self, run: WorkflowRun) -> str:
        try:
            jobs = await self._list_jobs(run)
        except Exception as exc:
            logger.warning("Could not list jobs for run %s: %s", run.id, exc)
            return format_jobs_error(exc)
        return build_jobs_summary(jobs, self.is_tty).text

    async def build_failure_summary(self, run: WorkflowRun, failed_output_lines: int) -> str:
        """
        Job table for ``run`` plus the tail of the first failed job's log.

        The log is best effort: if it cannot be fetched the report is
        produced without it.
        """
        try:
            jobs = await self._list_jobs(run)
        except Exception as exc:
            logger.warning("Could not list jobs for run %s: %s", run.id, exc)
            return format_jobs_error(exc)

        summary = build_jobs_summary(jobs, self.is_tty)

        failure = b""
        if summary.failed_job is not None:
            job = summary.failed_job
            try:
                logs = await asyncio.wait_for(self.runs.get_job_logs(job.id), SUMMARY_TIMEOUT)
            except Exception as exc:
                logger.warning("Could not fetch logs for job %s (%s): %s", job.id, job.name, exc)
            else:
                failure = find_build_failure(logs, failed_output_lines)

        return format_failure_report(summary, failure, failed_output_lines)

    async def report_failure(self, run: WorkflowRun, failed_output_lines: int) -> None:
        self._write(await self.build_failure_summary(run, failed_output_lines))
        self._write(format_failure_url(run))
        await self._notify("build failed")

    async def report_success(self, runs: List[WorkflowRun]) -> None:
        total_duration = max(run.duration() for run in runs)
        for run in runs:
            self._write(format_run_header(run))
            self._write(strip_leading_blank(await self.build_jobs_table(run)))
        self._write(format_success_footer(
            self.branch,
            total_duration,
            runs,
            self.remote.host,
            self.remote.owner,
            self.remote.repo,
        ))
        await self._notify(f"{self.branch} build complete!")

"""
Output Formatter
================
THE SINGLE SOURCE OF TRUTH for every string the monitor shows an operator.

STRICT DETERMINISM CONTRACT:
  - This module NEVER performs I/O.
  - This module NEVER reads environment variables or probes the terminal;
    whether to colorize is passed in by the caller.
  - Given the same inputs, it ALWAYS returns the exact same output string.

Job table layout:
    <blank line>
    <job name, left-aligned to the widest name + 1 space><duration>
    ...

  Durations over a minute are rounded to the second, shorter ones to 10ms.
  On a terminal a failed job's duration is highlighted in red.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ghactions.models.job import Job
from ghactions.models.workflow_run import WorkflowRun
from ghactions.utils.durations import format_duration, round_duration

# ---------------------------------------------------------------------------
# Terminal escapes
# ---------------------------------------------------------------------------
FAILED_COLOR = "\033[38;05;160m"
RESET = "\033[0m"

SEPARATOR = "="
FOOTER_WIDTH = 40


# ---------------------------------------------------------------------------
# Job Summary
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class JobsSummary:
    """Rendered job table plus the first failed job, in provider order."""
    text: str
    failed_job: Optional[Job]
    width: int = 0  # visible width of the first table row


def job_duration(job: Job) -> float:
    """Job duration rounded for display: 1s above a minute, 10ms below."""
    elapsed = job.elapsed
    if elapsed > 60:
        return round_duration(elapsed, 1)
    return round_duration(elapsed, 0.01)


def highlight_failed(text: str) -> str:
    return f"{FAILED_COLOR}{text:<8}{RESET}"


def build_jobs_summary(jobs: Sequence[Job], is_tty: bool = False) -> JobsSummary:
    """
    Render the job name / duration table and find the first failed job.

    Parameters
    ----------
    jobs : Sequence[Job]
        Jobs in the order the provider returned them. Not re-sorted.
    is_tty : bool
        Whether the output is an interactive terminal. Escape codes are only
        emitted when True.

    Returns
    -------
    JobsSummary
    """
    rows: list[tuple[str, str, str]] = []
    failed_job: Optional[Job] = None

    for job in jobs:
        plain = format_duration(job_duration(job))
        shown = highlight_failed(plain) if job.failed and is_tty else plain
        if job.failed and failed_job is None:
            failed_job = job
        rows.append((job.name, plain, shown))

    name_width = max((len(name) for name, _, _ in rows), default=0) + 1
    lines = [f"{name:<{name_width}}{shown}" for name, _, shown in rows]
    width = name_width + len(rows[0][1]) if rows else 0

    text = "\n" + "".join(line + "\n" for line in lines)
    return JobsSummary(text=text, failed_job=failed_job, width=width)


# ---------------------------------------------------------------------------
# Failure report
# ---------------------------------------------------------------------------
def format_jobs_error(err: BaseException) -> str:
    return f"\nError fetching jobs: {err}\n"


def format_failure_report(summary: JobsSummary, failure: bytes, num_output_lines: int) -> str:
    """
    Job table, a separator as wide as its first row, then the log excerpt.

    ``failure`` is the raw log tail; it is decoded leniently since job logs
    are not guaranteed to be valid UTF-8.
    """
    parts = [summary.text, "\n"]
    if summary.width > 0:
        parts.append(SEPARATOR * summary.width)
    if failure:
        parts.append(f"\nLast {num_output_lines} lines of failed build output:\n\n")
        parts.append(failure.decode("utf-8", errors="replace"))
    return "".join(parts)


def format_failure_url(run: WorkflowRun) -> str:
    return f"\nURL:\n{run.html_url}\n"


# ---------------------------------------------------------------------------
# Progress lines
# ---------------------------------------------------------------------------
def format_waiting_banner(branch: str) -> str:
    return f"Waiting for GitHub Actions on {branch} to complete\n"


def format_network_retry(err: BaseException) -> str:
    return f"Caught network error: {err}. Continuing\n"


def format_no_runs(sha: str) -> str:
    return f"No workflow runs found for {sha[:8]} yet, waiting...\n"


def format_run_status(run: WorkflowRun, now: Optional[datetime] = None) -> str:
    elapsed = format_duration(run.duration(now))
    return f'Workflow "{run.name}" {run.status_or_conclusion} ({elapsed} elapsed)\n'


# ---------------------------------------------------------------------------
# Success report
# ---------------------------------------------------------------------------
def format_run_header(run: WorkflowRun) -> str:
    return f'\nWorkflow "{run.name}" (run {run.run_number})\n'


def strip_leading_blank(summary_text: str) -> str:
    if summary_text.startswith("\n"):
        return summary_text[1:]
    return summary_text


def format_success_footer(
    branch: str,
    total_duration: float,
    runs: Sequence[WorkflowRun],
    host: str,
    owner: str,
    repo: str,
) -> str:
    """
    Closing block after every run passed: total time, run URL, and a link
    to the pull request (or the branch when there is none).
    """
    lines = [
        "",
        SEPARATOR * FOOTER_WIDTH,
        f"Tests on {branch} took {format_duration(total_duration)}. Quitting.",
    ]
    if runs:
        first = runs[0]
        lines.append(first.html_url)
        if first.pull_requests:
            pr = first.pull_requests[0]
            lines.append(f"https://{host}/{owner}/{repo}/pull/{pr.number}")
        else:
            lines.append(f"https://{host}/{owner}/{repo}/tree/{branch}")
    return "\n".join(lines) + "\n"

"""
Workflow Run Model
Pydantic models for the workflow runs returned by the GitHub Actions API.

Runs are snapshots: every poll decodes a fresh list, nothing is updated in place.
"""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from ghactions.core.constants import FAILED_CONCLUSIONS
from ghactions.utils.durations import round_duration


class PullRequestRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int
    url: str = ""


class WorkflowRun(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    head_branch: str = ""
    head_sha: str = ""
    path: str = ""
    run_number: int = 0
    run_attempt: int = 0
    event: str = ""
    display_title: str = ""
    status: str                          # queued, in_progress, completed
    conclusion: Optional[str] = None     # success, failure, cancelled, skipped, ...
    workflow_id: int = 0
    url: str = ""
    html_url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    run_started_at: Optional[datetime] = None
    jobs_url: str = ""
    pull_requests: List[PullRequestRef] = []

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    @property
    def is_success(self) -> bool:
        return self.is_completed and self.conclusion == "success"

    @property
    def is_failed(self) -> bool:
        return self.is_completed and self.conclusion in FAILED_CONCLUSIONS

    @property
    def status_or_conclusion(self) -> str:
        """The conclusion once the run has one, else the live status."""
        if self.is_completed and self.conclusion is not None:
            return self.conclusion
        return self.status

    def duration(self, now: Optional[datetime] = None) -> float:
        """
        Wall-clock seconds the run has taken, rounded to whole seconds.

        Completed runs end at their last update; running ones at ``now``.
        Zero when the run has not started yet.
        """
        if self.run_started_at is None:
            return 0.0
        if self.is_completed and self.updated_at is not None:
            end = self.updated_at
        else:
            end = now or datetime.now(timezone.utc)
        seconds = (end - self.run_started_at).total_seconds()
        return max(0.0, round_duration(seconds, 1))


class WorkflowRunsResponse(BaseModel):
    total_count: int = 0
    workflow_runs: List[WorkflowRun] = []

"""
Job Model
Pydantic models for the jobs (and their steps) that make up a workflow run.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class Step(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    status: str = ""
    conclusion: Optional[str] = None
    number: int = 0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class Job(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    run_id: int = 0
    name: str = ""
    status: str = ""
    conclusion: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    steps: List[Step] = []
    html_url: str = ""

    @property
    def failed(self) -> bool:
        return self.conclusion == "failure"

    @property
    def elapsed(self) -> float:
        """Seconds between start and completion, zero unless both are known."""
        if self.started_at is None or self.completed_at is None:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()


class JobsResponse(BaseModel):
    total_count: int = 0
    jobs: List[Job] = []

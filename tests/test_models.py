"""
Unit Tests — Run and Job Models
================================
Status predicates, durations and decoding of API payloads.
"""
from datetime import datetime, timedelta, timezone

import pytest

from ghactions.models.job import Job, JobsResponse
from ghactions.models.workflow_run import WorkflowRun, WorkflowRunsResponse

NOW = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def make_run(**kwargs) -> WorkflowRun:
    fields = {"id": 1, "name": "CI", "status": "completed"}
    fields.update(kwargs)
    return WorkflowRun(**fields)


@pytest.mark.parametrize(
    "status, expected",
    [("completed", True), ("in_progress", False), ("queued", False)],
)
def test_is_completed(status, expected):
    assert make_run(status=status).is_completed is expected


@pytest.mark.parametrize(
    "status, conclusion, expected",
    [
        ("completed", "success", True),
        ("completed", "failure", False),
        ("completed", None, False),
        ("in_progress", None, False),
    ],
)
def test_is_success(status, conclusion, expected):
    assert make_run(status=status, conclusion=conclusion).is_success is expected


@pytest.mark.parametrize(
    "status, conclusion, expected",
    [
        ("completed", "failure", True),
        ("completed", "cancelled", True),
        ("completed", "timed_out", True),
        ("completed", "success", False),
        ("completed", "skipped", False),
        ("completed", "neutral", False),
        ("completed", None, False),
        ("in_progress", None, False),
        ("in_progress", "failure", False),
    ],
)
def test_is_failed(status, conclusion, expected):
    assert make_run(status=status, conclusion=conclusion).is_failed is expected


def test_status_or_conclusion():
    assert make_run(status="in_progress").status_or_conclusion == "in_progress"
    assert make_run(conclusion="failure").status_or_conclusion == "failure"
    assert make_run(conclusion=None).status_or_conclusion == "completed"


class TestRunDuration:

    def test_no_start_is_zero(self):
        assert make_run(run_started_at=None, updated_at=NOW).duration(NOW) == 0
        assert make_run(status="queued", run_started_at=None).duration(NOW) == 0

    def test_completed_run_uses_update_time(self):
        run = make_run(run_started_at=NOW - timedelta(minutes=5), updated_at=NOW)
        assert run.duration(NOW + timedelta(hours=1)) == 300

    def test_running_run_uses_now(self):
        run = make_run(
            status="in_progress",
            run_started_at=NOW - timedelta(seconds=42),
            updated_at=NOW - timedelta(seconds=40),
        )
        assert run.duration(NOW) == 42

    def test_rounded_to_whole_seconds(self):
        run = make_run(run_started_at=NOW - timedelta(seconds=61, milliseconds=500), updated_at=NOW)
        assert run.duration() == 62
        run = make_run(run_started_at=NOW - timedelta(seconds=61, milliseconds=499), updated_at=NOW)
        assert run.duration() == 61

    def test_never_negative(self):
        run = make_run(status="in_progress", run_started_at=NOW + timedelta(seconds=5))
        assert run.duration(NOW) == 0


def test_decodes_api_payload():
    payload = {
        "total_count": 1,
        "workflow_runs": [{
            "id": 123456,
            "name": "Tests",
            "head_branch": "main",
            "head_sha": "abc123",
            "run_number": 42,
            "status": "completed",
            "conclusion": "success",
            "html_url": "https://github.com/o/r/actions/runs/123456",
            "created_at": "2025-01-15T11:50:00Z",
            "updated_at": "2025-01-15T12:00:00Z",
            "run_started_at": "2025-01-15T11:55:00Z",
            "pull_requests": [{"number": 7, "url": "https://api.github.com/repos/o/r/pulls/7"}],
            "repository": {"full_name": "o/r"},
        }],
    }
    resp = WorkflowRunsResponse.model_validate(payload)
    run = resp.workflow_runs[0]
    assert run.run_number == 42
    assert run.pull_requests[0].number == 7
    assert run.duration() == 300


def test_runs_are_immutable():
    run = make_run()
    with pytest.raises(Exception):
        run.status = "queued"


class TestJob:

    def test_failed(self):
        assert Job(id=1, conclusion="failure").failed is True
        assert Job(id=1, conclusion="cancelled").failed is False
        assert Job(id=1, conclusion=None).failed is False

    def test_elapsed(self):
        job = Job(id=1, started_at=NOW, completed_at=NOW + timedelta(seconds=3.25))
        assert job.elapsed == pytest.approx(3.25)
        assert Job(id=1, started_at=NOW).elapsed == 0

    def test_decodes_jobs_payload(self):
        payload = {
            "total_count": 1,
            "jobs": [{
                "id": 9,
                "run_id": 123456,
                "name": "build",
                "status": "completed",
                "conclusion": "failure",
                "started_at": "2025-01-15T11:55:00Z",
                "completed_at": "2025-01-15T11:57:30Z",
                "steps": [{"name": "Run tests", "status": "completed", "conclusion": "failure", "number": 3}],
            }],
        }
        job = JobsResponse.model_validate(payload).jobs[0]
        assert job.failed
        assert job.elapsed == 150
        assert job.steps[0].name == "Run tests"

"""
Constants
Centralised storage for the version string, HTTP identity and polling intervals.
"""
VERSION = "0.2.1"
USER_AGENT = f"github-actions-python/{VERSION}"
APP_NAME = "github-actions"

DEFAULT_HOST = "github.com"
DEFAULT_REMOTE = "origin"
DEFAULT_FAILED_OUTPUT_LINES = 100
DEFAULT_TIMEOUT_SECONDS = 3600

# Polling cadence (seconds)
POLL_INTERVAL = 3.0
RETRY_BACKOFF = 2.0
NO_RUNS_BACKOFF = 5.0

# Bound on building a job table / failure report after the runs complete
SUMMARY_TIMEOUT = 20.0

RUNS_PER_PAGE = 20
JOBS_PER_PAGE = 100

# Conclusions that count a completed run as failed
FAILED_CONCLUSIONS = frozenset({"failure", "cancelled", "timed_out"})

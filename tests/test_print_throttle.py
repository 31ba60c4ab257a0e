"""
Unit Tests — Print Throttle
============================
Escalating intervals between interim status lines.
"""
import pytest

from ghactions.utils.print_throttle import print_interval, should_print

NOW = 1_700_000_000.0
MIN = 60


@pytest.mark.parametrize(
    "elapsed, since_last, expected",
    [
        (30, 5, False),
        (30, 11, True),
        (2 * MIN, 10, False),
        (2 * MIN, 16, True),
        (4 * MIN, 15, False),
        (4 * MIN, 21, True),
        (6 * MIN, 25, False),
        (6 * MIN, 31, True),
        (10 * MIN, MIN, False),
        (10 * MIN, 2 * MIN + 1, True),
        (30 * MIN, 2 * MIN, False),
        (30 * MIN, 3 * MIN + 1, True),
    ],
    ids=[
        "under_1m_before_10s",
        "under_1m_after_10s",
        "1m_to_3m_before_15s",
        "1m_to_3m_after_15s",
        "3m_to_5m_before_20s",
        "3m_to_5m_after_20s",
        "5m_to_8m_before_30s",
        "5m_to_8m_after_30s",
        "8m_to_25m_before_2m",
        "8m_to_25m_after_2m",
        "over_25m_before_3m",
        "over_25m_after_3m",
    ],
)
def test_should_print(elapsed, since_last, expected):
    assert should_print(NOW - since_last, elapsed, now=NOW) is expected


@pytest.mark.parametrize(
    "elapsed, interval",
    [
        (0, 10),
        (MIN, 10),
        (MIN + 1, 15),
        (3 * MIN, 15),
        (3 * MIN + 1, 20),
        (5 * MIN, 20),
        (5 * MIN + 1, 30),
        (8 * MIN, 30),
        (8 * MIN + 1, 120),
        (25 * MIN, 120),
        (25 * MIN + 1, 180),
        (10 * 60 * MIN, 180),
    ],
)
def test_bucket_boundaries_are_inclusive_upper_bounds(elapsed, interval):
    assert print_interval(elapsed) == interval


def test_exact_interval_is_not_yet_due():
    assert should_print(NOW - 10, 30, now=NOW) is False


def test_first_print_is_always_due():
    assert should_print(0.0, 0, now=NOW) is True


def test_bucket_follows_session_age_not_print_history():
    last = NOW - 45
    # Same gap since the last print, different session ages.
    assert should_print(last, 6 * MIN, now=NOW) is True
    assert should_print(last, 9 * MIN, now=NOW) is False

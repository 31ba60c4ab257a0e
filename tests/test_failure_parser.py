"""
Unit Tests — Failure Parser
============================
Tail extraction of failed job logs.
"""
import pytest

from ghactions.parser.failure_parser import find_build_failure


@pytest.mark.parametrize(
    "log, num_lines, expected",
    [
        (b"", 10, b""),
        (b"line1\nline2\n", 10, b"line1\nline2\n"),
        (b"line1\nline2\nline3\n", 3, b"line1\nline2\nline3\n"),
        (b"line1\nline2\nline3\n", 2, b"line2\nline3\n"),
        (b"line1\nline2\nline3\n", 1, b"line3\n"),
        (b"a\nb\nc\nd\ne\n", 3, b"c\nd\ne\n"),
    ],
    ids=["empty", "fewer_lines", "exact_count", "last_two", "last_one", "five_lines_last_three"],
)
def test_find_build_failure(log, num_lines, expected):
    assert find_build_failure(log, num_lines) == expected


def test_zero_lines_returns_empty_tail():
    assert find_build_failure(b"a\nb\n", 0) == b""


def test_single_newline_log():
    assert find_build_failure(b"\n", 5) == b"\n"


def test_log_without_trailing_newline():
    assert find_build_failure(b"a\nb\nc", 1) == b"c"


def test_result_is_suffix_of_input():
    log = b"".join(b"step %d output\n" % i for i in range(500))
    for n in (0, 1, 7, 499, 500, 501):
        tail = find_build_failure(log, n)
        assert log.endswith(tail)
        assert len(tail) <= len(log)
        expected_lines = min(n, 500)
        assert tail.count(b"\n") == expected_lines


def test_large_log_only_touches_the_tail():
    """Only the tail is sliced out; a huge prefix is never split into lines."""
    log = b"x" * 5_000_000 + b"\nerror: build failed\nexit 1\n"
    assert find_build_failure(log, 2) == b"error: build failed\nexit 1\n"


def test_non_utf8_bytes_pass_through():
    log = b"ok\n\xff\xfe broken\nend\n"
    assert find_build_failure(log, 2) == b"\xff\xfe broken\nend\n"

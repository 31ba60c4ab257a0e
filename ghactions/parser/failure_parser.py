"""
Failure Parser
==============
Extracts the tail of a failed job's raw log for the failure report.

Contract:
    - Works on raw bytes; never decodes or splits the whole log.
    - Walks backward from the end, so cost is proportional to the
      returned tail, not to the size of the log.
    - Returns a suffix of the input (never more bytes than it was given).
"""

_NEWLINE = ord("\n")


def find_build_failure(log: bytes, num_output_lines: int) -> bytes:
    """
    Return the last ``num_output_lines`` newline-terminated lines of ``log``.

    A log with exactly ``num_output_lines`` lines, or fewer, is returned
    unchanged.

    Parameters
    ----------
    log : bytes
        Raw job log, typically ending in a newline.
    num_output_lines : int
        Number of trailing lines to keep.

    Returns
    -------
    bytes
        The trailing lines, or the whole log.
    """
    if not log:
        return log

    newline_idx = len(log)
    for _ in range(num_output_lines):
        # Search strictly before the boundary we just found.
        prev_newline_idx = log.rfind(_NEWLINE, 0, newline_idx - 1)
        if prev_newline_idx == -1:
            return log
        newline_idx = prev_newline_idx + 1
    return log[newline_idx:]

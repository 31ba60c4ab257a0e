"""
Duration helpers shared by the run models and the output formatter.

All durations are float seconds. Rendering follows the compact unit style
operators already know from CI logs: ``1h2m3s``, ``2m5s``, ``4.57s``,
``450ms``, ``0s``.
"""
MICROS_PER_SECOND = 1_000_000


def round_duration(seconds: float, step: float) -> float:
    """
    Round ``seconds`` to a multiple of ``step``, halves away from zero.

    Works in whole microseconds (the resolution of API timestamps), so
    ``4.565`` rounds to ``4.57`` at a 10ms step.
    """
    step_us = round(step * MICROS_PER_SECOND)
    if step_us <= 0:
        return seconds
    micros = round(abs(seconds) * MICROS_PER_SECOND)
    units, rest = divmod(micros, step_us)
    if rest * 2 >= step_us:
        units += 1
    rounded = units * step_us / MICROS_PER_SECOND
    return -rounded if seconds < 0 else rounded


def _format_seconds(seconds: float) -> str:
    text = f"{seconds:.3f}".rstrip("0").rstrip(".")
    return text or "0"


def format_duration(seconds: float) -> str:
    """Render a duration in compact unit form."""
    if seconds == 0:
        return "0s"
    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)

    if seconds < 1:
        millis = round(seconds * 1000, 3)
        return f"{sign}{_format_seconds(millis)}ms"

    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    secs = round(secs, 3)
    if hours:
        return f"{sign}{int(hours)}h{int(minutes)}m{_format_seconds(secs)}s"
    if minutes:
        return f"{sign}{int(minutes)}m{_format_seconds(secs)}s"
    return f"{sign}{_format_seconds(secs)}s"

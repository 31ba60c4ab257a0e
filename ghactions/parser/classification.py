"""
Classification
==============
Decides whether a failed network call should be retried or should abort
the monitoring session.

Rules, in priority order:
    1. A generic request failure is unwrapped to the error it was raised from.
    2. TLS failure anywhere in the chain -> FATAL
    3. DNS resolution failure          -> RETRY
    4. Connection establishment failure -> RETRY
    5. Any timeout                      -> RETRY
    6. Anything else                    -> FATAL

Read failures on an established connection are FATAL: they may mean a real
protocol problem rather than a flaky network. httpx reports a failed TLS
handshake as a ConnectError, so the chain is searched for the SSL error
before the connection rule applies.
"""
import socket
import ssl
from enum import Enum
from typing import Iterator, Optional

import httpx


class ErrorClass(str, Enum):
    """Outcome of classifying a polling failure."""
    RETRY = "retry"
    FATAL = "fatal"


# Wrappers that say nothing about the failure beyond "the request failed".
_GENERIC_WRAPPERS: tuple[type, ...] = (
    httpx.RequestError,
    httpx.TransportError,
    httpx.NetworkError,
)

_DIAL_ERRORS: tuple[type, ...] = (
    httpx.ConnectError,
    ConnectionRefusedError,
)

_TIMEOUT_ERRORS: tuple[type, ...] = (
    httpx.TimeoutException,
    TimeoutError,
)


def _unwrap(exc: BaseException) -> BaseException:
    """Return the underlying cause of a generic request failure."""
    if type(exc) in _GENERIC_WRAPPERS and exc.__cause__ is not None:
        return exc.__cause__
    return exc


def _chain(exc: BaseException) -> Iterator[BaseException]:
    """``exc`` followed by every error it was raised from or while handling."""
    seen: set[int] = set()
    pending = [exc]
    while pending:
        err = pending.pop()
        if err is None or id(err) in seen:
            continue
        seen.add(id(err))
        yield err
        pending.extend((err.__context__, err.__cause__))


def classify_error(exc: Optional[BaseException]) -> Optional[ErrorClass]:
    """
    Classify a failure raised while polling the CI provider.

    Returns None when there is no error to classify.
    """
    if exc is None:
        return None

    if any(isinstance(err, ssl.SSLError) for err in _chain(exc)):
        return ErrorClass.FATAL

    err = _unwrap(exc)
    if isinstance(err, socket.gaierror):
        return ErrorClass.RETRY
    if isinstance(err, _DIAL_ERRORS):
        return ErrorClass.RETRY
    if isinstance(err, _TIMEOUT_ERRORS):
        return ErrorClass.RETRY
    return ErrorClass.FATAL


def is_retryable(exc: Optional[BaseException]) -> bool:
    """True if ``exc`` is a transient network failure worth retrying."""
    return classify_error(exc) is ErrorClass.RETRY

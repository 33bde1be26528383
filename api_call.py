"""
api_call.py
===========
Turn the completion of an asynchronous :class:`services_api.ApiCall` into a
single success-or-failure callback.

A finished request is first classified into one of four outcomes:

* ``Success``          -- 2xx status with a decoded body
* ``HttpError``        -- the server answered with a non-2xx status
* ``TransportFailure`` -- no usable response (network error, undecodable body)
* ``MissingBody``      -- 2xx status but no body for the success handler

and then routed by :func:`dispatch`: ``Success`` goes to ``on_success``,
everything else goes to ``on_failure`` as an exception.

Usage
-----
::

    from api_call import enqueue_api_call

    enqueue_api_call(
        client.get_services(),
        on_success=lambda record: print(record.message),
        on_failure=lambda exc: print(f"failed: {exc}"),
    )

If ``on_failure`` is omitted, failures are logged at DEBUG and dropped.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

logger = logging.getLogger('mvvm.api_call')


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ApiCallError(Exception):
    """Base class for failures synthesised by the dispatcher."""


class HttpStatusError(ApiCallError):
    """The server responded with a non-success status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"API call failed with status code {status_code}")
        self.status_code = status_code


class MissingBodyError(ApiCallError):
    """A success status arrived without a body."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"API call returned status code {status_code} without a body")
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Success:
    body: Any


@dataclass(frozen=True)
class HttpError:
    status_code: int


@dataclass(frozen=True)
class TransportFailure:
    cause: BaseException


@dataclass(frozen=True)
class MissingBody:
    status_code: int


RequestOutcome = Union[Success, HttpError, TransportFailure, MissingBody]


def classify_response(response) -> RequestOutcome:
    """Classify a completed :class:`services_api.ApiResponse`."""
    if not response.is_successful:
        return HttpError(response.status_code)
    if response.body is None:
        return MissingBody(response.status_code)
    return Success(response.body)


def classify_failure(exc: BaseException) -> RequestOutcome:
    return TransportFailure(exc)


def dispatch(
    outcome: RequestOutcome,
    on_success: Callable[[Any], None],
    on_failure: Callable[[BaseException], None],
) -> None:
    """Invoke exactly one of *on_success* / *on_failure* for *outcome*."""
    if isinstance(outcome, Success):
        on_success(outcome.body)
    elif isinstance(outcome, HttpError):
        on_failure(HttpStatusError(outcome.status_code))
    elif isinstance(outcome, MissingBody):
        on_failure(MissingBodyError(outcome.status_code))
    elif isinstance(outcome, TransportFailure):
        on_failure(outcome.cause)
    else:
        raise TypeError(f"Unknown request outcome: {outcome!r}")


def log_failure(error: BaseException) -> None:
    """Default failure handler: log at DEBUG and drop the error."""
    logger.debug("API call onFailure: %s", error)


class _Once:
    """Lets only the first completion signal through."""

    def __init__(self) -> None:
        self._lock  = threading.Lock()
        self._fired = False

    def claim(self) -> bool:
        with self._lock:
            if self._fired:
                return False
            self._fired = True
            return True


def enqueue_api_call(
    call,
    on_success: Callable[[Any], None],
    on_failure: Optional[Callable[[BaseException], None]] = None,
):
    """Enqueue *call* and route its completion to one handler.

    Args:
        call:       Object with an ``enqueue(on_response, on_failure)``
                    method, normally a :class:`services_api.ApiCall`.
        on_success: Receives the decoded body of a 2xx response.
        on_failure: Receives the exception describing any other outcome.
                    Defaults to :func:`log_failure`.

    Returns:
        Whatever ``call.enqueue`` returns (the worker thread for ``ApiCall``).
    """
    if on_failure is None:
        on_failure = log_failure
    once = _Once()

    def _complete(outcome: RequestOutcome) -> None:
        if not once.claim():
            logger.warning("Ignoring repeated completion for %r: %r", call, outcome)
            return
        dispatch(outcome, on_success, on_failure)

    def _on_response(response) -> None:
        if response.is_successful:
            logger.debug("API call onResponse: HTTP %s %r", response.status_code, response.body)
        else:
            logger.debug("API call onResponse: HTTP %s error body %r",
                         response.status_code, response.error_body)
        _complete(classify_response(response))

    def _on_failure(exc: BaseException) -> None:
        _complete(classify_failure(exc))

    return call.enqueue(_on_response, _on_failure)

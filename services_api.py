"""
services_api.py
===============
HTTP transport for the ``services`` endpoint.

The endpoint is a plain unauthenticated GET relative to a configured base
URL; the response body is a JSON object with at least a ``message`` key.

Requests are modelled as deferred :class:`ApiCall` objects.  A call can be
run on the current thread with :meth:`ApiCall.execute` or handed to a
background worker thread with :meth:`ApiCall.enqueue`, which reports back
through exactly one of two callbacks.

Usage
-----
::

    from services_api import ServicesApiClient

    client = ServicesApiClient("https://api.example.com/v1/")
    response = client.get_services().execute()
    if response.is_successful:
        print(response.body.message)

No retries, cancellation or auth are performed.  ``timeout=None`` leaves the
request without a timeout, which is the ``requests`` default.
"""

from __future__ import annotations

import logging
import threading
import urllib.parse
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

import requests

from services_models import ServiceRecord

logger = logging.getLogger('mvvm.api')

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
SERVICES_PATH = "services"

T = TypeVar("T")


@dataclass
class ApiResponse(Generic[T]):
    """Completed HTTP exchange.

    ``body`` is only parsed for successful statuses; it is ``None`` when a
    successful response carried no content.  For unsuccessful statuses the
    raw text is kept in ``error_body``.
    """

    status_code: int
    body: Optional[T] = None
    error_body: str = ""

    @property
    def is_successful(self) -> bool:
        return 200 <= self.status_code < 300


class ApiCall(Generic[T]):
    """A single deferred GET request whose body is decoded by *parse*."""

    def __init__(
        self,
        url: str,
        parse: Callable[[Any], T],
        timeout: Optional[float] = None,
    ) -> None:
        self.url      = url
        self._parse   = parse
        self._timeout = timeout

    def execute(self) -> ApiResponse[T]:
        """Perform the request on the calling thread.

        Raises:
            requests.RequestException: The request did not complete.
            Exception: A successful response body could not be decoded, e.g.
                ``ValueError`` for malformed JSON or ``RecursionError`` for
                pathologically nested JSON.
        """
        logger.debug("GET %s", self.url)
        resp = requests.get(self.url, timeout=self._timeout)

        if not 200 <= resp.status_code < 300:
            return ApiResponse(status_code=resp.status_code, error_body=resp.text)

        if not resp.content:
            return ApiResponse(status_code=resp.status_code)

        data = resp.json()
        if data is None:
            return ApiResponse(status_code=resp.status_code)
        return ApiResponse(status_code=resp.status_code, body=self._parse(data))

    def enqueue(
        self,
        on_response: Callable[[ApiResponse[T]], None],
        on_failure: Callable[[BaseException], None],
    ) -> threading.Thread:
        """Run :meth:`execute` on a daemon worker thread.

        Exactly one of *on_response* / *on_failure* is invoked from the
        worker once the request finishes.  Returns the started thread.
        """
        def _run() -> None:
            try:
                response = self.execute()
            except Exception as exc:
                on_failure(exc)
                return
            on_response(response)

        worker = threading.Thread(target=_run, name=f"ApiCall {self.url}", daemon=True)
        worker.start()
        return worker

    def __repr__(self) -> str:
        return f"ApiCall(url={self.url!r})"


class ServicesApiClient:
    """Client for the ``services`` endpoint rooted at *base_url*."""

    def __init__(self, base_url: str, timeout: Optional[float] = None) -> None:
        """
        Args:
            base_url: Absolute base URL; a trailing ``/`` is added if missing.
            timeout:  Request timeout in seconds, or ``None`` for no timeout.
        """
        if not base_url or not base_url.strip():
            raise ValueError("base_url must not be empty")
        base_url = base_url.strip()
        if not base_url.endswith("/"):
            base_url += "/"
        self._base_url = base_url
        self._timeout  = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    def get_services(self) -> ApiCall[ServiceRecord]:
        return ApiCall(self._url(SERVICES_PATH), ServiceRecord.from_dict, timeout=self._timeout)

    def _url(self, path: str) -> str:
        return urllib.parse.urljoin(self._base_url, path)

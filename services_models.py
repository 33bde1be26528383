"""
services_models.py
==================
Value types shared by the services client, dispatcher and repository.

``ServiceRecord`` is the one record the ``services`` endpoint returns::

    {"message": "Hello from the server"}

Fetch results are delivered as a tagged result instead of a bare record so
that a message from the server is never confused with a diagnostic about a
failure:

* :class:`Ok`  -- wraps the :class:`ServiceRecord` that was fetched
* :class:`Err` -- wraps the exception that ended the fetch

Both variants expose ``message``, the string a display surface shows.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union

ERROR_PREFIX = "Error fetching services: "


@dataclass(frozen=True)
class ServiceRecord:
    """A single ``{"message": ...}`` payload."""

    message: str

    @classmethod
    def from_dict(cls, data: Any) -> "ServiceRecord":
        """Build a record from a decoded JSON body.

        Keys other than ``message`` are ignored.

        Raises:
            ValueError: *data* is not an object or has no string ``message``.
        """
        if not isinstance(data, dict):
            raise ValueError(
                f"Expected a JSON object for ServiceRecord, got {type(data).__name__}"
            )
        message = data.get("message")
        if not isinstance(message, str):
            raise ValueError("ServiceRecord JSON is missing a string 'message' field")
        return cls(message=message)

    def to_dict(self) -> Dict[str, str]:
        return {"message": self.message}


@dataclass(frozen=True)
class Ok:
    record: ServiceRecord

    ok = True

    @property
    def message(self) -> str:
        return self.record.message


@dataclass(frozen=True)
class Err:
    error: BaseException

    ok = False

    @property
    def detail(self) -> str:
        return str(self.error)

    @property
    def message(self) -> str:
        """Display string, e.g. ``Error fetching services: API call failed ...``."""
        return f"{ERROR_PREFIX}{self.detail}"


ServiceResult = Union[Ok, Err]

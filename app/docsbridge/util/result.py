"""Outcome type for calls that must never raise into a chat handler."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Result:
    """Outcome of an operation.

    Three shapes are used:

    * ``Result.ok(value=x)`` -- success with a payload.
    * ``Result.empty(reason)`` -- success, but nothing to show (``value`` is
      ``None``).  The DocsBot API answers ``null`` while a bot is still
      indexing; that is not an error.
    * ``Result.fail(reason)`` -- the call failed; ``message`` says why.

    Examples::

        r = await client.ask("What is a vault?", convo_id)
        if not r:
            log(r.message)
        elif r.value is None:
            ...  # nothing available yet
    """

    success: bool
    message: str = ""
    value: Any = field(default=None, repr=False)

    @classmethod
    def ok(cls, message: str = "", *, value: Any = None) -> Result:
        return cls(success=True, message=message, value=value)

    @classmethod
    def empty(cls, message: str = "") -> Result:
        return cls(success=True, message=message, value=None)

    @classmethod
    def fail(cls, message: str = "") -> Result:
        return cls(success=False, message=message)

    @property
    def has_value(self) -> bool:
        return self.success and self.value is not None

    def __bool__(self) -> bool:
        return self.success

    def __iter__(self):
        yield self.success
        yield self.message

"""
Error taxonomy for the time-tracking engine.

Every failure raised by the ledger, the timer or the session maps onto one of
these kinds so callers (UI, CLI) can branch on the type and present it.
"""

from typing import List, Optional


class TimeTrackingError(Exception):
    """Base class for all recoverable time-tracking errors"""


class ValidationError(TimeTrackingError):
    """
    Malformed entry fields: negative duration, missing identifiers,
    unresolvable project, bad manual-entry input.
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or [message]

    @classmethod
    def from_pydantic(cls, exc) -> "ValidationError":
        """Translate a pydantic ValidationError, keeping one message per field"""
        messages = [
            f"{'.'.join(str(part) for part in err['loc']) or 'entry'}: {err['msg']}"
            for err in exc.errors()
        ]
        return cls("; ".join(messages), messages)


class NotFoundError(TimeTrackingError):
    """An operation referenced a time entry id that does not exist"""

    def __init__(self, entry_id: str):
        super().__init__(f"Time entry {entry_id!r} not found")
        self.entry_id = entry_id


class InvalidStateError(TimeTrackingError):
    """A timer transition was attempted from the wrong state"""


class LedgerWriteError(InvalidStateError):
    """
    The storage backend rejected a ledger mutation.

    The in-memory ledger is left unchanged; the original exception is
    chained as ``__cause__``.
    """

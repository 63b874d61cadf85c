from __future__ import annotations

from restitch_engine.errors import RestitchIOError, ValidationError

from .plan import InvalidEntry


class SnapshotValidationError(ValidationError):
    """
    Raised when one or more selected entries cannot be packaged.

    Attributes
    ----------
    invalid:
        Every invalid entry, not just the first one found.
    """

    def __init__(self, message: str, invalid: tuple[InvalidEntry, ...] = ()) -> None:
        super().__init__(message)
        self.invalid = invalid


class SnapshotIOError(RestitchIOError):
    """Raised when the output directory, container or manifest cannot be written."""

from __future__ import annotations

from restitch_engine.errors import RestitchError, RestitchIOError, ValidationError


class RestoreError(RestitchError):
    """Base class for restore-domain errors."""


class RestorePreflightError(RestoreError, ValidationError):
    """Raised when the archive or manifest is missing or they do not belong together."""


class RestorePlanError(RestoreError, ValidationError):
    """Raised when a manifest entry cannot be planned (unmappable path, missing content)."""


class RestoreExecutionError(RestoreError, RestitchIOError):
    """
    Raised when an entry fails during a real restore.

    Entries restored before the failure stay restored, and the failing
    entry's backup (if one was made) stays in the backup root.
    """

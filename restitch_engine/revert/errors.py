from __future__ import annotations

from restitch_engine.errors import RestitchIOError


class RevertError(RestitchIOError):
    """
    Raised when a revert cannot read its backup root or fails mid-copy.

    Files copied before the failure stay copied; there is no rollback.
    """

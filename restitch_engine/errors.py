"""
Domain exceptions for Restitch.

Notes
-----
Restitch avoids raising generic exceptions from core engine logic.
Every expected failure mode maps to a domain exception with clear meaning, and
every message names the offending path or entry so the operator can act manually.
"""

from __future__ import annotations


class RestitchError(RuntimeError):
    """Base exception for all Restitch domain failures."""


class UsageError(RestitchError):
    """Raised when an invalid option combination is requested."""


class ValidationError(RestitchError):
    """Raised when inputs fail validation before any side effect occurs."""


class PathMappingError(ValidationError):
    """Raised when a path cannot be expressed relative to the home directory."""


class FormatError(RestitchError):
    """Raised when a structured file (manifest, targets) cannot be parsed."""


class RestitchIOError(RestitchError):
    """Raised when a filesystem operation fails during an invocation."""


class ContainerError(RestitchIOError):
    """Raised when a snapshot container cannot be written or extracted."""


class UserCancelledError(RestitchError):
    """Raised when the operator declines an interactive confirmation."""

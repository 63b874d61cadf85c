"""Manifest and targets-file exception hierarchy for Restitch."""

from __future__ import annotations

from .errors import FormatError, RestitchIOError


class ManifestFormatError(FormatError):
    """Raised when a snapshot manifest cannot be parsed or fails validation."""


class TargetsFormatError(FormatError):
    """Raised when a targets file cannot be read or parsed."""


class ManifestIOError(RestitchIOError):
    """Raised when a manifest cannot be written."""

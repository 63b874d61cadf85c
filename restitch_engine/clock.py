"""
Clock abstractions for deterministic behavior.

Notes
-----
Engine code must not access wall-clock time directly. Callers provide a Clock.
This enables deterministic tests and reproducible backup labels.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

BACKUP_LABEL_FORMAT = "%Y-%m-%d_%H-%M-%S"


class Clock(Protocol):
    """A source of time for deterministic behavior."""

    def now(self) -> datetime:
        """
        Return the current time.

        Returns
        -------
        datetime
            Current time. Backup labels are rendered from this value as-is.
        """
        ...


@dataclass(frozen=True, slots=True)
class SystemClock:
    """Clock that returns the current local system time."""

    def now(self) -> datetime:
        """
        Return the current local time.

        Returns
        -------
        datetime
            Current time as a timezone-aware datetime in the local zone.
        """
        return datetime.now().astimezone()


@dataclass(frozen=True, slots=True)
class FixedClock:
    """Clock that always returns a fixed time (useful for tests)."""

    fixed_time: datetime

    def now(self) -> datetime:
        """
        Return the fixed time.

        Returns
        -------
        datetime
            The fixed time value.
        """
        return self.fixed_time


def format_backup_label(moment: datetime) -> str:
    """
    Render a backup root label.

    Parameters
    ----------
    moment:
        Time to render.

    Returns
    -------
    str
        Label in ``YYYY-MM-DD_HH-MM-SS`` form. Fields are fixed-width and
        zero-padded, so lexicographic order equals chronological order.
    """
    return moment.strftime(BACKUP_LABEL_FORMAT)


def parse_backup_label(label: str) -> datetime | None:
    """
    Parse a backup root label.

    Parameters
    ----------
    label:
        Directory name to parse.

    Returns
    -------
    datetime | None
        Naive datetime for a well-formed label, otherwise None.
    """
    try:
        parsed = datetime.strptime(label, BACKUP_LABEL_FORMAT)
    except ValueError:
        return None
    # strptime accepts unpadded fields; only canonical labels sort correctly.
    if parsed.strftime(BACKUP_LABEL_FORMAT) != label:
        return None
    return parsed

"""Data models for Restitch.

This module defines the canonical, typed representation of config entries and
snapshot manifests. A manifest describes exactly one snapshot container; the two
travel together on disk.

The models in this module are intentionally standard-library-only (dataclasses)
and carry no behavior beyond dict conversion. TOML encoding lives in
``manifest_store``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Self


def _require_str(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{key!r} must be a non-empty string")
    return value


@dataclass(frozen=True, slots=True)
class TargetDefinition:
    """
    A pre-snapshot target definition (one ``[[config]]`` table).

    Attributes
    ----------
    name:
        Display label.
    path:
        Filesystem path, possibly containing a leading ``~``.
    """

    name: str
    path: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to a TOML-serializable payload."""
        return {"name": self.name, "path": self.path}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Self:
        """Parse a target definition, raising ValueError when fields are missing."""
        return cls(name=_require_str(payload, "name"), path=_require_str(payload, "path"))


@dataclass(frozen=True, slots=True)
class ConfigEntry:
    """
    A named, path-addressed config target.

    Attributes
    ----------
    name:
        Display label. Names are not unique.
    path:
        Absolute filesystem path resolved at capture time.
    selected:
        Transient selection state. It carries no meaning after packaging and is
        reset to True when a manifest is loaded for restore.
    """

    name: str
    path: str
    selected: bool = True

    def with_selected(self, selected: bool) -> "ConfigEntry":
        """Return a copy with a different selection flag."""
        return replace(self, selected=selected)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a TOML-serializable payload."""
        return {"name": self.name, "path": self.path, "selected": self.selected}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Self:
        """Parse an entry, raising ValueError when fields are missing or mistyped."""
        selected = payload.get("selected", True)
        if not isinstance(selected, bool):
            raise ValueError("'selected' must be a boolean")
        return cls(
            name=_require_str(payload, "name"),
            path=_require_str(payload, "path"),
            selected=selected,
        )


@dataclass(frozen=True, slots=True)
class SnapshotManifest:
    """
    Ordered collection of entries describing one snapshot.

    Attributes
    ----------
    items:
        Entries in selection order at packaging time.
    archive_name:
        File name of the container this manifest describes, if recorded.
    archive_sha256:
        SHA-256 of the container bytes, if recorded. Used as an integrity check
        at restore time; manifests without it are accepted without the check.
    created_at:
        Packaging time as an ISO-8601 string, if recorded.
    """

    items: tuple[ConfigEntry, ...] = field(default_factory=tuple)
    archive_name: str | None = None
    archive_sha256: str | None = None
    created_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a TOML-serializable payload (None values are omitted)."""
        payload: dict[str, Any] = {}
        if self.archive_name is not None:
            payload["archive_name"] = self.archive_name
        if self.archive_sha256 is not None:
            payload["archive_sha256"] = self.archive_sha256
        if self.created_at is not None:
            payload["created_at"] = self.created_at
        payload["items"] = [item.to_dict() for item in self.items]
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Self:
        """
        Parse a manifest payload.

        Parameters
        ----------
        payload:
            Decoded TOML document.

        Returns
        -------
        SnapshotManifest
            Parsed manifest. Every entry has ``selected`` reset to True.

        Raises
        ------
        ValueError
            If the payload does not have the expected shape.
        """
        raw_items = payload.get("items", [])
        if not isinstance(raw_items, list):
            raise ValueError("'items' must be an array of tables")

        items: list[ConfigEntry] = []
        for index, raw in enumerate(raw_items):
            if not isinstance(raw, Mapping):
                raise ValueError(f"items[{index}] must be a table")
            try:
                items.append(ConfigEntry.from_dict(raw).with_selected(True))
            except ValueError as exc:
                raise ValueError(f"items[{index}]: {exc}") from exc

        def _optional(key: str) -> str | None:
            value = payload.get(key)
            if value is None:
                return None
            if not isinstance(value, str):
                raise ValueError(f"{key!r} must be a string")
            return value

        return cls(
            items=tuple(items),
            archive_name=_optional("archive_name"),
            archive_sha256=_optional("archive_sha256"),
            created_at=_optional("created_at"),
        )

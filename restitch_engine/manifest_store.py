"""
Manifest and targets-file I/O.

Manifests and targets files are TOML documents:

- targets file: ``[[config]]`` tables with ``name`` and ``path``
- snapshot manifest: ``[[items]]`` tables with ``name``, ``path``, ``selected``,
  plus optional top-level integrity fields

Design constraints
------------------
- Writes are atomic (temp file + replace) so a manifest is never half-written.
- Parse failures always name the offending file.
- Serialization is deterministic for a given in-memory object.
"""

from __future__ import annotations

import hashlib
import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

import tomli_w

from .data_models import SnapshotManifest, TargetDefinition
from .exceptions import ManifestFormatError, ManifestIOError, TargetsFormatError

TARGETS_EXAMPLE = '[[config]]\nname = "Zsh Config"\npath = "~/.zshrc"\n'

_DIGEST_CHUNK_SIZE = 1024 * 1024


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def read_manifest(manifest_path: Path) -> SnapshotManifest:
    """
    Read and validate a snapshot manifest from disk.

    Parameters
    ----------
    manifest_path:
        Path to a ``.manifest.toml`` file.

    Returns
    -------
    SnapshotManifest
        Parsed manifest with every entry's ``selected`` flag reset to True.

    Raises
    ------
    ManifestFormatError
        If the file cannot be read, is not valid TOML, or has the wrong shape.
    """
    try:
        payload = _read_toml(manifest_path)
    except OSError as exc:
        raise ManifestFormatError(f"Failed to read manifest: {manifest_path} ({exc!s})") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ManifestFormatError(f"Invalid TOML in manifest: {manifest_path} ({exc!s})") from exc

    try:
        return SnapshotManifest.from_dict(payload)
    except ValueError as exc:
        raise ManifestFormatError(f"Manifest validation failed: {manifest_path} ({exc!s})") from exc


def write_toml_atomic(toml_path: Path, payload: Mapping[str, Any]) -> None:
    """
    Write a TOML document atomically to disk.

    Parameters
    ----------
    toml_path:
        Final destination path. Parent directories are created.
    payload:
        TOML-serializable mapping (no None values).

    Raises
    ------
    ManifestIOError
        If the document cannot be written.
    """
    toml_path = toml_path.expanduser()
    temp_path = toml_path.with_suffix(toml_path.suffix + ".tmp")

    try:
        toml_path.parent.mkdir(parents=True, exist_ok=True)
        with temp_path.open("wb") as handle:
            tomli_w.dump(dict(payload), handle)
        os.replace(temp_path, toml_path)
    except OSError as exc:
        try:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise ManifestIOError(f"Failed to write TOML: {toml_path} ({exc!s})") from exc


def write_manifest_atomic(manifest_path: Path, manifest: SnapshotManifest) -> None:
    """Atomically write a snapshot manifest to disk."""
    write_toml_atomic(manifest_path, manifest.to_dict())


def load_targets(targets_path: Path) -> list[TargetDefinition]:
    """
    Load pre-snapshot target definitions from a TOML targets file.

    Parameters
    ----------
    targets_path:
        Path to a file made of ``[[config]]`` tables.

    Returns
    -------
    list[TargetDefinition]
        Definitions in file order.

    Raises
    ------
    TargetsFormatError
        If the file is unreadable or does not use ``[[config]]`` tables with
        ``name`` and ``path`` fields.
    """
    try:
        payload = _read_toml(targets_path)
    except OSError as exc:
        raise TargetsFormatError(
            f"Could not read targets file at {targets_path}. Example format:\n\n{TARGETS_EXAMPLE}"
        ) from exc
    except tomllib.TOMLDecodeError as exc:
        raise TargetsFormatError(
            f"Failed to parse targets file at {targets_path} ({exc!s}). "
            "Use [[config]] blocks with 'name' and 'path' fields."
        ) from exc

    raw_configs = payload.get("config")
    if not isinstance(raw_configs, list):
        raise TargetsFormatError(
            f"Targets file {targets_path} has no [[config]] blocks. Example format:\n\n{TARGETS_EXAMPLE}"
        )

    definitions: list[TargetDefinition] = []
    for index, raw in enumerate(raw_configs):
        if not isinstance(raw, Mapping):
            raise TargetsFormatError(f"{targets_path}: config[{index}] must be a table")
        try:
            definitions.append(TargetDefinition.from_dict(raw))
        except ValueError as exc:
            raise TargetsFormatError(f"{targets_path}: config[{index}]: {exc}") from exc
    return definitions


def write_targets(targets_path: Path, definitions: list[TargetDefinition]) -> None:
    """Atomically write target definitions as ``[[config]]`` tables."""
    write_toml_atomic(targets_path, {"config": [d.to_dict() for d in definitions]})


def sha256_file(path: Path) -> str:
    """
    Compute the SHA-256 hex digest of a file.

    Raises
    ------
    OSError
        If the file cannot be read.
    """
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_DIGEST_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()

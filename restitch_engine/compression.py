from __future__ import annotations

import gzip
import tarfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Sequence

import zstandard as zstd

from .errors import ContainerError


class ContainerFormat(str, Enum):
    """
    Supported snapshot container formats.

    Snapshots are always written as ``tar.zst``. ``tar.gz`` containers are
    accepted on extraction.
    """

    TAR_ZST = "tar.zst"
    TAR_GZ = "tar.gz"


@dataclass(frozen=True, slots=True)
class ContainerMember:
    """
    One entry to add to a container.

    Attributes
    ----------
    source_path:
        Live file or directory to add.
    relative_path:
        Home-relative path the entry is stored under.
    """

    source_path: Path
    relative_path: PurePosixPath


def container_format_for(archive_path: Path) -> ContainerFormat:
    """
    Determine the container format from a file name.

    Raises
    ------
    ContainerError
        If the extension is not a supported container type.
    """
    lower = archive_path.name.lower()
    if lower.endswith(".tar.zst") or lower.endswith(".tzst"):
        return ContainerFormat.TAR_ZST
    if lower.endswith(".tar.gz") or lower.endswith(".tgz"):
        return ContainerFormat.TAR_GZ
    raise ContainerError(f"Unsupported container type: {archive_path}")


def write_container(*, output_path: Path, members: Sequence[ContainerMember]) -> Path:
    """
    Write a ``tar.zst`` container holding each member at its relative path.

    Parameters
    ----------
    output_path:
        Target container path. An existing file is replaced.
    members:
        Entries to add, in order. Directories are added recursively.
        Symlinks are followed, so the container holds the linked content.

    Returns
    -------
    pathlib.Path
        The written container path.

    Raises
    ------
    ContainerError
        If the container cannot be written, including when a symlink inside
        a member does not resolve.
    """
    try:
        with output_path.open("wb") as raw:
            cctx = zstd.ZstdCompressor()
            with cctx.stream_writer(raw) as zst_stream:
                with tarfile.open(fileobj=zst_stream, mode="w|", dereference=True) as tf:
                    for member in members:
                        tf.add(
                            member.source_path,
                            arcname=member.relative_path.as_posix(),
                            recursive=True,
                        )
    except (OSError, tarfile.TarError, zstd.ZstdError) as exc:
        raise ContainerError(f"Failed to write container: {output_path} ({exc!s})") from exc
    return output_path


def extract_container(*, archive_path: Path, destination_dir: Path) -> Path:
    """
    Extract a container into destination_dir.

    Parameters
    ----------
    archive_path:
        Path to a ``.tar.zst`` or ``.tar.gz`` container.
    destination_dir:
        Directory to extract into (created if missing).

    Returns
    -------
    pathlib.Path
        The destination_dir after extraction.

    Raises
    ------
    ContainerError
        If the container type is unsupported, the container is corrupt, or a
        member would land outside destination_dir.
    """
    fmt = container_format_for(archive_path)

    try:
        destination_dir.mkdir(parents=True, exist_ok=True)
        if fmt is ContainerFormat.TAR_ZST:
            _extract_tar_zst(archive_path=archive_path, destination_dir=destination_dir)
        else:
            _extract_tar_gz(archive_path=archive_path, destination_dir=destination_dir)
    except (OSError, EOFError, tarfile.TarError, zstd.ZstdError) as exc:
        raise ContainerError(f"Failed to extract container: {archive_path} ({exc!s})") from exc
    return destination_dir


def _extract_tar_zst(*, archive_path: Path, destination_dir: Path) -> None:
    with archive_path.open("rb") as raw:
        dctx = zstd.ZstdDecompressor()
        with dctx.stream_reader(raw) as reader:
            with tarfile.open(fileobj=reader, mode="r|") as tf:
                tf.extractall(destination_dir, filter="data")


def _extract_tar_gz(*, archive_path: Path, destination_dir: Path) -> None:
    with gzip.open(archive_path, "rb") as reader:
        with tarfile.open(fileobj=reader, mode="r|") as tf:
            tf.extractall(destination_dir, filter="data")

"""Build context packaging.

Turns a local source directory into a gzip-compressed tar archive that the
platform's image builder unpacks as its Docker build context. Hidden entries
(names starting with ``.``) are left out, except ``.dockerignore`` which the
builder needs. Entries are written in sorted order with normalized ownership
and a fixed gzip timestamp, so the same tree always packs to the same bytes.
"""

from __future__ import annotations

import gzip
import os
import signal
import tarfile
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from types import FrameType

from loguru import logger

from .errors import DockerfileNotFound, FileSystemError

DOCKERIGNORE = ".dockerignore"
ARCHIVE_PREFIX = "coderun-build-"
ARCHIVE_SUFFIX = ".tar.gz"


def is_excluded(name: str) -> bool:
    """Whether a directory entry with base name ``name`` is left out."""
    return name.startswith(".") and name != DOCKERIGNORE


def _raise_walk_error(error: OSError) -> None:
    raise error


def iter_context_entries(source_dir: Path, skip: Path | None = None) -> Iterator[Path]:
    """Yield paths to archive, depth-first in sorted order.

    Hidden directories are pruned without descending into them. ``skip`` is
    never yielded, which keeps an archive written inside the context from
    packing itself. Entries are compared by location only; symlinks are never
    followed.
    """
    skip_resolved = skip.parent.resolve() / skip.name if skip is not None else None

    for root, dirs, files in os.walk(source_dir, onerror=_raise_walk_error):
        root_path = Path(root)
        root_resolved = root_path.resolve()
        dirs[:] = sorted(d for d in dirs if not is_excluded(d))

        entries = [root_path / d for d in dirs]
        entries += [root_path / f for f in sorted(files) if not is_excluded(f)]

        for entry in sorted(entries):
            if (
                skip_resolved is not None
                and root_resolved / entry.name == skip_resolved
            ):
                continue
            yield entry


def _normalize(info: tarfile.TarInfo) -> tarfile.TarInfo:
    info.uid = info.gid = 0
    info.uname = info.gname = ""
    info.mtime = int(info.mtime)
    return info


def pack_build_context(source_dir: str | Path, archive_path: str | Path) -> int:
    """Pack ``source_dir`` into a ``.tar.gz`` at ``archive_path``.

    Args:
        source_dir: Build context directory
        archive_path: Destination file, overwritten if present

    Returns:
        Number of entries written

    Raises:
        FileSystemError: If the archive cannot be written or a file read
    """
    source = Path(source_dir)
    destination = Path(archive_path)
    count = 0

    try:
        with (
            open(destination, "wb") as raw,
            gzip.GzipFile(filename="", fileobj=raw, mode="wb", mtime=0) as compressed,
            tarfile.open(
                fileobj=compressed, mode="w", format=tarfile.PAX_FORMAT
            ) as tar,
        ):
            for entry in iter_context_entries(source, skip=destination):
                arcname = entry.relative_to(source).as_posix()
                info = tar.gettarinfo(str(entry), arcname=arcname)
                if info is None:
                    # sockets and other types tar cannot represent
                    logger.debug(f"Skipping unsupported file type: {entry}")
                    continue
                info = _normalize(info)
                if info.isreg():
                    with open(entry, "rb") as content:
                        tar.addfile(info, content)
                else:
                    tar.addfile(info)
                count += 1
    except OSError as e:
        raise FileSystemError(
            f"Error creating build context: {e}",
            details=f"Source: {source}\nArchive: {destination}",
        ) from e

    logger.debug(f"Packed {count} entries from {source} into {destination}")
    return count


def validate_build_context(context_dir: str | Path) -> Path:
    """Ensure the build context exists and is a directory."""
    path = Path(context_dir)
    if not path.is_dir():
        raise FileSystemError(f"Build context directory does not exist: {path}")
    return path


def validate_dockerfile(context_dir: str | Path, dockerfile_path: str) -> Path:
    """Ensure ``dockerfile_path`` names a regular file inside the context.

    Raises:
        DockerfileNotFound: If the joined path is not a regular file
    """
    full_path = Path(context_dir) / dockerfile_path
    if not full_path.is_file():
        raise DockerfileNotFound(dockerfile_path)
    return full_path


def build_context_path(app_name: str) -> Path:
    """Deterministic temp location of the archive for ``app_name``."""
    return Path(tempfile.gettempdir()) / f"{ARCHIVE_PREFIX}{app_name}{ARCHIVE_SUFFIX}"


def _remove_archive(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
        logger.debug(f"Removed build context archive {path}")
    except OSError as e:
        logger.warning(f"Could not remove build context archive {path}: {e}")


@contextmanager
def build_context_archive(app_name: str) -> Iterator[Path]:
    """Own the temporary archive for one build attempt.

    Yields the archive path and removes the file on every exit: normal
    return, exceptions, Ctrl-C and SIGTERM. While the scope is active (and
    when running on the main thread) SIGTERM is turned into
    ``KeyboardInterrupt`` so the ``finally`` block still runs.
    """
    path = build_context_path(app_name)
    previous_handler = None
    on_main_thread = threading.current_thread() is threading.main_thread()

    def _terminate(signum: int, frame: FrameType | None) -> None:
        raise KeyboardInterrupt

    if on_main_thread:
        previous_handler = signal.signal(signal.SIGTERM, _terminate)
    try:
        yield path
    finally:
        _remove_archive(path)
        if on_main_thread:
            signal.signal(
                signal.SIGTERM,
                previous_handler if previous_handler is not None else signal.SIG_DFL,
            )

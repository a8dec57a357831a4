"""Filesystem storage used by the changelog and the fragment store.

Only a handful of operations are needed: read, atomic write, delete and
listing.  Missing files read as ``None``; every other ``OSError`` is raised
as ``StorageFailure``.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from cl_cli.errors import StorageFailure

logger = logging.getLogger(__name__)


class FileStorage:
    """Local filesystem implementation of the storage capability set."""

    def read(self, location: Path) -> bytes | None:
        """Return the bytes stored at *location*, or ``None`` when missing."""
        try:
            return Path(location).read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageFailure(location, f"cannot read: {exc.strerror or exc}") from exc

    def write(self, location: Path, data: bytes) -> None:
        """Replace the contents of *location* atomically.

        Parent directories are created as needed.  The data goes to a
        temporary file in the same directory which is then renamed over the
        target.
        """
        target = Path(location)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
            )
        except OSError as exc:
            raise StorageFailure(location, f"cannot write: {exc.strerror or exc}") from exc
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_path, target)
        except OSError as exc:
            Path(tmp_path).unlink(missing_ok=True)
            raise StorageFailure(location, f"cannot write: {exc.strerror or exc}") from exc
        logger.debug("Wrote %d bytes to %s", len(data), target)

    def delete(self, location: Path) -> None:
        """Remove a file or an empty directory.  Missing is not an error."""
        path = Path(location)
        try:
            if path.is_dir():
                path.rmdir()
            else:
                path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageFailure(location, f"cannot delete: {exc.strerror or exc}") from exc
        logger.debug("Deleted %s", path)

    def list_children(self, location: Path) -> list[Path]:
        """Children of a directory in sorted order; empty when missing."""
        path = Path(location)
        try:
            return sorted(path.iterdir())
        except (FileNotFoundError, NotADirectoryError):
            return []
        except OSError as exc:
            raise StorageFailure(location, f"cannot list: {exc.strerror or exc}") from exc

    def is_container(self, location: Path) -> bool:
        return Path(location).is_dir()

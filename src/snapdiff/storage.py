"""
Snapshot storage.

Each test owns exactly one file, ``{directory}/{identity}``, where the identity
is derived from the test name by :func:`snapshot_filename`. Contents are the raw
serialized bytes, with no metadata around them, so snapshot files diff cleanly
in version control.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .config import DEFAULT_EXTENSION
from .exceptions import SnapshotNotFoundError, SnapshotWriteError

logger = logging.getLogger(__name__)

_FILENAME_TRANSLATION = str.maketrans({c: "-" for c in "' <>&#/\\"})


def snapshot_filename(test_name: str, extension: str = DEFAULT_EXTENSION) -> str:
    """Map a test name to its snapshot file name.

    The name is lower-cased and each of ``'``, space, ``<``, ``>``, ``&``,
    ``#``, ``/`` and ``\\`` becomes ``-``. Distinct names can collide.

    >>> snapshot_filename("TestParse/Nested <list>")
    'testparse-nested--list-.snap'
    """
    return test_name.lower().translate(_FILENAME_TRANSLATION) + extension


class SnapshotStore:
    """Reads and writes snapshot files in one directory."""

    def __init__(self, directory: str | Path, extension: str = DEFAULT_EXTENSION):
        self.directory = Path(directory)
        self.extension = extension

    def path_for(self, test_name: str) -> Path:
        """Return the snapshot path for ``test_name``."""
        return self.directory / snapshot_filename(test_name, self.extension)

    def directory_exists(self) -> bool:
        return self.directory.is_dir()

    def create_directory(self) -> None:
        """Create the snapshot directory and any missing parents."""
        try:
            self.directory.mkdir(mode=0o777, parents=True, exist_ok=True)
        except OSError as e:
            raise SnapshotWriteError(f"Unable to create the snapshot directory {self.directory}: {e}") from e
        logger.info(f"Created snapshot directory {self.directory}")

    def exists(self, test_name: str) -> bool:
        return self.path_for(test_name).is_file()

    def read(self, test_name: str) -> bytes:
        """Read the stored snapshot for ``test_name``.

        Raises:
            SnapshotNotFoundError: if the file is missing or unreadable.
        """
        path = self.path_for(test_name)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise SnapshotNotFoundError(path) from e
        except OSError as e:
            raise SnapshotNotFoundError(path, reason=f"could not be read: {e}") from e

    def write(self, test_name: str, data: bytes) -> Path:
        """Create or overwrite the snapshot for ``test_name``.

        Raises:
            SnapshotWriteError: if the file cannot be written.
        """
        path = self.path_for(test_name)
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise SnapshotWriteError(f"Unable to write snapshot {path}: {e}") from e
        logger.debug(f"Wrote {len(data)} bytes to {path}")
        return path

    def delete(self, test_name: str) -> bool:
        """Delete the snapshot for ``test_name``; False if there was none."""
        path = self.path_for(test_name)
        if not path.is_file():
            return False
        path.unlink()
        logger.info(f"Deleted snapshot {path}")
        return True

    def list_snapshots(self) -> list[Path]:
        """List snapshot files carrying this store's extension."""
        if not self.directory_exists():
            return []
        return sorted(
            p for p in self.directory.iterdir()
            if p.is_file() and p.name.endswith(self.extension)
        )

    def get_stats(self) -> dict[str, Any]:
        """Get statistics about stored snapshots."""
        snapshots = self.list_snapshots()
        total_size = 0
        for path in snapshots:
            try:
                total_size += path.stat().st_size
            except OSError as e:
                logger.warning(f"Failed to stat snapshot {path}: {e}")

        return {
            "directory": str(self.directory),
            "total_snapshots": len(snapshots),
            "total_size_bytes": total_size,
        }

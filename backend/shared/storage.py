"""Key-value storage for serialized game snapshots.

A key such as ``ecpoker/game-state/v1`` maps to ``ecpoker/game-state/v1.json``
under the storage root. Files are written atomically with owner-only
permissions (0o600) inside owner-only directories (0o700).
"""

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog

logger = structlog.get_logger()

# Owner-only directory permissions for snapshot storage.
_SNAPSHOT_DIR_MODE = 0o700

# Owner-only file permissions for snapshot files.
_SNAPSHOT_FILE_MODE = 0o600

_SNAPSHOT_SUFFIX = ".json"


class SnapshotStorage(Protocol):
    """Protocol for persisting serialized snapshots under a fixed key."""

    def save(self, key: str, content: str) -> None: ...

    def load(self, key: str) -> str | None: ...


class LocalSnapshotStorage:
    """Writes snapshot files to the local filesystem with restricted permissions."""

    def __init__(self, root_dir: str) -> None:
        self._root = Path(root_dir).resolve()

    def _path_for(self, key: str) -> Path:
        """Resolve a key to a file path, rejecting keys that escape the root."""
        if not key.strip():
            raise ValueError("Snapshot key must not be empty")
        target = (self._root / f"{key}{_SNAPSHOT_SUFFIX}").resolve()
        if not target.is_relative_to(self._root):
            raise ValueError(f"Path traversal rejected: '{key}' resolves outside snapshot directory")
        return target

    def save(self, key: str, content: str) -> None:
        """Save snapshot content under the configured directory.

        Creates directories lazily on first write with owner-only permissions
        (0o700). Writes atomically via temp-file-then-rename with owner-only
        permissions (0o600).
        """
        target = self._path_for(key)

        target.parent.mkdir(mode=_SNAPSHOT_DIR_MODE, parents=True, exist_ok=True)
        target.parent.chmod(_SNAPSHOT_DIR_MODE)

        fd, tmp_path = tempfile.mkstemp(dir=str(target.parent), suffix=".tmp", prefix=".snapshot_")
        fd_owned = True
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                fd_owned = False  # os.fdopen took ownership; it will close fd
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, _SNAPSHOT_FILE_MODE)  # noqa: PTH101
            Path(tmp_path).replace(target)
        except BaseException:
            if fd_owned:
                with contextlib.suppress(OSError):
                    os.close(fd)
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise
        logger.debug("saved snapshot", key=key, path=str(target))

    def load(self, key: str) -> str | None:
        """Return stored content for ``key``, or None if nothing was saved."""
        target = self._path_for(key)
        try:
            return target.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None


"""Key-value JSON documents on local disk.

Each key is stored as ``<directory>/<key>.json``.  Writes go through a
temporary file and ``os.replace`` so a crash never leaves half a document.
"""

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class SnapshotFiles:
    """Durable storage for the local state and saved views."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        """Return the stored document, or ``None`` if absent or unreadable."""
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError:
            logger.warning("snapshot_undecodable", extra={"path": str(path)})
            return None
        except OSError:
            logger.warning("snapshot_read_failed", extra={"path": str(path)}, exc_info=True)
            return None

    def write(self, key: str, document: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(document)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("snapshot_written", extra={"key": key, "bytes": len(document)})

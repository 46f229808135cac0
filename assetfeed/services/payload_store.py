"""Local filesystem storage for uploaded payload bytes.

Payloads are stored flat as ``{storage_dir}/{node_id}.{ext}``. The tree
structure lives only in the database, so moving or renaming nodes never
touches the disk.
"""

import logging
import shutil
from pathlib import Path
from typing import BinaryIO, Optional, Tuple

from ..core.config import settings

logger = logging.getLogger(__name__)

_COPY_CHUNK_SIZE = 1024 * 1024


class PayloadStore:
    """Stores, copies, and releases payload files under one directory."""

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or settings.storage_dir)
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, node_id: str, extension: str) -> Path:
        return self.root / f"{node_id}.{extension or 'unknown'}"

    def save(self, node_id: str, extension: str, source: BinaryIO) -> Tuple[Path, int]:
        """Stream *source* into storage. Returns the stored path and byte size."""
        target = self.path_for(node_id, extension)
        with open(target, "wb") as out:
            shutil.copyfileobj(source, out, _COPY_CHUNK_SIZE)
        return target, target.stat().st_size

    def copy(self, source_path: str, node_id: str, extension: str) -> Path:
        """Copy an existing payload under a new node id.

        Raises:
            OSError: source missing or unreadable.
        """
        target = self.path_for(node_id, extension)
        shutil.copyfile(source_path, target)
        return target

    def delete(self, path: Optional[str]) -> None:
        """Remove a payload. A payload that is already gone counts as removed.

        Raises:
            OSError: the file exists but could not be removed.
        """
        if not path:
            return
        Path(path).unlink(missing_ok=True)

    def read_text(self, path: Optional[str], limit: int) -> Tuple[str, bool]:
        """Decode up to *limit* characters of a payload as UTF-8.

        Undecodable bytes are replaced. Returns the text and whether the
        payload held more than *limit* characters.

        Raises:
            OSError: payload missing or unreadable.
        """
        if not path:
            raise FileNotFoundError("payload has no stored path")
        with open(path, "r", encoding="utf-8", errors="replace") as source:
            text = source.read(limit + 1)
        return text[:limit], len(text) > limit

    def exists(self, path: Optional[str]) -> bool:
        return bool(path) and Path(path).is_file()

    def release(self, path: Optional[str]) -> bool:
        """Best-effort delete. Logs and returns False instead of raising."""
        try:
            self.delete(path)
            return True
        except OSError as exc:
            logger.warning(
                "Could not delete payload",
                extra={"payload_path": path, "error": str(exc)},
            )
            return False

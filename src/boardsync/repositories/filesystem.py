"""Filesystem-backed slot storage."""

from __future__ import annotations

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)


class FilesystemStorage:
    """
    Slot storage kept as one file per slot in a data directory.

    Writes go to a temporary sibling first and are renamed into place so a
    crash mid-write never leaves a truncated snapshot behind.
    """

    SUFFIX = ".json"

    def __init__(self, data_dir: Path) -> None:
        """
        Initialize storage.

        Args:
            data_dir: Directory holding the slot files (created on first write)
        """
        self.data_dir = data_dir

    def ensure_directory(self) -> None:
        """Create the data directory if it doesn't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, slot: str) -> Path:
        """Filesystem path of a slot."""
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", slot)
        return self.data_dir / f"{safe}{self.SUFFIX}"

    def get(self, slot: str) -> bytes | None:
        """Read a slot file."""
        path = self.path_for(slot)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, slot: str, value: bytes) -> None:
        """Write a slot file atomically."""
        self.ensure_directory()
        path = self.path_for(slot)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_bytes(value)
        tmp_path.replace(path)
        logger.debug("Wrote slot %s (%d bytes)", slot, len(value))

    def clear(self, slot: str) -> None:
        """Delete a slot file."""
        self.path_for(slot).unlink(missing_ok=True)


class MemoryStorage:
    """Slot storage held in a dict; nothing survives the process."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self.slots: dict[str, bytes] = dict(initial or {})

    def get(self, slot: str) -> bytes | None:
        return self.slots.get(slot)

    def set(self, slot: str, value: bytes) -> None:
        self.slots[slot] = value

    def clear(self, slot: str) -> None:
        self.slots.pop(slot, None)

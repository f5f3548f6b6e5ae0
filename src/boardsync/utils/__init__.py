"""Utility helpers."""

from .datetime import backup_stamp, day_key, now_utc, to_iso
from .ids import new_id

__all__ = [
    "backup_stamp",
    "day_key",
    "new_id",
    "now_utc",
    "to_iso",
]

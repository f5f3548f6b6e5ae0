"""Repository layer for local snapshot storage."""

from .filesystem import FilesystemStorage, MemoryStorage
from .protocol import StorageProtocol

__all__ = [
    "FilesystemStorage",
    "MemoryStorage",
    "StorageProtocol",
]

"""Storage protocol for persisted snapshot slots."""

from typing import Protocol


class StorageProtocol(Protocol):
    """Interface for durable local storage.

    Storage is a flat namespace of named slots, each holding an opaque
    byte string. The persistence layer keeps the serialized board in one
    slot and the serialized undo history in another.
    """

    def get(self, slot: str) -> bytes | None:
        """Read a slot.

        Args:
            slot: Slot name (e.g., "kanban_board_state_v1")

        Returns:
            The stored bytes, or None if the slot is empty.
        """
        ...

    def set(self, slot: str, value: bytes) -> None:
        """Write a slot, replacing any previous value.

        Args:
            slot: Slot name.
            value: Bytes to store.
        """
        ...

    def clear(self, slot: str) -> None:
        """Remove a slot.

        Note:
            Does not raise an error if the slot doesn't exist.
        """
        ...

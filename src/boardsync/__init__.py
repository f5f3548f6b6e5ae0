"""boardsync - kanban board with undo history, local snapshots and remote sync."""

__version__ = "0.1.0"

"""Local identifier generation."""

import uuid


def new_id() -> str:
    """Generate a short opaque id for entities created before the remote assigns one."""
    return uuid.uuid4().hex[:12]

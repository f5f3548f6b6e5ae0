"""In-process notification channel."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

BOARD_IMPORTED = "board_imported"
BOARD_CHANGED = "board_changed"
MOVE_COMPLETED = "move_completed"
NOTICE_RAISED = "notice_raised"


class EventBus:
    """Routes named events to subscribed callbacks.

    Lets components react to each other (an import triggered from the
    header, a finished move) without holding direct references.
    """

    def __init__(self) -> None:
        self.subscribers: dict[str, list[Callable[..., Any]]] = {}

    def subscribe(self, event_type: str, callback: Callable[..., Any]) -> Callable[[], None]:
        """Register a callback for an event type.

        Returns:
            A function that removes the subscription again.
        """
        self.subscribers.setdefault(event_type, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self.subscribers.get(event_type, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def publish(self, event_type: str, **payload: Any) -> None:
        """Emit an event to all subscribers.

        A failing subscriber is logged and does not stop the others.
        """
        for callback in list(self.subscribers.get(event_type, [])):
            try:
                callback(**payload)
            except Exception:
                logger.exception("Error in %s subscriber %r", event_type, callback)

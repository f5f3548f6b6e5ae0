"""Tests for the in-process event bus."""

from boardsync.services import BOARD_CHANGED, EventBus


class TestEventBus:
    """Tests for EventBus."""

    def test_publish_reaches_subscribers(self):
        bus = EventBus()
        received = []
        bus.subscribe(BOARD_CHANGED, lambda **payload: received.append(payload))
        bus.publish(BOARD_CHANGED, board="b")
        assert received == [{"board": "b"}]

    def test_unsubscribe(self):
        bus = EventBus()
        received = []
        unsubscribe = bus.subscribe(BOARD_CHANGED, lambda board: received.append(board))
        unsubscribe()
        unsubscribe()
        bus.publish(BOARD_CHANGED, board="b")
        assert received == []

    def test_failing_subscriber_does_not_stop_others(self, caplog):
        bus = EventBus()
        received = []

        def broken(board):
            raise RuntimeError("subscriber bug")

        bus.subscribe(BOARD_CHANGED, broken)
        bus.subscribe(BOARD_CHANGED, lambda board: received.append(board))
        bus.publish(BOARD_CHANGED, board="b")

        assert received == ["b"]
        assert "subscriber bug" in caplog.text

    def test_unknown_event_is_ignored(self):
        EventBus().publish("nothing_listens", value=1)

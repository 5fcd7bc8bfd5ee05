"""Tests for WebSocket event fan-out."""
import asyncio
import json

from api.websocket import EventType, WebSocketEvent, WebSocketManager


class FakeSocket:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def accept(self):
        pass

    async def send_text(self, text):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(text))


def test_broadcast_respects_subscriptions():
    async def run():
        manager = WebSocketManager()
        everything = FakeSocket()
        scenes_only = FakeSocket()
        await manager.connect(everything)
        await manager.connect(scenes_only, subscribe_to=[EventType.SCENE_CHANGED])

        sent = await manager.broadcast(WebSocketEvent(EventType.LESSON_COMPLETED, {"score": 2}))
        return sent, everything, scenes_only

    sent, everything, scenes_only = asyncio.run(run())
    assert sent == 1
    assert [m["type"] for m in everything.sent] == ["connected", "lesson_completed"]
    assert [m["type"] for m in scenes_only.sent] == ["connected"]


def test_failed_socket_dropped():
    async def run():
        manager = WebSocketManager()
        socket = FakeSocket()
        await manager.connect(socket)
        socket.fail = True
        await manager.broadcast(WebSocketEvent(EventType.SESSION_CLOSED, {}))
        return manager

    manager = asyncio.run(run())
    assert manager.connection_count == 0


def test_publish_schedules_broadcast():
    async def run():
        manager = WebSocketManager()
        socket = FakeSocket()
        await manager.connect(socket)
        manager.publish("scene_changed", {"session_id": "abc", "index": 1})
        manager.publish("not_an_event", {})
        await asyncio.sleep(0.01)
        return socket

    socket = asyncio.run(run())
    assert socket.sent[-1]["type"] == "scene_changed"
    assert socket.sent[-1]["data"] == {"session_id": "abc", "index": 1}
    assert len(socket.sent) == 2


def test_publish_without_loop_is_dropped():
    manager = WebSocketManager()
    manager.publish("scene_changed", {"index": 0})
    assert manager.connection_count == 0


def test_session_filter():
    async def run():
        manager = WebSocketManager()
        socket = FakeSocket()
        await manager.connect(socket, sessions=["a"])

        await manager.broadcast(WebSocketEvent(EventType.SCENE_CHANGED, {"session_id": "b", "index": 1}))
        await manager.broadcast(WebSocketEvent(EventType.SCENE_CHANGED, {"session_id": "a", "index": 2}))
        await manager.broadcast(WebSocketEvent(EventType.LESSON_COMPLETED, {"lesson_id": "x", "score": 1}))
        return socket

    socket = asyncio.run(run())
    delivered = [(m["type"], m["data"]) for m in socket.sent[1:]]
    assert delivered == [
        ("scene_changed", {"session_id": "a", "index": 2}),
        ("lesson_completed", {"lesson_id": "x", "score": 1}),
    ]


class TestSubscriptionMessages:

    def run_messages(self, *messages):
        async def run():
            manager = WebSocketManager()
            socket = FakeSocket()
            await manager.connect(socket)
            for message in messages:
                await manager._handle_message(socket, message)
            return manager.get_subscription(socket), socket.sent

        return asyncio.run(run())

    def test_unsubscribe_events(self):
        subscription, sent = self.run_messages(
            {"type": "unsubscribe", "events": ["progress_update", "answer_submitted"]},
        )
        assert EventType.PROGRESS_UPDATE not in subscription.events
        assert EventType.SCENE_CHANGED in subscription.events
        assert sent[-1]["type"] == "subscribed"
        assert "progress_update" not in sent[-1]["data"]["events"]

    def test_subscribe_to_sessions(self):
        subscription, sent = self.run_messages(
            {"type": "subscribe", "sessions": ["a"]},
            {"type": "subscribe", "sessions": ["b"]},
            {"type": "unsubscribe", "sessions": ["a"]},
        )
        assert subscription.sessions == {"b"}
        assert sent[-1]["data"]["sessions"] == ["b"]

    def test_unknown_event_names_ignored(self):
        subscription, sent = self.run_messages(
            {"type": "unsubscribe", "events": ["scene_changed", "bogus"]},
            {"type": "subscribe", "events": ["scene_changed", "connected"]},
        )
        assert EventType.SCENE_CHANGED in subscription.events
        assert EventType.CONNECTED not in subscription.events
        assert [m["type"] for m in sent] == ["connected", "subscribed", "subscribed"]

    def test_bad_messages_answered_with_error(self):
        subscription, sent = self.run_messages(
            ["not", "an", "object"],
            {"type": "dance"},
            {"type": "subscribe", "sessions": "a"},
        )
        assert [m["type"] for m in sent[1:]] == ["error", "error", "error"]
        assert subscription.sessions is None

"""WebSocket fan-out of lesson session events.

Clients receive every session event after connecting. They can narrow the
stream by event type or to specific sessions:

    {"type": "subscribe", "events": ["scene_changed"], "sessions": ["<id>"]}
    {"type": "unsubscribe", "events": ["progress_update"]}
    {"type": "ping"}

Subscription changes are acknowledged with a ``subscribed`` message that
echoes the client's current filter.
"""
import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Message types sent to clients."""
    # Connection messages, always delivered
    CONNECTED = "connected"
    SUBSCRIBED = "subscribed"
    PONG = "pong"
    ERROR = "error"

    # Session events, filtered per client
    SCENE_CHANGED = "scene_changed"
    PLAYBACK_COMPLETED = "playback_completed"
    ANSWER_SUBMITTED = "answer_submitted"
    LESSON_COMPLETED = "lesson_completed"
    SESSION_CLOSED = "session_closed"
    PROGRESS_UPDATE = "progress_update"


SESSION_EVENTS = frozenset({
    EventType.SCENE_CHANGED,
    EventType.PLAYBACK_COMPLETED,
    EventType.ANSWER_SUBMITTED,
    EventType.LESSON_COMPLETED,
    EventType.SESSION_CLOSED,
    EventType.PROGRESS_UPDATE,
})


@dataclass
class WebSocketEvent:
    """One message to a client."""
    event_type: EventType
    data: dict
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    @property
    def session_id(self) -> Optional[str]:
        return self.data.get("session_id")

    def to_json(self) -> str:
        return json.dumps({
            "type": self.event_type.value,
            "data": self.data,
            "timestamp": self.timestamp,
        })


@dataclass
class Subscription:
    """Which session events a client wants.

    ``sessions`` of None means events from every session. Events without
    a session ID (lesson completions) pass any session filter.
    """
    events: set = field(default_factory=lambda: set(SESSION_EVENTS))
    sessions: Optional[set] = None

    def matches(self, event: WebSocketEvent) -> bool:
        if event.event_type not in self.events:
            return False
        if self.sessions is None or event.session_id is None:
            return True
        return event.session_id in self.sessions

    def to_dict(self) -> dict:
        return {
            "events": sorted(e.value for e in self.events),
            "sessions": None if self.sessions is None else sorted(self.sessions),
        }


class WebSocketManager:
    """Tracks connected clients and delivers session events to them."""

    def __init__(self):
        self._clients: dict[WebSocket, Subscription] = {}

    @property
    def connection_count(self) -> int:
        return len(self._clients)

    def get_subscription(self, websocket: WebSocket) -> Optional[Subscription]:
        return self._clients.get(websocket)

    async def connect(
        self,
        websocket: WebSocket,
        subscribe_to: Optional[Iterable[EventType]] = None,
        sessions: Optional[Iterable[str]] = None,
    ) -> None:
        """Accept a client.

        Args:
            websocket: WebSocket connection
            subscribe_to: Session event types to deliver (None = all)
            sessions: Session IDs to deliver events for (None = all)
        """
        await websocket.accept()
        subscription = Subscription()
        if subscribe_to:
            subscription.events = set(subscribe_to) & SESSION_EVENTS
        if sessions is not None:
            subscription.sessions = set(sessions)
        self._clients[websocket] = subscription
        logger.info(f"WebSocket connected, total: {self.connection_count}")

        await self.send(websocket, WebSocketEvent(
            EventType.CONNECTED,
            {"message": "Connected to Lesson Player"},
        ))

    async def disconnect(self, websocket: WebSocket) -> None:
        if self._clients.pop(websocket, None) is not None:
            logger.info(f"WebSocket disconnected, remaining: {self.connection_count}")

    async def send(self, websocket: WebSocket, event: WebSocketEvent) -> bool:
        """Send one message to one client.

        Returns:
            True if sent successfully
        """
        if websocket not in self._clients:
            return False
        try:
            await websocket.send_text(event.to_json())
            return True
        except Exception as e:
            logger.error(f"Failed to send to WebSocket: {e}")
            return False

    async def broadcast(self, event: WebSocketEvent) -> int:
        """Deliver an event to every client whose subscription matches.

        Clients that fail to receive are dropped.

        Returns:
            Number of clients sent to
        """
        sent_count = 0
        for websocket, subscription in list(self._clients.items()):
            if not subscription.matches(event):
                continue
            if await self.send(websocket, event):
                sent_count += 1
            else:
                await self.disconnect(websocket)
        return sent_count

    def subscribe(
        self,
        websocket: WebSocket,
        events: Iterable[EventType] = (),
        sessions: Optional[Iterable[str]] = None,
    ) -> None:
        """Add event types, and narrow or widen the session filter."""
        subscription = self._clients.get(websocket)
        if subscription is None:
            return
        subscription.events |= set(events) & SESSION_EVENTS
        if sessions is not None:
            subscription.sessions = (subscription.sessions or set()) | set(sessions)

    def unsubscribe(
        self,
        websocket: WebSocket,
        events: Iterable[EventType] = (),
        sessions: Optional[Iterable[str]] = None,
    ) -> None:
        """Drop event types, or sessions from the session filter."""
        subscription = self._clients.get(websocket)
        if subscription is None:
            return
        subscription.events -= set(events)
        if sessions is not None and subscription.sessions is not None:
            subscription.sessions -= set(sessions)

    def publish(self, event_type: str, payload: dict) -> None:
        """Session listener: queue a broadcast from synchronous code.

        Engine callbacks run on the event loop but are not coroutines, so
        the broadcast is scheduled as a task. Outside a running loop the
        event is dropped.
        """
        try:
            event = WebSocketEvent(EventType(event_type), payload)
        except ValueError:
            logger.warning(f"Unknown session event: {event_type}")
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running loop, dropping {event_type} event")
            return

        if self._clients:
            loop.create_task(self.broadcast(event))

    async def handle_connection(self, websocket: WebSocket) -> None:
        """Serve one client until it disconnects."""
        await self.connect(websocket)
        try:
            while True:
                text = await websocket.receive_text()
                try:
                    message = json.loads(text)
                except json.JSONDecodeError:
                    await self._send_error(websocket, "Invalid JSON")
                    continue
                await self._handle_message(websocket, message)
        except WebSocketDisconnect:
            pass
        except Exception as e:
            logger.error(f"WebSocket error: {e}")
        finally:
            await self.disconnect(websocket)

    async def _handle_message(self, websocket: WebSocket, message) -> None:
        if not isinstance(message, dict):
            await self._send_error(websocket, "Message must be an object")
            return

        msg_type = message.get("type")
        if msg_type == "ping":
            await self.send(websocket, WebSocketEvent(EventType.PONG, {"message": "pong"}))
            return

        if msg_type not in ("subscribe", "unsubscribe"):
            await self._send_error(websocket, f"Unknown message type: {msg_type}")
            return

        events = _parse_event_types(message.get("events") or [])
        sessions = message.get("sessions")
        if sessions is not None:
            if not isinstance(sessions, list):
                await self._send_error(websocket, "\"sessions\" must be a list")
                return
            sessions = [str(s) for s in sessions]

        if msg_type == "subscribe":
            self.subscribe(websocket, events, sessions)
        else:
            self.unsubscribe(websocket, events, sessions)

        await self.send(websocket, WebSocketEvent(
            EventType.SUBSCRIBED,
            self._clients[websocket].to_dict(),
        ))

    async def _send_error(self, websocket: WebSocket, message: str) -> None:
        await self.send(websocket, WebSocketEvent(EventType.ERROR, {"message": message}))


def _parse_event_types(names) -> list[EventType]:
    event_types = []
    for name in names:
        try:
            event_types.append(EventType(name))
        except ValueError:
            logger.debug(f"Ignoring unknown event type: {name}")
    return event_types


# Global WebSocket manager instance
ws_manager = WebSocketManager()

"""
Refresh signals for open dashboards, as Server-Sent Events.

After every committed create/update/delete the service publishes one
RefreshEvent. Connected views only learn *that* something changed (and
which id); they reload the data themselves.
"""
import asyncio
import itertools
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

logger = logging.getLogger(__name__)

router = APIRouter()

REFRESH_EVENT = "applications_changed"
KEEPALIVE_SECONDS = 30
# A subscriber that stops reading loses its oldest pending signals
SUBSCRIBER_QUEUE_SIZE = 100


@dataclass(frozen=True)
class RefreshEvent:
    sequence: int
    action: str  # created | updated | deleted
    application_id: str
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_sse(self) -> str:
        """Wire frame: id, event name and JSON data lines"""
        data = {
            "action": self.action,
            "application_id": self.application_id,
            "timestamp": self.timestamp,
        }
        return f"id: {self.sequence}\nevent: {REFRESH_EVENT}\ndata: {json.dumps(data)}\n\n"


class RefreshBroadcaster:
    """Fans refresh events out to one bounded queue per connected view"""

    def __init__(self, queue_size: int = SUBSCRIBER_QUEUE_SIZE):
        self._queue_size = queue_size
        self._sequence = itertools.count(1)
        self.subscribers: list[asyncio.Queue] = []

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        self.subscribers.append(queue)
        logger.info(f"View subscribed to refresh events ({len(self.subscribers)} connected)")
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self.subscribers:
            self.subscribers.remove(queue)
            logger.info(f"View unsubscribed ({len(self.subscribers)} connected)")

    def publish(self, action: str, application_id: str) -> RefreshEvent:
        event = RefreshEvent(sequence=next(self._sequence), action=action, application_id=application_id)
        logger.debug(f"Publishing {action} for {application_id} to {len(self.subscribers)} view(s)")

        for queue in self.subscribers:
            if queue.full():
                queue.get_nowait()
                logger.warning("Refresh queue full; dropped the oldest pending event")
            queue.put_nowait(event)
        return event


refresh_broadcaster = RefreshBroadcaster()


@router.get("/events")
async def stream_events():
    """
    Stream refresh signals.

    Each event is named applications_changed and carries the action and the
    application id. Comment lines are sent as keepalives while idle.
    """

    async def event_stream():
        queue = refresh_broadcaster.subscribe()
        try:
            yield ": connected\n\n"
            while True:
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                yield event.to_sse()
        except asyncio.CancelledError:
            logger.info("Refresh stream closed by client")
            raise
        finally:
            refresh_broadcaster.unsubscribe(queue)

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        }
    )


def broadcast_applications_changed(action: str, application_id: str) -> None:
    """Post-commit hook for ApplicationService"""
    refresh_broadcaster.publish(action, application_id)

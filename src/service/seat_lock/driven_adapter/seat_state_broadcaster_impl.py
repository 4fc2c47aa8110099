"""
Seat State Broadcaster Implementation

Fans seat state change events from the lock manager out to SSE endpoints.
"""

from typing import List

import anyio.from_thread
import anyio.lowlevel
from anyio import BrokenResourceError, ClosedResourceError, WouldBlock, create_memory_object_stream
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from src.platform.logging.loguru_io import Logger
from src.service.seat_lock.domain.lock_result import SeatStateEvent


class SeatStateBroadcasterImpl:
    """
    In-memory pub/sub for seat state events

    Architecture:
    - Lock manager mutation → on_state_changed → publish() → broadcast() → SSE Endpoint
    - Every subscriber gets its own bounded stream

    Memory Management:
    - Stream max buffer: max_buffer_size events
    - Drop policy: a full stream discards its OLDEST event, so the latest
      snapshot always reaches the subscriber
    """

    def __init__(self, *, max_buffer_size: int = 10):
        self._max_buffer_size = max_buffer_size
        self._subscribers: List[
            tuple[MemoryObjectSendStream[SeatStateEvent], MemoryObjectReceiveStream[SeatStateEvent]]
        ] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def subscribe(self) -> MemoryObjectReceiveStream[SeatStateEvent]:
        send_stream, receive_stream = create_memory_object_stream[SeatStateEvent](
            max_buffer_size=self._max_buffer_size
        )
        self._subscribers.append((send_stream, receive_stream))

        Logger.base.debug(
            f'📡 [BROADCASTER] New subscriber (total subscribers: {len(self._subscribers)})'
        )
        return receive_stream

    def publish(self, event: SeatStateEvent) -> None:
        """
        Listener entry point for the lock manager

        Use cases run the manager in anyio worker threads; memory streams are
        not thread-safe, so the event is handed back to the event loop there.
        """
        try:
            anyio.lowlevel.current_token()
        except RuntimeError:
            anyio.from_thread.run_sync(self.broadcast, event)
            return
        self.broadcast(event)

    def broadcast(self, event: SeatStateEvent) -> None:
        if not self._subscribers:
            return

        delivered = 0
        evicted = 0
        dropped = 0
        for send_stream, receive_stream in list(self._subscribers):
            try:
                try:
                    send_stream.send_nowait(event)
                except WouldBlock:
                    # Slow consumer: the newer snapshot supersedes the oldest buffered one
                    receive_stream.receive_nowait()
                    send_stream.send_nowait(event)
                    evicted += 1
                    Logger.base.warning(
                        f'⚠️ [BROADCASTER] Stream full, evicted oldest (type={event.event_type})'
                    )
                delivered += 1
            except (WouldBlock, BrokenResourceError, ClosedResourceError):
                dropped += 1

        Logger.base.debug(
            f'📡 [BROADCASTER] Broadcast {event.event_type}: '
            f'delivered={delivered}, evicted={evicted}, dropped={dropped}'
        )

    async def unsubscribe(self, *, stream: MemoryObjectReceiveStream[SeatStateEvent]) -> None:
        for i, (send_stream, receive_stream) in enumerate(self._subscribers):
            if receive_stream is stream:
                await send_stream.aclose()
                await receive_stream.aclose()
                self._subscribers.pop(i)
                Logger.base.debug(
                    f'📡 [BROADCASTER] Unsubscribed (remaining: {len(self._subscribers)})'
                )
                break

"""
Seat State Broadcaster Interface

Fans seat registry snapshots out to in-process subscribers (SSE endpoints).
"""

from typing import Protocol

from anyio.streams.memory import MemoryObjectReceiveStream

from src.service.seat_lock.domain.lock_result import SeatStateEvent


class ISeatStateBroadcaster(Protocol):
    async def subscribe(self) -> MemoryObjectReceiveStream[SeatStateEvent]:
        """
        Returns:
            MemoryObjectReceiveStream receiving every state change event
        """
        ...

    def publish(self, event: SeatStateEvent) -> None:
        """Broadcast from the event loop thread or from an anyio worker thread"""
        ...

    def broadcast(self, event: SeatStateEvent) -> None:
        """
        Deliver an event to every subscriber without blocking

        Note:
            - A subscriber whose buffer is full loses its oldest buffered event
        """
        ...

    async def unsubscribe(self, *, stream: MemoryObjectReceiveStream[SeatStateEvent]) -> None:
        """Safe to call with an unknown stream"""
        ...

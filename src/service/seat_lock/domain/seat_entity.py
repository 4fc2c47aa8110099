"""
Seat Entity

座位實體 - 單一座位的租約狀態
"""

from enum import StrEnum
from typing import Any, Optional

import attrs


class SeatStatus(StrEnum):
    AVAILABLE = 'available'
    LOCKED = 'locked'
    BOOKED = 'booked'


@attrs.define
class Seat:
    """
    Seat (Entity)

    locked_by / lock_expires_at are set iff status is LOCKED.
    booked_by records who confirmed the seat once it is BOOKED.
    """

    id: str
    status: SeatStatus = SeatStatus.AVAILABLE
    locked_by: Optional[str] = None
    lock_expires_at: Optional[int] = None  # epoch ms
    booked_by: Optional[str] = None

    @property
    def is_available(self) -> bool:
        return self.status == SeatStatus.AVAILABLE

    def is_locked_by(self, holder_id: str) -> bool:
        return self.status == SeatStatus.LOCKED and self.locked_by == holder_id

    def is_lock_expired(self, now_ms: int) -> bool:
        return (
            self.status == SeatStatus.LOCKED
            and self.lock_expires_at is not None
            and self.lock_expires_at <= now_ms
        )

    def lock_remaining_ms(self, now_ms: int) -> Optional[int]:
        if self.status != SeatStatus.LOCKED or self.lock_expires_at is None:
            return None
        return max(0, self.lock_expires_at - now_ms)

    def lock(self, *, holder_id: str, expires_at: int) -> None:
        self.status = SeatStatus.LOCKED
        self.locked_by = holder_id
        self.lock_expires_at = expires_at

    def book(self) -> None:
        self.status = SeatStatus.BOOKED
        self.booked_by = self.locked_by
        self.locked_by = None
        self.lock_expires_at = None

    def free(self) -> None:
        self.status = SeatStatus.AVAILABLE
        self.locked_by = None
        self.lock_expires_at = None

    def to_record(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'status': self.status.value,
            'lockedBy': self.locked_by,
            'lockExpiresAt': self.lock_expires_at,
            'bookedBy': self.booked_by,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> 'Seat':
        return cls(
            id=record['id'],
            status=SeatStatus(record['status']),
            locked_by=record.get('lockedBy'),
            lock_expires_at=record.get('lockExpiresAt'),
            booked_by=record.get('bookedBy'),
        )

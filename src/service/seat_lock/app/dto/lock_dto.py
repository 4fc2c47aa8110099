"""Seat lock request DTOs"""

from typing import Optional

import attrs


@attrs.define
class AcquireSeatLockRequest:
    holder_id: str
    seat_id: str
    ttl_ms: Optional[int] = None  # Falls back to SEAT_LOCK_TTL_MS


@attrs.define
class SeatLockRequest:
    """Confirm / release request"""

    holder_id: str
    seat_id: str


@attrs.define
class SeatGridRequest:
    rows: int
    cols: int

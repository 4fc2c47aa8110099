"""
Seat Registry

座位登記表 - 固定座位網格與最後變更時間
"""

import copy
from string import ascii_uppercase
from typing import Any

import attrs

from src.platform.exception.exceptions import DomainError
from src.service.seat_lock.domain.seat_entity import Seat, SeatStatus


MAX_ROWS = len(ascii_uppercase)


def build_seat_id(row: int, col: int) -> str:
    """Zero-based (row, col) -> seat id, e.g. (0, 0) -> 'A1'"""
    return f'{ascii_uppercase[row]}{col + 1}'


@attrs.define
class SeatRegistry:
    """
    Seat Registry (Aggregate)

    The seat id set is fixed at creation. updated_at never decreases.
    """

    seats: dict[str, Seat]
    updated_at: int  # epoch ms
    rows: int
    cols: int

    @classmethod
    def create(cls, *, rows: int, cols: int, now_ms: int) -> 'SeatRegistry':
        if not 1 <= rows <= MAX_ROWS:
            raise DomainError(f'Invalid rows: {rows}. Expected 1..{MAX_ROWS}')
        if cols < 1:
            raise DomainError(f'Invalid cols: {cols}. Expected at least 1')

        seats = {}
        for row in range(rows):
            for col in range(cols):
                seat_id = build_seat_id(row, col)
                seats[seat_id] = Seat(id=seat_id)
        return cls(seats=seats, updated_at=now_ms, rows=rows, cols=cols)

    def sweep_expired(self, now_ms: int) -> list[str]:
        """Free every lock whose expiry is at or before now, returning the freed seat ids"""
        swept = []
        for seat in self.seats.values():
            if seat.is_lock_expired(now_ms):
                seat.free()
                swept.append(seat.id)
        return swept

    def touch(self, now_ms: int) -> None:
        self.updated_at = max(self.updated_at, now_ms)

    def status_counts(self) -> dict[str, int]:
        counts = {status.value: 0 for status in SeatStatus}
        for seat in self.seats.values():
            counts[seat.status.value] += 1
        return counts

    def snapshot(self) -> 'SeatRegistry':
        return copy.deepcopy(self)

    def to_document(self) -> dict[str, Any]:
        return {
            'seats': {seat_id: seat.to_record() for seat_id, seat in self.seats.items()},
            'updatedAt': self.updated_at,
            'rows': self.rows,
            'cols': self.cols,
        }

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> 'SeatRegistry':
        seats = document['seats']
        if not isinstance(seats, dict):
            raise TypeError(
                f'seats must be an object keyed by seat id, got {type(seats).__name__}'
            )
        return cls(
            seats={seat_id: Seat.from_record(record) for seat_id, record in seats.items()},
            updated_at=int(document['updatedAt']),
            rows=int(document['rows']),
            cols=int(document['cols']),
        )

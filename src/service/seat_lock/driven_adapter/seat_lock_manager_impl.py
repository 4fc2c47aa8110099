"""
Seat Lock Manager Implementation

座位鎖管理器 - 單一臨界區保護整份座位登記表
"""

import threading
import time
from typing import Callable, Optional

import attrs

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.seat_lock_metrics import metrics
from src.service.seat_lock.app.interface.i_seat_lock_manager import (
    ISeatLockManager,
    StateChangedCallback,
)
from src.service.seat_lock.app.interface.i_seat_state_store import ISeatStateStore
from src.service.seat_lock.domain.lock_result import (
    LockErrorKind,
    LockResult,
    SeatStateEvent,
    SeatStateEventType,
)
from src.service.seat_lock.domain.seat_entity import Seat
from src.service.seat_lock.domain.seat_registry import SeatRegistry


Clock = Callable[[], int]
SeatOperation = Callable[[Seat, int], LockResult]


def current_time_ms() -> int:
    return time.time_ns() // 1_000_000


class SeatLockManagerImpl(ISeatLockManager):
    """
    Lease-based seat lock manager

    Concurrency:
    - One threading.Lock guards load -> sweep -> mutate -> save, so every
      operation is a single atomic step and acquire is a compare-and-set
    - Listeners run after the lock is released, with a snapshot of the
      registry taken inside it
    - The publish lock is taken before the registry lock is released, so
      listeners see events in commit order. Listeners should hand events off
      (as the broadcaster does) rather than call back into the manager
    """

    def __init__(self, *, state_store: ISeatStateStore, clock: Clock = current_time_ms):
        self._state_store = state_store
        self._clock = clock
        self._lock = threading.Lock()
        self._publish_lock = threading.RLock()
        self._listeners: list[StateChangedCallback] = []

    # ========== Lifecycle ==========

    def initialize(self, *, rows: int, cols: int) -> SeatRegistry:
        with self._lock:
            existing = self._state_store.load()
            if existing is not None:
                Logger.base.debug('🪑 [SEAT-LOCK] Registry already initialized, skipping')
                return existing.snapshot()
            registry = SeatRegistry.create(rows=rows, cols=cols, now_ms=self._clock())
            self._state_store.save(registry)
            snapshot = registry.snapshot()
            self._publish_lock.acquire()

        Logger.base.info(f'🪑 [SEAT-LOCK] Registry initialized with {rows}x{cols} seats')
        self._deliver(SeatStateEvent(event_type=SeatStateEventType.INIT, registry=snapshot))
        return snapshot

    def reset(self, *, rows: int, cols: int) -> SeatRegistry:
        with self._lock:
            registry = SeatRegistry.create(rows=rows, cols=cols, now_ms=self._clock())
            self._state_store.clear()
            self._state_store.save(registry)
            snapshot = registry.snapshot()
            self._publish_lock.acquire()

        Logger.base.warning(f'♻️ [SEAT-LOCK] Registry reset to {rows}x{cols} seats')
        self._deliver(SeatStateEvent(event_type=SeatStateEventType.INIT, registry=snapshot))
        return snapshot

    # ========== Sweep ==========

    def sweep_expired(self, registry: SeatRegistry, *, now_ms: Optional[int] = None) -> bool:
        """Free expired locks in place, returning whether any seat changed"""
        swept = registry.sweep_expired(self._clock() if now_ms is None else now_ms)
        if swept:
            Logger.base.info(f'⏰ [SEAT-LOCK] Expired locks reclaimed: {swept}')
            metrics.record_swept(count=len(swept))
        return bool(swept)

    # ========== Lock Operations ==========

    def acquire_lock(self, *, holder_id: str, seat_id: str, ttl_ms: int) -> LockResult:
        if ttl_ms <= 0:
            raise ValueError(f'ttl_ms must be positive, got {ttl_ms}')

        def acquire(seat: Seat, now_ms: int) -> LockResult:
            if not seat.is_available:
                return LockResult.failure(LockErrorKind.NOT_AVAILABLE, attrs.evolve(seat))
            seat.lock(holder_id=holder_id, expires_at=now_ms + ttl_ms)
            return LockResult.success(attrs.evolve(seat))

        return self._execute(operation='acquire', seat_id=seat_id, apply=acquire)

    def confirm_lock(self, *, holder_id: str, seat_id: str) -> LockResult:
        def confirm(seat: Seat, now_ms: int) -> LockResult:
            if not seat.is_locked_by(holder_id):
                return LockResult.failure(LockErrorKind.CANNOT_CONFIRM, attrs.evolve(seat))
            seat.book()
            return LockResult.success(attrs.evolve(seat))

        return self._execute(operation='confirm', seat_id=seat_id, apply=confirm)

    def release_lock(self, *, holder_id: str, seat_id: str) -> LockResult:
        def release(seat: Seat, now_ms: int) -> LockResult:
            if not seat.is_locked_by(holder_id):
                return LockResult.failure(LockErrorKind.CANNOT_RELEASE)
            seat.free()
            return LockResult.success()

        return self._execute(operation='release', seat_id=seat_id, apply=release)

    # ========== Query ==========

    def get_snapshot(self) -> Optional[SeatRegistry]:
        event = None
        with self._lock:
            registry = self._state_store.load()
            if registry is None:
                return None
            now_ms = self._clock()
            if self.sweep_expired(registry, now_ms=now_ms):
                registry.touch(now_ms)
                self._state_store.save(registry)
                event = SeatStateEvent(
                    event_type=SeatStateEventType.STATE, registry=registry.snapshot()
                )
                self._publish_lock.acquire()
            snapshot = registry.snapshot()

        metrics.update_seat_status_counts(counts=snapshot.status_counts())
        self._deliver(event)
        return snapshot

    # ========== Observers ==========

    def on_state_changed(self, callback: StateChangedCallback) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _deliver(self, event: Optional[SeatStateEvent]) -> None:
        """Run listeners for an event whose publish slot was taken under the registry lock"""
        if event is None:
            return
        try:
            self._publish(event)
        finally:
            self._publish_lock.release()

    def _publish(self, event: SeatStateEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                Logger.base.exception(
                    f'❌ [SEAT-LOCK] State change listener {listener!r} failed'
                )

    # ========== Internal ==========

    def _execute(self, *, operation: str, seat_id: str, apply: SeatOperation) -> LockResult:
        event = None
        with self._lock:
            registry = self._state_store.load()
            if registry is None:
                result = LockResult.failure(LockErrorKind.SERVER_NOT_INITIALIZED)
            else:
                now_ms = self._clock()
                changed = self.sweep_expired(registry, now_ms=now_ms)
                seat = registry.seats.get(seat_id)
                if seat is None:
                    result = LockResult.failure(LockErrorKind.SEAT_NOT_FOUND)
                else:
                    result = apply(seat, now_ms)

                if changed or result.ok:
                    registry.touch(now_ms)
                    self._state_store.save(registry)
                    event = SeatStateEvent(
                        event_type=SeatStateEventType.STATE, registry=registry.snapshot()
                    )
                    self._publish_lock.acquire()

        metrics.record_lock_operation(
            operation=operation, result='ok' if result.ok else str(result.error_kind)
        )
        self._deliver(event)
        return result

"""
Unit tests for SeatLockManagerImpl

Covers the lease state machine, lazy expiry, snapshot isolation,
state change listeners and mutual exclusion under concurrent acquires.
"""

from concurrent.futures import ThreadPoolExecutor
import threading
import time
from typing import Any
from unittest.mock import MagicMock

import pytest

from src.service.seat_lock.domain import (
    LockErrorKind,
    SeatStateEvent,
    SeatStateEventType,
    SeatStatus,
)
from src.service.seat_lock.driven_adapter.in_memory_seat_state_store import (
    InMemorySeatStateStore,
)
from src.service.seat_lock.driven_adapter.seat_lock_manager_impl import SeatLockManagerImpl


class TestInitialize:
    @pytest.mark.unit
    def test_creates_available_grid(self, manager: SeatLockManagerImpl) -> None:
        registry = manager.initialize(rows=1, cols=1)

        assert list(registry.seats) == ['A1']
        assert registry.seats['A1'].status == SeatStatus.AVAILABLE

    @pytest.mark.unit
    def test_second_initialize_keeps_live_state(self, manager: SeatLockManagerImpl) -> None:
        manager.initialize(rows=1, cols=1)
        manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000)

        registry = manager.initialize(rows=4, cols=4)

        assert registry.rows == 1
        assert registry.seats['A1'].status == SeatStatus.LOCKED

    @pytest.mark.unit
    def test_reset_discards_locks_and_bookings(self, grid_manager: SeatLockManagerImpl) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000)
        grid_manager.confirm_lock(holder_id='h1', seat_id='A1')

        registry = grid_manager.reset(rows=1, cols=2)

        assert list(registry.seats) == ['A1', 'A2']
        assert registry.seats['A1'].status == SeatStatus.AVAILABLE

    @pytest.mark.unit
    def test_operations_before_initialize_report_server_not_init(
        self, manager: SeatLockManagerImpl
    ) -> None:
        assert manager.get_snapshot() is None
        for result in (
            manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000),
            manager.confirm_lock(holder_id='h1', seat_id='A1'),
            manager.release_lock(holder_id='h1', seat_id='A1'),
        ):
            assert not result.ok
            assert result.error_kind == LockErrorKind.SERVER_NOT_INITIALIZED


class TestAcquireLock:
    @pytest.mark.unit
    def test_acquire_sets_holder_and_expiry(
        self, grid_manager: SeatLockManagerImpl, clock: Any
    ) -> None:
        result = grid_manager.acquire_lock(holder_id='h1', seat_id='B2', ttl_ms=1000)

        assert result.ok
        assert result.error_kind is None
        assert result.seat is not None
        assert result.seat.status == SeatStatus.LOCKED
        assert result.seat.locked_by == 'h1'
        assert result.seat.lock_expires_at == clock.now_ms + 1000

    @pytest.mark.unit
    def test_acquire_on_locked_seat_returns_current_holder(
        self, grid_manager: SeatLockManagerImpl
    ) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000)

        result = grid_manager.acquire_lock(holder_id='h2', seat_id='A1', ttl_ms=1000)

        assert not result.ok
        assert result.error_kind == LockErrorKind.NOT_AVAILABLE
        assert result.seat is not None
        assert result.seat.locked_by == 'h1'

    @pytest.mark.unit
    def test_same_holder_cannot_relock_held_seat(self, grid_manager: SeatLockManagerImpl) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000)

        result = grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000)

        assert result.error_kind == LockErrorKind.NOT_AVAILABLE

    @pytest.mark.unit
    def test_unknown_seat(self, grid_manager: SeatLockManagerImpl) -> None:
        result = grid_manager.acquire_lock(holder_id='h1', seat_id='Z99', ttl_ms=1000)

        assert not result.ok
        assert result.error_kind == LockErrorKind.SEAT_NOT_FOUND
        assert result.seat is None

    @pytest.mark.unit
    @pytest.mark.parametrize('ttl_ms', [0, -5])
    def test_non_positive_ttl_is_rejected(
        self, grid_manager: SeatLockManagerImpl, ttl_ms: int
    ) -> None:
        with pytest.raises(ValueError):
            grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=ttl_ms)

    @pytest.mark.unit
    def test_returned_seat_is_detached_from_registry(
        self, grid_manager: SeatLockManagerImpl
    ) -> None:
        result = grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000)
        assert result.seat is not None
        result.seat.free()

        snapshot = grid_manager.get_snapshot()
        assert snapshot is not None
        assert snapshot.seats['A1'].status == SeatStatus.LOCKED


class TestExpiry:
    @pytest.mark.unit
    def test_lock_is_kept_until_ttl_elapses(
        self, grid_manager: SeatLockManagerImpl, clock: Any
    ) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=100)
        clock.advance(99)

        result = grid_manager.acquire_lock(holder_id='h2', seat_id='A1', ttl_ms=100)

        assert result.error_kind == LockErrorKind.NOT_AVAILABLE

    @pytest.mark.unit
    def test_expired_lock_is_swept_on_next_acquire(
        self, grid_manager: SeatLockManagerImpl, clock: Any
    ) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=100)
        clock.advance(150)

        result = grid_manager.acquire_lock(holder_id='h2', seat_id='A1', ttl_ms=100)

        assert result.ok
        assert result.seat is not None
        assert result.seat.locked_by == 'h2'

    @pytest.mark.unit
    def test_snapshot_never_shows_expired_lock(
        self, grid_manager: SeatLockManagerImpl, clock: Any
    ) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=100)
        clock.advance(100)

        snapshot = grid_manager.get_snapshot()

        assert snapshot is not None
        assert snapshot.seats['A1'].status == SeatStatus.AVAILABLE
        assert snapshot.seats['A1'].locked_by is None

    @pytest.mark.unit
    def test_snapshot_persists_the_sweep(
        self,
        grid_manager: SeatLockManagerImpl,
        state_store: InMemorySeatStateStore,
        clock: Any,
    ) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=100)
        clock.advance(500)

        grid_manager.get_snapshot()

        stored = state_store.load()
        assert stored is not None
        assert stored.seats['A1'].status == SeatStatus.AVAILABLE
        assert stored.updated_at == clock.now_ms

    @pytest.mark.unit
    def test_sweep_expired_reports_changes(
        self,
        grid_manager: SeatLockManagerImpl,
        state_store: InMemorySeatStateStore,
        clock: Any,
    ) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=100)
        registry = state_store.load()
        assert registry is not None

        assert grid_manager.sweep_expired(registry) is False
        clock.advance(100)
        assert grid_manager.sweep_expired(registry) is True
        assert grid_manager.sweep_expired(registry) is False

    @pytest.mark.unit
    def test_expiry_with_wall_clock(self, state_store: InMemorySeatStateStore) -> None:
        manager = SeatLockManagerImpl(state_store=state_store)
        manager.initialize(rows=1, cols=1)
        assert manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=100).ok

        time.sleep(0.15)

        assert manager.acquire_lock(holder_id='h2', seat_id='A1', ttl_ms=100).ok


class TestConfirmLock:
    @pytest.mark.unit
    def test_holder_confirms_own_lock(self, grid_manager: SeatLockManagerImpl) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000)

        result = grid_manager.confirm_lock(holder_id='h1', seat_id='A1')

        assert result.ok
        assert result.seat is not None
        assert result.seat.status == SeatStatus.BOOKED
        assert result.seat.lock_expires_at is None
        assert result.seat.locked_by is None
        assert result.seat.booked_by == 'h1'

    @pytest.mark.unit
    def test_wrong_holder_cannot_confirm(self, grid_manager: SeatLockManagerImpl) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=5000)

        result = grid_manager.confirm_lock(holder_id='h2', seat_id='A1')

        assert result.error_kind == LockErrorKind.CANNOT_CONFIRM
        assert result.seat is not None
        assert result.seat.status == SeatStatus.LOCKED

    @pytest.mark.unit
    def test_cannot_confirm_available_seat(self, grid_manager: SeatLockManagerImpl) -> None:
        result = grid_manager.confirm_lock(holder_id='h1', seat_id='A1')
        assert result.error_kind == LockErrorKind.CANNOT_CONFIRM

    @pytest.mark.unit
    def test_cannot_confirm_after_expiry(
        self, grid_manager: SeatLockManagerImpl, clock: Any
    ) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=100)
        clock.advance(101)

        result = grid_manager.confirm_lock(holder_id='h1', seat_id='A1')

        assert result.error_kind == LockErrorKind.CANNOT_CONFIRM
        assert result.seat is not None
        assert result.seat.status == SeatStatus.AVAILABLE

    @pytest.mark.unit
    def test_cannot_confirm_twice(self, grid_manager: SeatLockManagerImpl) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000)
        grid_manager.confirm_lock(holder_id='h1', seat_id='A1')

        result = grid_manager.confirm_lock(holder_id='h1', seat_id='A1')

        assert result.error_kind == LockErrorKind.CANNOT_CONFIRM

    @pytest.mark.unit
    def test_unknown_seat(self, grid_manager: SeatLockManagerImpl) -> None:
        result = grid_manager.confirm_lock(holder_id='h1', seat_id='C1')
        assert result.error_kind == LockErrorKind.SEAT_NOT_FOUND


class TestReleaseLock:
    @pytest.mark.unit
    def test_holder_releases_own_lock(self, grid_manager: SeatLockManagerImpl) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000)

        result = grid_manager.release_lock(holder_id='h1', seat_id='A1')

        assert result.ok
        assert result.seat is None
        assert grid_manager.acquire_lock(holder_id='h2', seat_id='A1', ttl_ms=1000).ok

    @pytest.mark.unit
    def test_wrong_holder_cannot_release(self, grid_manager: SeatLockManagerImpl) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000)

        result = grid_manager.release_lock(holder_id='h2', seat_id='A1')

        assert result.error_kind == LockErrorKind.CANNOT_RELEASE
        snapshot = grid_manager.get_snapshot()
        assert snapshot is not None
        assert snapshot.seats['A1'].locked_by == 'h1'

    @pytest.mark.unit
    def test_cannot_release_available_seat(self, grid_manager: SeatLockManagerImpl) -> None:
        result = grid_manager.release_lock(holder_id='h1', seat_id='A1')
        assert result.error_kind == LockErrorKind.CANNOT_RELEASE

    @pytest.mark.unit
    def test_cannot_release_after_expiry(
        self, grid_manager: SeatLockManagerImpl, clock: Any
    ) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=100)
        clock.advance(100)

        result = grid_manager.release_lock(holder_id='h1', seat_id='A1')

        assert result.error_kind == LockErrorKind.CANNOT_RELEASE

    @pytest.mark.unit
    def test_unknown_seat(self, grid_manager: SeatLockManagerImpl) -> None:
        result = grid_manager.release_lock(holder_id='h1', seat_id='nope')
        assert result.error_kind == LockErrorKind.SEAT_NOT_FOUND


class TestBookedIsTerminal:
    @pytest.mark.unit
    def test_single_seat_scenario(self, manager: SeatLockManagerImpl, clock: Any) -> None:
        manager.initialize(rows=1, cols=1)

        first = manager.acquire_lock(holder_id='H1', seat_id='A1', ttl_ms=1000)
        assert first.ok
        assert first.seat is not None
        assert first.seat.status == SeatStatus.LOCKED

        second = manager.acquire_lock(holder_id='H2', seat_id='A1', ttl_ms=1000)
        assert second.error_kind == LockErrorKind.NOT_AVAILABLE

        confirmed = manager.confirm_lock(holder_id='H1', seat_id='A1')
        assert confirmed.ok
        assert confirmed.seat is not None
        assert confirmed.seat.status == SeatStatus.BOOKED

        released = manager.release_lock(holder_id='H1', seat_id='A1')
        assert released.error_kind == LockErrorKind.CANNOT_RELEASE

    @pytest.mark.unit
    def test_no_operation_leaves_booked(
        self, grid_manager: SeatLockManagerImpl, clock: Any
    ) -> None:
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=100)
        grid_manager.confirm_lock(holder_id='h1', seat_id='A1')
        clock.advance(10_000)

        for holder in ('h1', 'h2'):
            assert not grid_manager.acquire_lock(holder_id=holder, seat_id='A1', ttl_ms=100).ok
            assert not grid_manager.confirm_lock(holder_id=holder, seat_id='A1').ok
            assert not grid_manager.release_lock(holder_id=holder, seat_id='A1').ok

        snapshot = grid_manager.get_snapshot()
        assert snapshot is not None
        assert snapshot.seats['A1'].status == SeatStatus.BOOKED


class TestSnapshot:
    @pytest.mark.unit
    def test_mutating_snapshot_does_not_touch_internal_state(
        self, grid_manager: SeatLockManagerImpl
    ) -> None:
        snapshot = grid_manager.get_snapshot()
        assert snapshot is not None
        snapshot.seats['A1'].lock(holder_id='intruder', expires_at=10**15)
        del snapshot.seats['A2']
        snapshot.rows = 99

        fresh = grid_manager.get_snapshot()
        assert fresh is not None
        assert fresh.seats['A1'].status == SeatStatus.AVAILABLE
        assert 'A2' in fresh.seats
        assert fresh.rows == 2

    @pytest.mark.unit
    def test_updated_at_advances_on_mutation(
        self, grid_manager: SeatLockManagerImpl, clock: Any
    ) -> None:
        before = grid_manager.get_snapshot()
        assert before is not None

        clock.advance(42)
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000)

        after = grid_manager.get_snapshot()
        assert after is not None
        assert after.updated_at == before.updated_at + 42


class TestStateChangedListeners:
    @pytest.mark.unit
    def test_listener_receives_init_and_state_events(self, manager: SeatLockManagerImpl) -> None:
        events: list[SeatStateEvent] = []
        manager.on_state_changed(events.append)

        manager.initialize(rows=1, cols=1)
        manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000)
        manager.confirm_lock(holder_id='h1', seat_id='A1')

        assert [event.event_type for event in events] == [
            SeatStateEventType.INIT,
            SeatStateEventType.STATE,
            SeatStateEventType.STATE,
        ]
        assert events[1].registry.seats['A1'].status == SeatStatus.LOCKED
        assert events[2].registry.seats['A1'].status == SeatStatus.BOOKED

    @pytest.mark.unit
    def test_failed_operations_do_not_notify(self, grid_manager: SeatLockManagerImpl) -> None:
        listener = MagicMock()
        grid_manager.on_state_changed(listener)

        grid_manager.confirm_lock(holder_id='h1', seat_id='A1')
        grid_manager.release_lock(holder_id='h1', seat_id='A1')
        grid_manager.acquire_lock(holder_id='h1', seat_id='missing', ttl_ms=1000)
        grid_manager.initialize(rows=2, cols=3)

        listener.assert_not_called()

    @pytest.mark.unit
    def test_failing_listener_does_not_break_mutation(
        self, grid_manager: SeatLockManagerImpl
    ) -> None:
        healthy = MagicMock()
        grid_manager.on_state_changed(MagicMock(side_effect=RuntimeError('boom')))
        grid_manager.on_state_changed(healthy)

        result = grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000)

        assert result.ok
        healthy.assert_called_once()

    @pytest.mark.unit
    def test_unsubscribe_stops_notifications(self, grid_manager: SeatLockManagerImpl) -> None:
        listener = MagicMock()
        unsubscribe = grid_manager.on_state_changed(listener)
        unsubscribe()
        unsubscribe()

        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000)

        listener.assert_not_called()

    @pytest.mark.unit
    def test_listener_may_read_snapshot(self, grid_manager: SeatLockManagerImpl) -> None:
        seen: list[SeatStatus] = []

        def on_change(event: SeatStateEvent) -> None:
            snapshot = grid_manager.get_snapshot()
            assert snapshot is not None
            seen.append(snapshot.seats['A1'].status)

        grid_manager.on_state_changed(on_change)
        grid_manager.acquire_lock(holder_id='h1', seat_id='A1', ttl_ms=1000)

        assert seen == [SeatStatus.LOCKED]

    @pytest.mark.unit
    def test_events_from_concurrent_threads_arrive_in_commit_order(
        self, grid_manager: SeatLockManagerImpl
    ) -> None:
        seen: list[SeatStatus] = []
        listener_entered = threading.Event()
        gate = threading.Event()

        def slow_listener(event: SeatStateEvent) -> None:
            status = event.registry.seats['A1'].status
            if status == SeatStatus.LOCKED:
                listener_entered.set()
                gate.wait(timeout=5)
            seen.append(status)

        grid_manager.on_state_changed(slow_listener)

        acquirer = threading.Thread(
            target=grid_manager.acquire_lock,
            kwargs={'holder_id': 'h1', 'seat_id': 'A1', 'ttl_ms': 10_000},
        )
        acquirer.start()
        assert listener_entered.wait(timeout=5)

        releaser = threading.Thread(
            target=grid_manager.release_lock, kwargs={'holder_id': 'h1', 'seat_id': 'A1'}
        )
        releaser.start()
        # Give the release time to commit and reach delivery
        time.sleep(0.1)
        gate.set()
        acquirer.join(timeout=5)
        releaser.join(timeout=5)

        snapshot = grid_manager.get_snapshot()
        assert snapshot is not None
        assert snapshot.seats['A1'].status == SeatStatus.AVAILABLE
        assert seen == [SeatStatus.LOCKED, SeatStatus.AVAILABLE]


class TestMutualExclusion:
    @pytest.mark.unit
    def test_concurrent_acquires_yield_exactly_one_winner(
        self, state_store: InMemorySeatStateStore
    ) -> None:
        manager = SeatLockManagerImpl(state_store=state_store)
        manager.initialize(rows=1, cols=1)
        contenders = 32
        barrier = threading.Barrier(contenders)

        def contend(index: int):
            barrier.wait()
            return manager.acquire_lock(holder_id=f'holder-{index}', seat_id='A1', ttl_ms=60_000)

        with ThreadPoolExecutor(max_workers=contenders) as executor:
            results = list(executor.map(contend, range(contenders)))

        winners = [result for result in results if result.ok]
        losers = [result for result in results if not result.ok]
        assert len(winners) == 1
        assert len(losers) == contenders - 1
        assert all(result.error_kind == LockErrorKind.NOT_AVAILABLE for result in losers)

        snapshot = manager.get_snapshot()
        assert snapshot is not None
        assert winners[0].seat is not None
        assert snapshot.seats['A1'].locked_by == winners[0].seat.locked_by

    @pytest.mark.unit
    def test_concurrent_confirm_and_release_never_both_succeed(
        self, state_store: InMemorySeatStateStore
    ) -> None:
        manager = SeatLockManagerImpl(state_store=state_store)
        manager.initialize(rows=1, cols=4)

        for round_ in range(20):
            seat_id = f'A{round_ % 4 + 1}'
            manager.reset(rows=1, cols=4)
            assert manager.acquire_lock(holder_id='h1', seat_id=seat_id, ttl_ms=60_000).ok
            barrier = threading.Barrier(2)

            def confirm():
                barrier.wait()
                return manager.confirm_lock(holder_id='h1', seat_id=seat_id)

            def release():
                barrier.wait()
                return manager.release_lock(holder_id='h1', seat_id=seat_id)

            with ThreadPoolExecutor(max_workers=2) as executor:
                confirmed = executor.submit(confirm)
                released = executor.submit(release)
                outcomes = [confirmed.result().ok, released.result().ok]

            assert outcomes.count(True) == 1

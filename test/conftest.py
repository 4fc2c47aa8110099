"""
Test Configuration and Fixtures

Environment setup MUST happen before any application import, because
settings and the loguru sinks are built at import time.
"""

import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ['SEAT_STATE_BACKEND'] = 'memory'
    os.environ['SEAT_ROWS'] = '5'
    os.environ['SEAT_COLS'] = '8'
    os.environ['SEAT_LOCK_TTL_MS'] = '30000'


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402

from src.service.seat_lock.driven_adapter.in_memory_seat_state_store import (  # noqa: E402
    InMemorySeatStateStore,
)
from src.service.seat_lock.driven_adapter.seat_lock_manager_impl import (  # noqa: E402
    SeatLockManagerImpl,
)


class FakeClock:
    """Manually advanced epoch-millisecond clock"""

    def __init__(self, now_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def state_store() -> InMemorySeatStateStore:
    return InMemorySeatStateStore()


@pytest.fixture
def manager(state_store: InMemorySeatStateStore, clock: FakeClock) -> SeatLockManagerImpl:
    return SeatLockManagerImpl(state_store=state_store, clock=clock)


@pytest.fixture
def grid_manager(manager: SeatLockManagerImpl) -> Generator[SeatLockManagerImpl, None, None]:
    """Manager with an initialized 2x3 grid (A1..A3, B1..B3)"""
    manager.initialize(rows=2, cols=3)
    yield manager

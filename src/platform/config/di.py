"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.service.seat_lock.app.command.acquire_seat_lock_use_case import AcquireSeatLockUseCase
from src.service.seat_lock.app.command.confirm_seat_lock_use_case import ConfirmSeatLockUseCase
from src.service.seat_lock.app.command.initialize_seat_registry_use_case import (
    InitializeSeatRegistryUseCase,
    ResetSeatRegistryUseCase,
)
from src.service.seat_lock.app.command.release_seat_lock_use_case import ReleaseSeatLockUseCase
from src.service.seat_lock.app.query.get_seat_snapshot_use_case import GetSeatSnapshotUseCase
from src.service.seat_lock.driven_adapter.in_memory_seat_state_store import (
    InMemorySeatStateStore,
)
from src.service.seat_lock.driven_adapter.json_file_seat_state_store import (
    JsonFileSeatStateStore,
)
from src.service.seat_lock.driven_adapter.seat_lock_manager_impl import SeatLockManagerImpl
from src.service.seat_lock.driven_adapter.seat_state_broadcaster_impl import (
    SeatStateBroadcasterImpl,
)


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Seat state storage (selected by SEAT_STATE_BACKEND)
    seat_state_store = providers.Selector(
        config_service.provided.SEAT_STATE_BACKEND,
        memory=providers.Singleton(InMemorySeatStateStore),
        file=providers.Singleton(
            JsonFileSeatStateStore, path=config_service.provided.SEAT_STATE_FILE
        ),
    )

    # Lock manager owns the registry, one per process
    seat_lock_manager = providers.Singleton(SeatLockManagerImpl, state_store=seat_state_store)

    # SSE fan-out (subscribed to seat_lock_manager in setup())
    seat_state_broadcaster = providers.Singleton(
        SeatStateBroadcasterImpl,
        max_buffer_size=config_service.provided.SSE_STREAM_BUFFER_SIZE,
    )

    # Use cases (stateless, can be Singleton)
    initialize_seat_registry_use_case = providers.Singleton(
        InitializeSeatRegistryUseCase, seat_lock_manager=seat_lock_manager
    )
    reset_seat_registry_use_case = providers.Singleton(
        ResetSeatRegistryUseCase, seat_lock_manager=seat_lock_manager
    )
    acquire_seat_lock_use_case = providers.Singleton(
        AcquireSeatLockUseCase,
        seat_lock_manager=seat_lock_manager,
        default_ttl_ms=config_service.provided.SEAT_LOCK_TTL_MS,
    )
    confirm_seat_lock_use_case = providers.Singleton(
        ConfirmSeatLockUseCase, seat_lock_manager=seat_lock_manager
    )
    release_seat_lock_use_case = providers.Singleton(
        ReleaseSeatLockUseCase, seat_lock_manager=seat_lock_manager
    )
    get_seat_snapshot_use_case = providers.Singleton(
        GetSeatSnapshotUseCase, seat_lock_manager=seat_lock_manager
    )


container = Container()

_unsubscribe_broadcaster = None


def setup() -> None:
    """Connect the broadcaster to the lock manager and create the configured grid"""
    global _unsubscribe_broadcaster
    config = container.config_service()
    manager = container.seat_lock_manager()
    if _unsubscribe_broadcaster is None:
        _unsubscribe_broadcaster = manager.on_state_changed(
            container.seat_state_broadcaster().publish
        )
    manager.initialize(rows=config.SEAT_ROWS, cols=config.SEAT_COLS)


def cleanup() -> None:
    global _unsubscribe_broadcaster
    if _unsubscribe_broadcaster is not None:
        _unsubscribe_broadcaster()
        _unsubscribe_broadcaster = None
    container.reset_singletons()

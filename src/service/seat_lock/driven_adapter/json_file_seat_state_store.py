"""
JSON File Seat State Store

座位狀態檔案儲存 - 整份文件以 orjson 讀寫

Document layout:
    {"seats": {"A1": {"id", "status", "lockedBy", "lockExpiresAt", "bookedBy"}, ...},
     "updatedAt": 1700000000000, "rows": 6, "cols": 8}
"""

import os
from pathlib import Path
from typing import Optional

import orjson

from src.platform.exception.exceptions import SeatStateCorruptedError
from src.platform.logging.loguru_io import Logger
from src.service.seat_lock.app.interface.i_seat_state_store import ISeatStateStore
from src.service.seat_lock.domain.seat_registry import SeatRegistry


class JsonFileSeatStateStore(ISeatStateStore):
    def __init__(self, *, path: Path | str) -> None:
        self._path = Path(path)

    def load(self) -> Optional[SeatRegistry]:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return None

        if not raw.strip():
            return None

        try:
            return SeatRegistry.from_document(orjson.loads(raw))
        except (orjson.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise SeatStateCorruptedError(
                f'Seat state file {self._path} is corrupted: {type(e).__name__}: {e}'
            ) from e

    def save(self, registry: SeatRegistry) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # Write then rename so readers never see a half-written document
        tmp_path = self._path.with_name(f'{self._path.name}.tmp')
        tmp_path.write_bytes(orjson.dumps(registry.to_document(), option=orjson.OPT_INDENT_2))
        os.replace(tmp_path, self._path)

    def clear(self) -> None:
        if self._path.exists():
            self._path.unlink()
            Logger.base.info(f'🗑️ [SEAT-STATE] Removed {self._path}')

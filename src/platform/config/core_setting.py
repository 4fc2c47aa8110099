from pathlib import Path
from typing import List, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.platform.constant.path import SEAT_STATE_DIR


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Seat Lock Service'
    VERSION: str = '0.1.0'
    DEBUG: bool = False  # Enables io logging and the rotating file sink

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',') if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    # Seat grid
    SEAT_ROWS: int = 6  # Rows are lettered A..Z, so at most 26
    SEAT_COLS: int = 8
    SEAT_LOCK_TTL_MS: int = 30_000

    # Seat state storage
    SEAT_STATE_BACKEND: Literal['memory', 'file'] = 'memory'
    SEAT_STATE_FILE: Path = SEAT_STATE_DIR / 'seat_state.json'

    # SSE
    SSE_STREAM_BUFFER_SIZE: int = 10  # Max buffered events per subscriber


settings = Settings()  # type: ignore

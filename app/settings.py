from __future__ import annotations

from typing import Literal

from pydantic import BaseModel
import os


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "y", "on")


class Settings(BaseModel):
    APP_NAME: str = "undercover-server"

    # Store
    STORE_BACKEND: Literal["redis", "memory"] = "redis"
    REDIS_URL: str = "redis://localhost:6379/0"
    ROOM_TTL_SEC: int = 7200
    LOCK_TIMEOUT_SEC: float = 10.0
    LOCK_WAIT_SEC: float = 5.0

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Dev
    LOG_LEVEL: str = "INFO"

    # WebSocket / CORS origin policy (comma-separated)
    WS_ALLOWED_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000,null"

    # Game
    CODE_MAX_ATTEMPTS: int = 20
    DEFAULT_MIN_PLAYERS: int = 4
    DEFAULT_MAX_PLAYERS: int = 12
    DEFAULT_UNDERCOVER_COUNT: int = 1
    DEFAULT_DESCRIPTION_SECONDS: int = 60
    DEFAULT_VOTING_SECONDS: int = 30
    AUTO_RESOLVE_ON_ALL_VOTED: bool = False
    SEED_WORDS_ON_STARTUP: bool = True


def get_settings() -> Settings:
    return Settings(
        APP_NAME=os.getenv("APP_NAME", "undercover-server"),
        STORE_BACKEND=os.getenv("STORE_BACKEND", "redis"),
        REDIS_URL=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        ROOM_TTL_SEC=int(os.getenv("ROOM_TTL_SEC", "7200")),
        LOCK_TIMEOUT_SEC=float(os.getenv("LOCK_TIMEOUT_SEC", "10")),
        LOCK_WAIT_SEC=float(os.getenv("LOCK_WAIT_SEC", "5")),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=int(os.getenv("PORT", "8000")),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),

        WS_ALLOWED_ORIGINS=os.getenv(
            "WS_ALLOWED_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,null",
        ),

        CODE_MAX_ATTEMPTS=int(os.getenv("CODE_MAX_ATTEMPTS", "20")),
        DEFAULT_MIN_PLAYERS=int(os.getenv("DEFAULT_MIN_PLAYERS", "4")),
        DEFAULT_MAX_PLAYERS=int(os.getenv("DEFAULT_MAX_PLAYERS", "12")),
        DEFAULT_UNDERCOVER_COUNT=int(os.getenv("DEFAULT_UNDERCOVER_COUNT", "1")),
        DEFAULT_DESCRIPTION_SECONDS=int(os.getenv("DEFAULT_DESCRIPTION_SECONDS", "60")),
        DEFAULT_VOTING_SECONDS=int(os.getenv("DEFAULT_VOTING_SECONDS", "30")),
        AUTO_RESOLVE_ON_ALL_VOTED=_flag("AUTO_RESOLVE_ON_ALL_VOTED", "false"),
        SEED_WORDS_ON_STARTUP=_flag("SEED_WORDS_ON_STARTUP", "true"),
    )

# app/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import Redis

from app.domain.rooms.service import RoomService
from app.domain.words import WordBank
from app.settings import Settings, get_settings
from app.store.memory_repo import MemoryRepo
from app.store.models import GameSettings
from app.store.redis_repo import RedisRepo
from app.transport.rooms import router as rooms_router
from app.transport.ws import router as ws_router
from app.transport.ws_manager import WSManager

logger = logging.getLogger(__name__)


def build_room_service(repo, settings: Settings) -> RoomService:
    words = WordBank(repo)
    defaults = GameSettings(
        min_players=settings.DEFAULT_MIN_PLAYERS,
        max_players=settings.DEFAULT_MAX_PLAYERS,
        undercover_count=settings.DEFAULT_UNDERCOVER_COUNT,
        description_seconds=settings.DEFAULT_DESCRIPTION_SECONDS,
        voting_seconds=settings.DEFAULT_VOTING_SECONDS,
    )
    return RoomService(repo, words, default_settings=defaults, code_max_attempts=settings.CODE_MAX_ATTEMPTS)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title=settings.APP_NAME)
    allowed_origins = [o.strip() for o in settings.WS_ALLOWED_ORIGINS.split(",") if o.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def _startup() -> None:
        app.state.settings = settings
        app.state.redis = None
        if settings.STORE_BACKEND == "redis":
            r = Redis.from_url(settings.REDIS_URL, decode_responses=False)
            await r.ping()
            app.state.redis = r
            repo = RedisRepo(
                r,
                room_ttl_sec=settings.ROOM_TTL_SEC,
                lock_timeout_sec=settings.LOCK_TIMEOUT_SEC,
                lock_wait_sec=settings.LOCK_WAIT_SEC,
            )
        else:
            repo = MemoryRepo()
        app.state.repo = repo
        app.state.rooms = build_room_service(repo, settings)
        app.state.words = app.state.rooms.words
        app.state.wsman = WSManager()

        if settings.SEED_WORDS_ON_STARTUP:
            await app.state.words.seed()
        logger.info("%s started with %s store", settings.APP_NAME, settings.STORE_BACKEND)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        r = app.state.redis
        if r is not None:
            await r.aclose()

    @app.get("/health")
    async def health():
        r = app.state.redis
        if r is None:
            return {"ok": True, "store": "memory"}
        pong = await r.ping()
        return {"ok": True, "store": "redis", "redis": str(pong)}

    app.include_router(ws_router)
    app.include_router(rooms_router)
    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


app = create_app()

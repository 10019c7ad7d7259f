from __future__ import annotations

import logging
from contextvars import ContextVar
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, Optional

from redis.asyncio import Redis
from redis.asyncio.lock import Lock
from redis.exceptions import LockError, WatchError

from app.domain.common.errors import InvalidState
from app.store.redis_keys import RK, code_key, word_pairs_key
from app.store.models import PlayerStore, RoomStore, RoundStore, WordPair

logger = logging.getLogger(__name__)

# lock held by the current task inside room_lock
_held_lock: ContextVar[Optional[Lock]] = ContextVar("held_room_lock", default=None)


class RedisRepo:
    def __init__(
        self,
        r: Redis,
        room_ttl_sec: int = 1800,
        lock_timeout_sec: float = 10.0,
        lock_wait_sec: float = 5.0,
    ):
        self.r = r
        self.room_ttl_sec = room_ttl_sec
        self.lock_timeout_sec = lock_timeout_sec
        self.lock_wait_sec = lock_wait_sec

    def _dec(self, x):
        """Decode redis bytes -> str; pass through str/None."""
        if x is None:
            return None
        if isinstance(x, bytes):
            return x.decode("utf-8")
        return x

    # ----------------------------
    # Helpers
    # ----------------------------
    @asynccontextmanager
    async def room_lock(self, room_id: str) -> AsyncIterator[None]:
        """
        Serialize read-modify-write sequences on one room aggregate.
        commit() inside the block only goes through while this lock is still ours.
        """
        lock = self.r.lock(
            RK(room_id).lock(),
            timeout=self.lock_timeout_sec,
            blocking_timeout=self.lock_wait_sec,
        )
        try:
            acquired = await lock.acquire()
        except LockError as e:
            raise InvalidState("Room is busy, retry", code="ROOM_BUSY") from e
        if not acquired:
            raise InvalidState("Room is busy, retry", code="ROOM_BUSY")
        held = _held_lock.set(lock)
        try:
            yield
        finally:
            _held_lock.reset(held)
            try:
                await lock.release()
            except LockError:
                logger.warning("[%s] room lock expired before release", room_id)

    async def refresh_room_ttl(self, room_id: str) -> None:
        """
        Extend the room keys, and the join code while the room still owns it.
        """
        rk = RK(room_id)
        room = await self.get_room(room_id)

        pipe = self.r.pipeline()
        for k in rk.all_room_keys():
            pipe.expire(k, self.room_ttl_sec)
        if room is not None and room.status != "finished":
            if await self.find_room_id_by_code(room.code) == room_id:
                pipe.expire(code_key(room.code), self.room_ttl_sec)
        await pipe.execute()

    async def room_exists(self, room_id: str) -> bool:
        return bool(await self.r.exists(RK(room_id).room()))

    # ----------------------------
    # Room codes
    # ----------------------------
    async def claim_code(self, code: str, room_id: str) -> bool:
        """Atomically reserve a code for a room. False if the code is taken."""
        ok = await self.r.set(code_key(code), room_id, nx=True, ex=self.room_ttl_sec)
        return bool(ok)

    async def release_code(self, code: str) -> None:
        await self.r.delete(code_key(code))

    async def find_room_id_by_code(self, code: str) -> Optional[str]:
        return self._dec(await self.r.get(code_key(code)))

    # ----------------------------
    # Reads
    # ----------------------------
    async def get_room(self, room_id: str) -> Optional[RoomStore]:
        raw = await self.r.get(RK(room_id).room())
        if not raw:
            return None
        return RoomStore.model_validate_json(self._dec(raw))

    async def get_player(self, room_id: str, player_id: str) -> Optional[PlayerStore]:
        raw = await self.r.hget(RK(room_id).players(), player_id)
        if not raw:
            return None
        return PlayerStore.model_validate_json(self._dec(raw))

    async def list_players(self, room_id: str) -> list[PlayerStore]:
        data = await self.r.hgetall(RK(room_id).players())
        players: list[PlayerStore] = []
        for _, raw in data.items():
            players.append(PlayerStore.model_validate_json(self._dec(raw)))
        # stable order: joined_at, then id (same-second joins)
        players.sort(key=lambda x: (x.joined_at, x.id))
        return players

    async def get_round(self, room_id: str, round_number: int) -> Optional[RoundStore]:
        raw = await self.r.hget(RK(room_id).rounds(), str(round_number))
        if not raw:
            return None
        return RoundStore.model_validate_json(self._dec(raw))

    # ----------------------------
    # Writes
    # ----------------------------
    async def commit(
        self,
        room_id: str,
        *,
        room: Optional[RoomStore] = None,
        players: Iterable[PlayerStore] = (),
        rounds: Iterable[RoundStore] = (),
        release_code: Optional[str] = None,
    ) -> None:
        """
        Write a room aggregate change set in one MULTI/EXEC transaction.
        Under room_lock the transaction WATCHes the lock key, so a writer whose
        lock expired (and was taken by someone else) fails with ROOM_BUSY.
        """
        rk = RK(room_id)
        lock = _held_lock.get()
        if lock is not None and lock.name != rk.lock():
            lock = None
        async with self.r.pipeline(transaction=True) as pipe:
            if lock is not None:
                await pipe.watch(lock.name)
                if not await lock.owned():
                    raise InvalidState("Room lock lost, retry", code="ROOM_BUSY")
                pipe.multi()
            if room is not None:
                pipe.set(rk.room(), room.model_dump_json())
            for p in players:
                pipe.hset(rk.players(), p.id, p.model_dump_json())
            for rd in rounds:
                pipe.hset(rk.rounds(), str(rd.round_number), rd.model_dump_json())
            if release_code:
                pipe.delete(code_key(release_code))
            for k in rk.all_room_keys():
                pipe.expire(k, self.room_ttl_sec)
            if room is not None and room.status != "finished" and not release_code:
                pipe.expire(code_key(room.code), self.room_ttl_sec)
            try:
                await pipe.execute()
            except WatchError as e:
                raise InvalidState("Room lock lost, retry", code="ROOM_BUSY") from e

    # ----------------------------
    # Word pairs
    # ----------------------------
    async def list_word_pairs(self) -> list[WordPair]:
        raw = await self.r.lrange(word_pairs_key(), 0, -1)
        return [WordPair.model_validate_json(self._dec(x)) for x in raw]

    async def count_word_pairs(self) -> int:
        return int(await self.r.llen(word_pairs_key()))

    async def add_word_pairs(self, pairs: Iterable[WordPair]) -> None:
        payload = [p.model_dump_json() for p in pairs]
        if payload:
            await self.r.rpush(word_pairs_key(), *payload)

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, Optional

from app.store.models import PlayerStore, RoomStore, RoundStore, WordPair


class MemoryRepo:
    """
    In-process store with the same interface as RedisRepo.
    One asyncio.Lock per room; commit applies the change set without awaiting,
    so other coroutines never observe half of it.
    Copies go in and out so callers never share mutable records with the store.
    """
    def __init__(self) -> None:
        self._rooms: Dict[str, RoomStore] = {}
        self._players: Dict[str, Dict[str, PlayerStore]] = {}
        self._rounds: Dict[str, Dict[int, RoundStore]] = {}
        self._codes: Dict[str, str] = {}
        self._words: list[WordPair] = []
        self._locks: Dict[str, asyncio.Lock] = {}

    @asynccontextmanager
    async def room_lock(self, room_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(room_id, asyncio.Lock())
        async with lock:
            yield

    async def refresh_room_ttl(self, room_id: str) -> None:
        return None

    async def room_exists(self, room_id: str) -> bool:
        return room_id in self._rooms

    # ---- Room codes ----
    async def claim_code(self, code: str, room_id: str) -> bool:
        if code in self._codes:
            return False
        self._codes[code] = room_id
        return True

    async def release_code(self, code: str) -> None:
        self._codes.pop(code, None)

    async def find_room_id_by_code(self, code: str) -> Optional[str]:
        return self._codes.get(code)

    # ---- Reads ----
    async def get_room(self, room_id: str) -> Optional[RoomStore]:
        room = self._rooms.get(room_id)
        return room.model_copy(deep=True) if room else None

    async def get_player(self, room_id: str, player_id: str) -> Optional[PlayerStore]:
        p = self._players.get(room_id, {}).get(player_id)
        return p.model_copy(deep=True) if p else None

    async def list_players(self, room_id: str) -> list[PlayerStore]:
        players = [p.model_copy(deep=True) for p in self._players.get(room_id, {}).values()]
        players.sort(key=lambda x: (x.joined_at, x.id))
        return players

    async def get_round(self, room_id: str, round_number: int) -> Optional[RoundStore]:
        rd = self._rounds.get(room_id, {}).get(round_number)
        return rd.model_copy(deep=True) if rd else None

    # ---- Writes ----
    async def commit(
        self,
        room_id: str,
        *,
        room: Optional[RoomStore] = None,
        players: Iterable[PlayerStore] = (),
        rounds: Iterable[RoundStore] = (),
        release_code: Optional[str] = None,
    ) -> None:
        if room is not None:
            self._rooms[room_id] = room.model_copy(deep=True)
        room_players = self._players.setdefault(room_id, {})
        for p in players:
            room_players[p.id] = p.model_copy(deep=True)
        room_rounds = self._rounds.setdefault(room_id, {})
        for rd in rounds:
            room_rounds[rd.round_number] = rd.model_copy(deep=True)
        if release_code:
            self._codes.pop(release_code, None)

    # ---- Word pairs ----
    async def list_word_pairs(self) -> list[WordPair]:
        return [w.model_copy() for w in self._words]

    async def count_word_pairs(self) -> int:
        return len(self._words)

    async def add_word_pairs(self, pairs: Iterable[WordPair]) -> None:
        self._words.extend(p.model_copy() for p in pairs)

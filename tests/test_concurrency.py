import asyncio
import random

import pytest

from app.domain.common.errors import DuplicateSubmission, RoomFull
from app.domain.rooms.service import RoomService
from app.domain.words import WordBank
from app.store.memory_repo import MemoryRepo
from app.store.models import GameSettings


class SlowRepo(MemoryRepo):
    """Yields to the loop on every read so unserialized writers would interleave."""

    async def list_players(self, room_id):
        await asyncio.sleep(0)
        return await super().list_players(room_id)

    async def get_round(self, room_id, round_number):
        await asyncio.sleep(0)
        return await super().get_round(room_id, round_number)

    async def get_room(self, room_id):
        await asyncio.sleep(0)
        return await super().get_room(room_id)


async def _service(settings=None):
    repo = SlowRepo()
    words = WordBank(repo, rng=random.Random(1))
    await words.seed()
    return RoomService(repo, words, default_settings=settings, rng=random.Random(1))


@pytest.mark.asyncio
async def test_concurrent_joins_never_overflow():
    service = await _service(GameSettings(min_players=4, max_players=5, undercover_count=1))
    ref = await service.create_room("Host", "sess-host")

    results = await asyncio.gather(
        *[service.join_room(ref.code, f"P{i}", f"sess-{i}") for i in range(10)],
        return_exceptions=True,
    )

    joined = [r for r in results if not isinstance(r, Exception)]
    full = [r for r in results if isinstance(r, RoomFull)]
    assert len(joined) == 4
    assert len(full) == 6
    assert len(await service.get_players(ref.room_id)) == 5


@pytest.mark.asyncio
async def test_concurrent_rejoins_do_not_duplicate():
    service = await _service()
    ref = await service.create_room("Host", "sess-host")

    results = await asyncio.gather(*[service.join_room(ref.code, "Bob", "sess-bob") for _ in range(5)])
    assert len({r.player_id for r in results}) == 1
    assert len(await service.get_players(ref.room_id)) == 2


@pytest.mark.asyncio
async def test_simultaneous_last_descriptions_open_voting_once():
    service = await _service()
    ref = await service.create_room("Alice", "sess-alice")
    for n in ("Bob", "Carl", "Dan"):
        await service.join_room(ref.code, n, f"sess-{n}")
    await service.start_game(ref.room_id, "sess-alice")
    ids = [p.id for p in await service.get_players(ref.room_id)]

    await service.submit_description(ref.room_id, 1, ids[0], "one")
    await service.submit_description(ref.room_id, 1, ids[1], "two")
    await asyncio.gather(
        service.submit_description(ref.room_id, 1, ids[2], "three"),
        service.submit_description(ref.room_id, 1, ids[3], "four"),
    )

    rd = await service.get_current_round(ref.room_id)
    assert rd.status == "voting"
    assert len(rd.descriptions) == 4


@pytest.mark.asyncio
async def test_simultaneous_double_vote_counts_once():
    service = await _service()
    ref = await service.create_room("Alice", "sess-alice")
    for n in ("Bob", "Carl", "Dan"):
        await service.join_room(ref.code, n, f"sess-{n}")
    await service.start_game(ref.room_id, "sess-alice")
    ids = [p.id for p in await service.get_players(ref.room_id)]
    for pid in ids:
        await service.submit_description(ref.room_id, 1, pid, "clue")

    results = await asyncio.gather(
        service.submit_vote(ref.room_id, 1, ids[0], ids[1]),
        service.submit_vote(ref.room_id, 1, ids[0], ids[2]),
        return_exceptions=True,
    )
    assert sum(isinstance(r, DuplicateSubmission) for r in results) == 1
    assert len((await service.get_current_round(ref.room_id)).votes) == 1


@pytest.mark.asyncio
async def test_rooms_are_independent():
    service = await _service()
    a = await service.create_room("A", "sess-a")
    b = await service.create_room("B", "sess-b")

    await asyncio.gather(
        *[service.join_room(a.code, f"A{i}", f"a-{i}") for i in range(3)],
        *[service.join_room(b.code, f"B{i}", f"b-{i}") for i in range(3)],
    )
    assert len(await service.get_players(a.room_id)) == 4
    assert len(await service.get_players(b.room_id)) == 4

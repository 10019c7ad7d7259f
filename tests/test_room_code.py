import random

import pytest

from app.domain.common.errors import CodeSpaceExhausted
from app.domain.helpers.room_code import CODE_ALPHABET, generate_room_code, normalize_room_code
from app.domain.rooms.service import RoomService
from app.domain.words import WordBank
from app.store.memory_repo import MemoryRepo


class ScriptedRng:
    """choice() walks a fixed string, one character per call."""
    def __init__(self, chars):
        self._chars = iter(chars)

    def choice(self, seq):
        return next(self._chars)


class FullRepo(MemoryRepo):
    async def claim_code(self, code, room_id):
        return False


def test_code_shape_and_alphabet():
    rng = random.Random(1)
    for _ in range(200):
        code = generate_room_code(rng)
        assert len(code) == 6
        assert set(code) <= set(CODE_ALPHABET)
    assert len(CODE_ALPHABET) == 32
    assert not set("IO01") & set(CODE_ALPHABET)


def test_normalize_room_code():
    assert normalize_room_code("  ab3xyz ") == "AB3XYZ"
    assert normalize_room_code(None) == ""


@pytest.mark.asyncio
async def test_thousand_rooms_never_share_an_active_code():
    repo = MemoryRepo()
    service = RoomService(repo, WordBank(repo), rng=random.Random(42))

    codes = set()
    for i in range(1000):
        ref = await service.create_room(f"Host{i}", f"sess-{i}")
        assert ref.code not in codes
        codes.add(ref.code)
    assert len(codes) == 1000


@pytest.mark.asyncio
async def test_collision_is_retried():
    repo = MemoryRepo()
    await repo.claim_code("AAAAAA", "someone-else")
    service = RoomService(repo, WordBank(repo), rng=ScriptedRng("AAAAAA" + "BBBBBB"))

    ref = await service.create_room("Alice", "s1")
    assert ref.code == "BBBBBB"
    assert await repo.find_room_id_by_code("AAAAAA") == "someone-else"


@pytest.mark.asyncio
async def test_exhausted_code_space_aborts_creation():
    repo = FullRepo()
    service = RoomService(repo, WordBank(repo), code_max_attempts=5)

    with pytest.raises(CodeSpaceExhausted):
        await service.create_room("Alice", "s1")
    assert repo._rooms == {}

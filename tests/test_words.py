import random

import pytest

from app.domain.common.errors import InvalidInput
from app.domain.words import INITIAL_PAIRS, WordBank
from app.store.memory_repo import MemoryRepo


@pytest.mark.asyncio
async def test_seed_only_when_empty():
    repo = MemoryRepo()
    bank = WordBank(repo)

    assert await bank.seed() is True
    assert len(await bank.list_pairs()) == len(INITIAL_PAIRS)

    assert await bank.seed() is False
    assert len(await bank.list_pairs()) == len(INITIAL_PAIRS)


@pytest.mark.asyncio
async def test_seed_skipped_when_custom_pairs_exist():
    repo = MemoryRepo()
    bank = WordBank(repo)
    await bank.add_pair("River", "Lake", "Nature")

    assert await bank.seed() is False
    pairs = await bank.list_pairs()
    assert [(p.civilian_word, p.undercover_word) for p in pairs] == [("River", "Lake")]


@pytest.mark.asyncio
async def test_random_pair_empty_bank():
    bank = WordBank(MemoryRepo())
    assert await bank.random_pair() is None


@pytest.mark.asyncio
async def test_random_pair_draws_from_bank():
    repo = MemoryRepo()
    bank = WordBank(repo, rng=random.Random(3))
    await bank.seed()

    seen = {(await bank.random_pair()).civilian_word for _ in range(200)}
    assert seen <= {p.civilian_word for p in INITIAL_PAIRS}
    assert len(seen) > 1


@pytest.mark.asyncio
async def test_add_pair_strips_and_validates():
    bank = WordBank(MemoryRepo())

    pair = await bank.add_pair("  Piano ", " Guitar", " Music ")
    assert (pair.civilian_word, pair.undercover_word, pair.category) == ("Piano", "Guitar", "Music")

    with pytest.raises(InvalidInput):
        await bank.add_pair("", "Guitar")
    with pytest.raises(InvalidInput):
        await bank.add_pair("Piano", "   ")
    with pytest.raises(InvalidInput):
        await bank.add_pair("Piano", "piano")

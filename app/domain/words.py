from __future__ import annotations

import logging
import random
from typing import Any, Optional

from app.domain.common.errors import InvalidInput
from app.store.models import WordPair

logger = logging.getLogger(__name__)

INITIAL_PAIRS = [
    WordPair(civilian_word="Coffee", undercover_word="Tea", category="Food"),
    WordPair(civilian_word="Car", undercover_word="Motorcycle", category="Transport"),
    WordPair(civilian_word="Beach", undercover_word="Pool", category="Place"),
    WordPair(civilian_word="Dog", undercover_word="Wolf", category="Animal"),
    WordPair(civilian_word="Sun", undercover_word="Moon", category="Nature"),
    WordPair(civilian_word="Apple", undercover_word="Orange", category="Fruit"),
    WordPair(civilian_word="Pen", undercover_word="Pencil", category="Stationery"),
    WordPair(civilian_word="Ship", undercover_word="Boat", category="Transport"),
    WordPair(civilian_word="Computer", undercover_word="Laptop", category="Tech"),
    WordPair(civilian_word="School", undercover_word="University", category="Place"),
]


class WordBank:
    """
    Word pairs live in the store so every server instance draws from the same bank.
    """
    def __init__(self, repo: Any, rng: Optional[random.Random] = None) -> None:
        self.repo = repo
        self.rng = rng or random.SystemRandom()

    async def random_pair(self) -> Optional[WordPair]:
        pairs = await self.repo.list_word_pairs()
        if not pairs:
            return None
        return self.rng.choice(pairs)

    async def list_pairs(self) -> list[WordPair]:
        return await self.repo.list_word_pairs()

    async def add_pair(self, civilian_word: str, undercover_word: str, category: str = "") -> WordPair:
        civ = (civilian_word or "").strip()
        under = (undercover_word or "").strip()
        if not civ or not under:
            raise InvalidInput("Both words are required")
        if civ.lower() == under.lower():
            raise InvalidInput("The two words must differ")
        pair = WordPair(civilian_word=civ, undercover_word=under, category=(category or "").strip())
        await self.repo.add_word_pairs([pair])
        return pair

    async def seed(self) -> bool:
        """Insert the built-in pairs if the bank is empty. Returns True if it seeded."""
        if await self.repo.count_word_pairs() > 0:
            return False
        await self.repo.add_word_pairs(INITIAL_PAIRS)
        logger.info("Seeded word bank with %d pairs", len(INITIAL_PAIRS))
        return True

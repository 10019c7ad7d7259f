from __future__ import annotations

import random
from typing import Optional

# No I, O, 0 or 1: easy to read aloud and type.
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6

_sysrand = random.SystemRandom()


def generate_room_code(rng: Optional[random.Random] = None, n: int = CODE_LENGTH) -> str:
    """
    Draw a room code uniformly from CODE_ALPHABET.
    Keeps no memory of earlier codes; uniqueness is the caller's job (repo.claim_code).
    """
    rng = rng or _sysrand
    return "".join(rng.choice(CODE_ALPHABET) for _ in range(n))


def normalize_room_code(code: str) -> str:
    return (code or "").strip().upper()

from __future__ import annotations

import random
from typing import Dict, Optional, Sequence

from app.domain.common.types import PlayerId, Role


def effective_undercover_count(n_players: int, undercover_count: int) -> int:
    """At most a third of the table can be undercover."""
    return max(0, min(undercover_count, n_players // 3))


def assign_roles(
    player_ids: Sequence[PlayerId],
    undercover_count: int,
    rng: Optional[random.Random] = None,
) -> Dict[PlayerId, Role]:
    """
    Assign roles:
      - shuffle a copy of the players (Fisher-Yates via random.shuffle)
      - the first `effective_undercover_count` are undercover
      - everyone else is civilian
    """
    rng = rng or random.SystemRandom()
    order = list(player_ids)
    rng.shuffle(order)

    n_under = effective_undercover_count(len(order), undercover_count)
    roles: Dict[PlayerId, Role] = {}
    for i, pid in enumerate(order):
        roles[pid] = "undercover" if i < n_under else "civilian"
    return roles

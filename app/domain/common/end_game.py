from __future__ import annotations

from typing import Iterable, Optional

from app.domain.common.types import Winner
from app.store.models import PlayerStore


def evaluate_winner(players: Iterable[PlayerStore]) -> Optional[Winner]:
    """
    Win condition, checked after every resolution:
      - no undercover alive                  -> civilians win
      - undercover alive >= civilians alive  -> undercover wins
      - otherwise the game continues (None)
    """
    alive_under = 0
    alive_civ = 0
    for p in players:
        if not p.is_alive:
            continue
        if p.role == "undercover":
            alive_under += 1
        elif p.role == "civilian":
            alive_civ += 1

    if alive_under == 0:
        return "civilian"
    if alive_under >= alive_civ:
        return "undercover"
    return None

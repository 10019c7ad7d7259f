from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional

from app.store.models import Description, Vote


@dataclass(frozen=True)
class TallyResult:
    eliminated_id: Optional[str] = None
    is_tie: bool = False


def tally_votes(votes: Iterable[Vote]) -> TallyResult:
    """
    Count votes per target.
    - unique maximum -> that target is eliminated
    - shared maximum -> tie, nobody eliminated
    - no votes       -> nobody eliminated, not a tie
    """
    counts = Counter(v.target_id for v in votes)
    if not counts:
        return TallyResult()

    top = max(counts.values())
    leaders = [target for target, n in counts.items() if n == top]
    if len(leaders) > 1:
        return TallyResult(eliminated_id=None, is_tie=True)
    return TallyResult(eliminated_id=leaders[0], is_tie=False)


def all_alive_voted(votes: Iterable[Vote], alive_ids: Iterable[str]) -> bool:
    voters = {v.voter_id for v in votes}
    return set(alive_ids) <= voters


def all_alive_described(descriptions: Iterable[Description], alive_ids: Iterable[str]) -> bool:
    authors = {d.player_id for d in descriptions}
    return set(alive_ids) <= authors

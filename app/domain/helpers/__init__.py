from __future__ import annotations

from .role_pick import assign_roles, effective_undercover_count
from .room_code import generate_room_code, normalize_room_code
from .voting import TallyResult, all_alive_described, all_alive_voted, tally_votes

__all__ = [
    "assign_roles",
    "effective_undercover_count",
    "generate_room_code",
    "normalize_room_code",
    "TallyResult",
    "tally_votes",
    "all_alive_voted",
    "all_alive_described",
]

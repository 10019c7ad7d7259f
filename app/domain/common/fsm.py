# app/domain/common/fsm.py
from __future__ import annotations

from app.domain.common.types import RoomStatus, RoundStatus


def can_transition_to(current: RoomStatus, target: RoomStatus) -> bool:
    """
    Validate room status transitions.
    """
    transitions: dict[RoomStatus, list[RoomStatus]] = {
        "lobby": ["playing"],
        "playing": ["finished"],
        "finished": [],
    }
    return target in transitions.get(current, [])


def can_transition_round(current: RoundStatus, target: RoundStatus) -> bool:
    """
    Validate round status transitions.
    Resolution may close a round that is still describing (host forcing it).
    """
    transitions: dict[RoundStatus, list[RoundStatus]] = {
        "describing": ["voting", "completed"],
        "voting": ["completed"],
        "completed": [],
    }
    return target in transitions.get(current, [])

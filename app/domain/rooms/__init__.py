from __future__ import annotations

from .service import JoinResult, ResolveOutcome, RoomRef, RoomService, StartResult, VoteResult
from .snapshot import build_snapshot, snapshot_for

__all__ = [
    "RoomService",
    "RoomRef",
    "JoinResult",
    "StartResult",
    "VoteResult",
    "ResolveOutcome",
    "build_snapshot",
    "snapshot_for",
]

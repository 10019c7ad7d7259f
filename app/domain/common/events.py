# app/domain/common/events.py
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from app.domain.rooms.snapshot import build_snapshot
from app.transport.protocols import OutgoingEvent

# Returns: (to_sender, to_room)
Result = Tuple[List[OutgoingEvent], List[Any]]


async def room_snapshots(app, room_id: str) -> List[Dict[str, Any]]:
    """
    One snapshot per player, each tagged with the session that should receive it.
    The transport strips "targets" before sending.
    """
    service = app.state.rooms
    room = await service.get_room(room_id)
    if room is None:
        return []
    players = await service.get_players(room_id)
    current = await service.get_current_round(room_id)

    out: List[Dict[str, Any]] = []
    for p in players:
        snap = build_snapshot(room, players, current, viewer_session_id=p.session_id)
        out.append({**snap.model_dump(), "targets": [p.session_id]})
    return out

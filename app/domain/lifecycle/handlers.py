# app/domain/lifecycle/handlers.py
from __future__ import annotations

from typing import Optional

from app.domain.common.errors import NotFound
from app.domain.common.events import Result, room_snapshots
from app.domain.rooms.snapshot import snapshot_for
from app.transport.protocols import (
    InCreateRoom,
    InJoin,
    InSnapshot,
    InStartGame,
    InUpdateSettings,
    OutJoined,
    OutRoomCreated,
)


async def handle_create_room(*, app, room_id: Optional[str], session_id: Optional[str], msg: InCreateRoom) -> Result:
    """
    create_room carries its own session id: the connection is not bound to a room yet.
    """
    ref = await app.state.rooms.create_room(msg.name, msg.session_id)
    return [OutRoomCreated(room_id=ref.room_id, code=ref.code)], []


async def handle_join(*, app, room_id: Optional[str], session_id: Optional[str], msg: InJoin) -> Result:
    """
    Join by code:
    - rejoin with a known session is not an error, it returns the same player
    - everyone in the room gets a fresh snapshot
    """
    joined = await app.state.rooms.join_room(msg.code, msg.name, msg.session_id)
    to_room = await room_snapshots(app, joined.room_id)
    return [OutJoined(room_id=joined.room_id, player_id=joined.player_id, rejoined=joined.rejoined)], to_room


async def handle_snapshot(*, app, room_id: Optional[str], session_id: Optional[str], msg: InSnapshot) -> Result:
    snap = await snapshot_for(app.state.rooms, room_id or "", viewer_session_id=session_id)
    if snap is None:
        raise NotFound(f"Room {room_id} not found", code="ROOM_NOT_FOUND")
    return [snap], []


async def handle_update_settings(*, app, room_id: Optional[str], session_id: Optional[str], msg: InUpdateSettings) -> Result:
    await app.state.rooms.update_settings(
        room_id or "",
        session_id or "",
        **msg.model_dump(exclude={"type"}, exclude_none=True),
    )
    return [], await room_snapshots(app, room_id or "")


async def handle_start_game(*, app, room_id: Optional[str], session_id: Optional[str], msg: InStartGame) -> Result:
    await app.state.rooms.start_game(room_id or "", session_id or "")
    return [], await room_snapshots(app, room_id or "")

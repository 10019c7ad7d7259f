from __future__ import annotations

from typing import Any, Dict, List, Optional

from app.store.models import PlayerStore, RoomStore, RoundStore
from app.transport.protocols import OutRoomSnapshot, PlayerView, RoomView, RoundView


def _word_for(room: RoomStore, player: PlayerStore) -> Optional[str]:
    if player.role == "undercover":
        return room.undercover_word
    if player.role == "civilian":
        return room.civilian_word
    return None


def build_snapshot(
    room: RoomStore,
    players: List[PlayerStore],
    current_round: Optional[RoundStore],
    *,
    viewer_session_id: Optional[str] = None,
) -> OutRoomSnapshot:
    """
    Per-viewer view of a room.
    Session ids never leave the server. While the game runs a viewer only sees
    their own role and word; once finished, roles and both words are revealed.
    """
    finished = room.status == "finished"
    viewer = None
    if viewer_session_id:
        viewer = next((p for p in players if p.session_id == viewer_session_id), None)

    room_view = RoomView(
        id=room.id,
        code=room.code,
        status=room.status,
        current_round=room.current_round,
        settings=room.settings.model_dump(),
        winner=room.winner,
        civilian_word=room.civilian_word if finished else None,
        undercover_word=room.undercover_word if finished else None,
    )

    player_views = [
        PlayerView(
            id=p.id,
            name=p.name,
            is_alive=p.is_alive,
            is_host=p.is_host,
            role=p.role if (finished or (viewer is not None and p.id == viewer.id)) else None,
        )
        for p in players
    ]

    round_view = None
    if current_round is not None:
        round_view = RoundView(
            round_number=current_round.round_number,
            status=current_round.status,
            descriptions=[d.model_dump() for d in current_round.descriptions],
            votes=[v.model_dump() for v in current_round.votes],
            eliminated_player_id=current_round.eliminated_player_id,
            is_tie=current_round.is_tie,
        )

    me: Optional[Dict[str, Any]] = None
    if viewer is not None:
        me = {
            "player_id": viewer.id,
            "role": viewer.role,
            "word": _word_for(room, viewer),
            "is_host": viewer.is_host,
        }

    return OutRoomSnapshot(room=room_view, players=player_views, round=round_view, me=me)


async def snapshot_for(service, room_id: str, *, viewer_session_id: Optional[str] = None) -> Optional[OutRoomSnapshot]:
    """
    Build a snapshot from the read model.
    Keep it store-driven, not rule-driven.
    """
    room = await service.get_room(room_id)
    if room is None:
        return None
    players = await service.get_players(room_id)
    current = await service.get_current_round(room_id)
    return build_snapshot(room, players, current, viewer_session_id=viewer_session_id)

from __future__ import annotations

import logging
from typing import Optional

from app.domain.common.errors import InvalidState, NotFound, Unauthorized
from app.domain.common.events import Result, room_snapshots
from app.domain.common.validation import is_host
from app.store.models import PlayerStore
from app.transport.protocols import InDescribe, InResolveRound, InVote, OutRoundResolved, OutVoteCast

logger = logging.getLogger(__name__)


async def _acting_player(app, room_id: str, session_id: Optional[str]) -> PlayerStore:
    player = await app.state.rooms.get_player_by_session(room_id, session_id or "")
    if player is None:
        raise NotFound("Join the room first", code="PLAYER_NOT_FOUND")
    return player


def _resolved_event(outcome) -> OutRoundResolved:
    return OutRoundResolved(
        round_number=outcome.round_number,
        eliminated_id=outcome.eliminated_id,
        is_tie=outcome.is_tie,
        winner=outcome.winner,
        next_round=outcome.next_round,
    )


async def handle_describe(*, app, room_id: Optional[str], session_id: Optional[str], msg: InDescribe) -> Result:
    player = await _acting_player(app, room_id or "", session_id)
    await app.state.rooms.submit_description(room_id or "", msg.round_number, player.id, msg.text)
    return [], await room_snapshots(app, room_id or "")


async def handle_vote(*, app, room_id: Optional[str], session_id: Optional[str], msg: InVote) -> Result:
    """
    Record a vote from the connection's player.
    With AUTO_RESOLVE_ON_ALL_VOTED the round is resolved by the last vote;
    otherwise the host resolves it (resolve_round).
    """
    service = app.state.rooms
    player = await _acting_player(app, room_id or "", session_id)
    result = await service.submit_vote(room_id or "", msg.round_number, player.id, msg.target_id)

    to_sender = [OutVoteCast(round_number=msg.round_number, all_voted=result.all_voted)]
    to_room = []

    settings = getattr(app.state, "settings", None)
    if result.all_voted and getattr(settings, "AUTO_RESOLVE_ON_ALL_VOTED", False):
        logger.info("[%s] all voted in round %d, auto-resolving", room_id, msg.round_number)
        try:
            outcome = await service.resolve_round(room_id or "", msg.round_number)
        except InvalidState as e:
            # the host resolved it first; the vote itself is committed
            logger.info("[%s] auto-resolve of round %d skipped: %s", room_id, msg.round_number, e.message)
        else:
            to_room.append(_resolved_event(outcome))
            to_sender.append(_resolved_event(outcome))

    to_room.extend(await room_snapshots(app, room_id or ""))
    return to_sender, to_room


async def handle_resolve_round(*, app, room_id: Optional[str], session_id: Optional[str], msg: InResolveRound) -> Result:
    service = app.state.rooms
    room = await service.get_room(room_id or "")
    if room is None:
        raise NotFound(f"Room {room_id} not found", code="ROOM_NOT_FOUND")
    if not is_host(session_id, room):
        raise Unauthorized("Only the host can resolve a round")

    outcome = await service.resolve_round(room_id or "", msg.round_number)
    event = _resolved_event(outcome)
    return [event], [event, *await room_snapshots(app, room_id or "")]

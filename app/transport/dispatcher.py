# app/transport/dispatcher.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple, Optional

from pydantic import BaseModel, ValidationError

from app.domain.common.errors import GameError
from app.transport.protocols import (
    parse_incoming,
    OutError,
    InCreateRoom,
    InJoin,
    InSnapshot,
    InUpdateSettings,
    InStartGame,
    InDescribe,
    InVote,
    InResolveRound,
)
from app.domain.lifecycle.handlers import (
    handle_create_room,
    handle_join,
    handle_snapshot,
    handle_update_settings,
    handle_start_game,
)
from app.domain.rounds.handlers import handle_describe, handle_vote, handle_resolve_round

logger = logging.getLogger(__name__)

DispatchResult = Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]
# (to_sender_events, to_room_events), each event is JSON dict

# Messages that need no room binding (sent on /ws-lobby)
LOBBY_TYPES = (InCreateRoom, InJoin)

_HANDLERS = {
    InCreateRoom: handle_create_room,
    InJoin: handle_join,
    InSnapshot: handle_snapshot,
    InUpdateSettings: handle_update_settings,
    InStartGame: handle_start_game,
    InDescribe: handle_describe,
    InVote: handle_vote,
    InResolveRound: handle_resolve_round,
}


async def dispatch_message(
    *,
    app,
    room_id: Optional[str],
    session_id: Optional[str],
    raw: Dict[str, Any],
) -> DispatchResult:
    """
    Transport layer calls this.
    - Parses + validates raw JSON
    - Routes to the correct domain handler
    - Turns GameError into an error event for the sender only
    - Returns (to_sender, to_room) events as JSON dicts

    NOTE: This file contains NO store access and NO game rules.
    """
    try:
        msg = parse_incoming(raw)
    except (ValidationError, ValueError) as e:
        err = OutError(code="BAD_MESSAGE", message=str(e)).model_dump()
        return [err], []

    if not isinstance(msg, LOBBY_TYPES):
        if not room_id:
            return [OutError(code="NO_ROOM", message="Connect to a room first").model_dump()], []
        if not session_id:
            return [OutError(code="NO_SESSION", message="Missing session id").model_dump()], []

    handler = _HANDLERS.get(type(msg))
    if handler is None:
        # If protocol exists but we didn't route it yet:
        err = OutError(code="NOT_IMPLEMENTED", message=f"Handler not implemented for type={msg.type}").model_dump()
        return [err], []

    try:
        to_sender, to_room = await handler(app=app, room_id=room_id, session_id=session_id, msg=msg)
    except GameError as e:
        logger.info("[%s] %s rejected: %s %s", room_id or "-", msg.type, e.code, e.message)
        return [OutError(code=e.code, message=e.message).model_dump()], []

    return _dump(to_sender), _dump(to_room)


def _dump(events: List[Any]) -> List[Dict[str, Any]]:
    """
    Convert pydantic events -> JSON dicts. Targeted events are already dicts.
    """
    return [e.model_dump() if isinstance(e, BaseModel) else e for e in events]

# app/transport/ws.py
from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState

from app.settings import get_settings
from app.transport.dispatcher import dispatch_message
from app.transport.protocols import OutError

logger = logging.getLogger(__name__)

router = APIRouter()


async def _check_origin_or_close(websocket: WebSocket) -> bool:
    settings = get_settings()
    allowed = {o.strip() for o in settings.WS_ALLOWED_ORIGINS.split(",") if o.strip()}

    origin = websocket.headers.get("origin")
    if origin is not None and origin not in allowed and "*" not in allowed:
        await websocket.close(code=1008)
        return False
    return True


@router.websocket("/ws-lobby")
async def ws_lobby(websocket: WebSocket):
    """
    One message, one reply: create_room or join (by code).
    A join also pushes fresh snapshots to the room it joined.
    """
    if not await _check_origin_or_close(websocket):
        return

    await websocket.accept()

    try:
        raw = await websocket.receive_json()
        if not isinstance(raw, dict) or raw.get("type") not in ("create_room", "join"):
            err = OutError(code="ONLY_LOBBY", message="ws-lobby only accepts create_room and join").model_dump()
            await websocket.send_json(err)
            return

        to_sender, to_room = await dispatch_message(
            app=websocket.app,
            room_id=None,
            session_id=None,
            raw=raw,
        )
        for e in to_sender:
            await websocket.send_json(e)

        joined = next((e for e in to_sender if e.get("type") == "joined"), None)
        if joined is not None:
            await websocket.app.state.wsman.deliver(joined["room_id"], to_room)
    except WebSocketDisconnect:
        return
    finally:
        if websocket.client_state == WebSocketState.CONNECTED:
            await websocket.close()


@router.websocket("/ws/{room_id}")
async def ws_room(websocket: WebSocket, room_id: str):
    if not await _check_origin_or_close(websocket):
        return

    session_id = (websocket.query_params.get("session_id") or "").strip()
    await websocket.accept()
    if not session_id:
        await websocket.send_json(OutError(code="NO_SESSION", message="Missing session_id").model_dump())
        await websocket.close(code=1008)
        return

    repo = websocket.app.state.repo
    if not await repo.room_exists(room_id):
        await websocket.send_json(OutError(code="ROOM_NOT_FOUND", message=f"Room {room_id} not found").model_dump())
        await websocket.close(code=1008)
        return
    await repo.refresh_room_ttl(room_id)

    wsman = websocket.app.state.wsman
    await wsman.add(room_id, session_id, websocket)
    logger.debug("[%s] connected session=%s (%d open)", room_id, session_id, await wsman.room_size(room_id))

    try:
        # greet with the current state
        to_sender, _ = await dispatch_message(
            app=websocket.app,
            room_id=room_id,
            session_id=session_id,
            raw={"type": "snapshot"},
        )
        for e in to_sender:
            await websocket.send_json(e)

        while True:
            raw = await websocket.receive_json()

            to_sender, to_room = await dispatch_message(
                app=websocket.app,
                room_id=room_id,
                session_id=session_id,
                raw=raw if isinstance(raw, dict) else {},
            )

            # unicast
            for e in to_sender:
                await websocket.send_json(e)

            # broadcast (exclude sender for untargeted events to avoid duplicates)
            await wsman.deliver(room_id, to_room, exclude_session=session_id)

    except WebSocketDisconnect:
        logger.debug("[%s] disconnected session=%s", room_id, session_id)
    finally:
        await wsman.remove(room_id, session_id, websocket)

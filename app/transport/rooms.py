from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from app.domain.common.errors import GameError, InvalidInput, NotFound, Unauthorized
from app.domain.rooms.snapshot import build_snapshot, snapshot_for

router = APIRouter(tags=["rooms"])


class WordPairIn(BaseModel):
    civilian_word: str = Field(min_length=1, max_length=40)
    undercover_word: str = Field(min_length=1, max_length=40)
    category: str = Field(default="", max_length=40)


def _http_error(e: GameError) -> HTTPException:
    if isinstance(e, NotFound):
        status = 404
    elif isinstance(e, Unauthorized):
        status = 403
    elif isinstance(e, InvalidInput):
        status = 400
    else:
        status = 409
    return HTTPException(status_code=status, detail={"code": e.code, "message": e.message})


# ----------------------------
# Read model (polling clients)
# ----------------------------

@router.get("/rooms/by-code/{code}")
async def get_room_by_code(code: str, request: Request):
    """
    Resolve a human room code to its room id (active rooms only).
    """
    room = await request.app.state.rooms.get_room_by_code(code)
    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return {"room_id": room.id, "code": room.code, "status": room.status}


@router.get("/rooms/{room_id}")
async def get_room(room_id: str, request: Request, session_id: Optional[str] = None):
    """
    Viewer snapshot: secret words and roles are only shown to whoever may see them.
    """
    snap = await snapshot_for(request.app.state.rooms, room_id, viewer_session_id=session_id)
    if snap is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return snap.model_dump()


@router.get("/rooms/{room_id}/players")
async def get_players(room_id: str, request: Request):
    service = request.app.state.rooms
    room = await service.get_room(room_id)
    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")
    players = await service.get_players(room_id)
    return {"players": [p.model_dump() for p in build_snapshot(room, players, None).players]}


@router.get("/rooms/{room_id}/round")
async def get_current_round(room_id: str, request: Request):
    service = request.app.state.rooms
    room = await service.get_room(room_id)
    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")
    current = await service.get_current_round(room_id)
    snap = build_snapshot(room, [], current)
    return {"round": snap.round.model_dump() if snap.round else None}


# ----------------------------
# Word bank
# ----------------------------

@router.get("/words")
async def list_words(request: Request):
    pairs = await request.app.state.words.list_pairs()
    return {"pairs": [p.model_dump() for p in pairs]}


@router.post("/words")
async def add_word_pair(body: WordPairIn, request: Request):
    try:
        pair = await request.app.state.words.add_pair(body.civilian_word, body.undercover_word, body.category)
    except GameError as e:
        raise _http_error(e) from e
    return {"ok": True, "pair": pair.model_dump()}


@router.post("/words/seed")
async def seed_words(request: Request):
    seeded = await request.app.state.words.seed()
    return {"ok": True, "seeded": seeded}

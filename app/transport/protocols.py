# app/transport/protocols.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field, ValidationError

from app.domain.common.types import Role, RoomStatus, RoundStatus, Winner


# =========================
# Incoming (Client -> Server)
# =========================

class InBase(BaseModel):
    type: str


# ---- Lifecycle ----

class InCreateRoom(InBase):
    type: Literal["create_room"] = "create_room"
    name: str = Field(min_length=1, max_length=24)
    session_id: str = Field(min_length=1, max_length=128)


class InJoin(InBase):
    type: Literal["join"] = "join"
    code: str = Field(min_length=6, max_length=6)
    name: str = Field(min_length=1, max_length=24)
    session_id: str = Field(min_length=1, max_length=128)


class InSnapshot(InBase):
    type: Literal["snapshot"] = "snapshot"


class InUpdateSettings(InBase):
    """
    Host only, lobby only. Omitted fields keep their current value.
    """
    type: Literal["update_settings"] = "update_settings"
    min_players: Optional[int] = Field(default=None, ge=2, le=20)
    max_players: Optional[int] = Field(default=None, ge=2, le=20)
    undercover_count: Optional[int] = Field(default=None, ge=1, le=6)
    description_seconds: Optional[int] = Field(default=None, ge=10, le=600)
    voting_seconds: Optional[int] = Field(default=None, ge=10, le=600)


class InStartGame(InBase):
    type: Literal["start_game"] = "start_game"


# ---- Rounds ----

class InDescribe(InBase):
    type: Literal["describe"] = "describe"
    round_number: int = Field(ge=1)
    text: str = Field(min_length=1, max_length=200)


class InVote(InBase):
    type: Literal["vote"] = "vote"
    round_number: int = Field(ge=1)
    target_id: str = Field(min_length=1)


class InResolveRound(InBase):
    type: Literal["resolve_round"] = "resolve_round"
    round_number: int = Field(ge=1)


# Union of all incoming messages you support right now
IncomingMessage = Union[
    InCreateRoom,
    InJoin,
    InSnapshot,
    InUpdateSettings,
    InStartGame,
    InDescribe,
    InVote,
    InResolveRound,
]


# =========================
# Outgoing (Server -> Client)
# =========================

class OutBase(BaseModel):
    type: str


class OutError(OutBase):
    type: Literal["error"] = "error"
    code: str
    message: str


class OutRoomCreated(OutBase):
    type: Literal["room_created"] = "room_created"
    room_id: str
    code: str


class OutJoined(OutBase):
    type: Literal["joined"] = "joined"
    room_id: str
    player_id: str
    rejoined: bool = False


class PlayerView(BaseModel):
    id: str
    name: str
    is_alive: bool
    is_host: bool
    role: Optional[Role] = None  # only own role, or everyone's once finished


class RoomView(BaseModel):
    id: str
    code: str
    status: RoomStatus
    current_round: int
    settings: Dict[str, Any]
    winner: Optional[Winner] = None
    civilian_word: Optional[str] = None   # revealed once finished
    undercover_word: Optional[str] = None


class RoundView(BaseModel):
    round_number: int
    status: RoundStatus
    descriptions: List[Dict[str, Any]] = Field(default_factory=list)
    votes: List[Dict[str, Any]] = Field(default_factory=list)
    eliminated_player_id: Optional[str] = None
    is_tie: bool = False


class OutRoomSnapshot(OutBase):
    type: Literal["room_snapshot"] = "room_snapshot"
    room: RoomView
    players: List[PlayerView]
    round: Optional[RoundView] = None
    me: Optional[Dict[str, Any]] = None   # {"player_id", "role", "word"} for the viewer


class OutVoteCast(OutBase):
    type: Literal["vote_cast"] = "vote_cast"
    round_number: int
    all_voted: bool


class OutRoundResolved(OutBase):
    type: Literal["round_resolved"] = "round_resolved"
    round_number: int
    eliminated_id: Optional[str] = None
    is_tie: bool = False
    winner: Optional[Winner] = None
    next_round: Optional[int] = None


OutgoingEvent = Union[
    OutError,
    OutRoomCreated,
    OutJoined,
    OutRoomSnapshot,
    OutVoteCast,
    OutRoundResolved,
]


# =========================
# Parser helpers
# =========================

# A small map so we can parse by "type" quickly (simple & readable)
_INCOMING_BY_TYPE = {
    "create_room": InCreateRoom,
    "join": InJoin,
    "snapshot": InSnapshot,
    "update_settings": InUpdateSettings,
    "start_game": InStartGame,
    "describe": InDescribe,
    "vote": InVote,
    "resolve_round": InResolveRound,
}


def parse_incoming(payload: Dict[str, Any]) -> IncomingMessage:
    """
    Convert raw dict -> validated message model.
    Raises ValidationError if invalid.
    """
    t = payload.get("type")
    if not isinstance(t, str):
        raise ValidationError.from_exception_data(
            title="IncomingMessage",
            line_errors=[{"loc": ("type",), "input": t, "ctx": {"error": "Missing/invalid type"}, "type": "value_error"}],
        )

    cls = _INCOMING_BY_TYPE.get(t)
    if cls is None:
        raise ValidationError.from_exception_data(
            title="IncomingMessage",
            line_errors=[{"loc": ("type",), "input": t, "ctx": {"error": f"Unknown message type: {t}"}, "type": "value_error"}],
        )

    return cls.model_validate(payload)

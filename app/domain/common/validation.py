from __future__ import annotations

from typing import Iterable, Optional

from app.domain.common.errors import InvalidInput
from app.store.models import PlayerStore, RoomStore

NAME_MAX_LEN = 24
DESCRIPTION_MAX_LEN = 200


def is_host(session_id: Optional[str], room: RoomStore) -> bool:
    """Check if a session owns the room."""
    return bool(session_id) and room.host_session_id == session_id


def alive_ids(players: Iterable[PlayerStore]) -> list[str]:
    return [p.id for p in players if p.is_alive]


def find_by_session(players: Iterable[PlayerStore], session_id: str) -> Optional[PlayerStore]:
    for p in players:
        if p.session_id == session_id:
            return p
    return None


def clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise InvalidInput("Name must not be empty")
    if len(name) > NAME_MAX_LEN:
        raise InvalidInput(f"Name must be at most {NAME_MAX_LEN} characters")
    return name


def clean_session(session_id: str) -> str:
    session_id = (session_id or "").strip()
    if not session_id:
        raise InvalidInput("Missing session id", code="NO_SESSION")
    return session_id


def clean_description(text: str) -> str:
    text = (text or "").strip()
    if not text:
        raise InvalidInput("Description must not be empty")
    if len(text) > DESCRIPTION_MAX_LEN:
        raise InvalidInput(f"Description must be at most {DESCRIPTION_MAX_LEN} characters")
    return text

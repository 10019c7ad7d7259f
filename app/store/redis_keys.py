from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RK:
    """
    Redis Key builder for room-scoped keys.
    A room aggregate is the header, its players and its rounds.
    """
    room_id: str

    # ---- Core ----
    def room(self) -> str:
        return f"room:{self.room_id}"  # STRING room JSON

    def players(self) -> str:
        return f"room:{self.room_id}:players"  # HASH player_id -> JSON

    def rounds(self) -> str:
        return f"room:{self.room_id}:rounds"  # HASH round_number -> JSON

    def lock(self) -> str:
        return f"room:{self.room_id}:lock"  # redis lock, serializes writes per room

    # ---- Convenience: all keys to TTL-refresh ----
    def all_room_keys(self) -> list[str]:
        return [self.room(), self.players(), self.rounds()]


def code_key(code: str) -> str:
    return f"code:{code}"  # STRING room_id, exists while the room is not finished


def word_pairs_key() -> str:
    return "words:pairs"  # LIST WordPair JSON

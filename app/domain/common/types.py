from __future__ import annotations

from typing import Literal, NewType

PlayerId = NewType("PlayerId", str)

RoomStatus = Literal["lobby", "playing", "finished"]
RoundStatus = Literal["describing", "voting", "completed"]

Role = Literal["civilian", "undercover"]
Winner = Literal["civilian", "undercover"]

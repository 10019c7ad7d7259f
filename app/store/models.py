from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from app.domain.common.types import RoomStatus, RoundStatus, Role, Winner


class GameSettings(BaseModel):
    min_players: int = Field(default=4, gt=0)
    max_players: int = Field(default=12, gt=0)
    undercover_count: int = Field(default=1, gt=0)
    description_seconds: int = Field(default=60, gt=0)   # advisory, client countdown only
    voting_seconds: int = Field(default=30, gt=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "GameSettings":
        if self.min_players > self.max_players:
            raise ValueError("min_players must not exceed max_players")
        if self.undercover_count >= self.min_players:
            raise ValueError("undercover_count must be lower than min_players")
        return self


class RoomStore(BaseModel):
    id: str
    code: str
    host_session_id: str
    status: RoomStatus = "lobby"
    current_round: int = 0
    civilian_word: Optional[str] = None
    undercover_word: Optional[str] = None
    settings: GameSettings = Field(default_factory=GameSettings)
    winner: Optional[Winner] = None
    created_at: int
    last_activity: int


class PlayerStore(BaseModel):
    id: str
    room_id: str
    name: str
    session_id: str
    role: Optional[Role] = None          # None while in lobby
    is_alive: bool = True
    is_host: bool = False
    joined_at: int


class Description(BaseModel):
    player_id: str
    text: str


class Vote(BaseModel):
    voter_id: str
    target_id: str


class RoundStore(BaseModel):
    room_id: str
    round_number: int
    status: RoundStatus = "describing"
    descriptions: List[Description] = Field(default_factory=list)
    votes: List[Vote] = Field(default_factory=list)
    eliminated_player_id: Optional[str] = None
    is_tie: bool = False


class WordPair(BaseModel):
    civilian_word: str
    undercover_word: str
    category: str = ""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from app.domain.common.end_game import evaluate_winner
from app.domain.common.errors import (
    CodeSpaceExhausted,
    DuplicateSubmission,
    InsufficientPlayers,
    InvalidInput,
    InvalidState,
    NoWordsAvailable,
    NotFound,
    RoomFull,
    Unauthorized,
)
from app.domain.common.fsm import can_transition_round, can_transition_to
from app.domain.common.types import RoomStatus, RoundStatus, Winner
from app.domain.common.validation import (
    alive_ids,
    clean_description,
    clean_name,
    clean_session,
    find_by_session,
    is_host,
)
from app.domain.helpers import (
    all_alive_described,
    all_alive_voted,
    assign_roles,
    effective_undercover_count,
    generate_room_code,
    normalize_room_code,
    tally_votes,
)
from app.domain.words import WordBank
from app.store.models import Description, GameSettings, PlayerStore, RoomStore, RoundStore, Vote
from app.util.timeutil import now_ts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoomRef:
    room_id: str
    code: str


@dataclass(frozen=True)
class JoinResult:
    room_id: str
    player_id: str
    rejoined: bool = False


@dataclass(frozen=True)
class StartResult:
    success: bool = True


@dataclass(frozen=True)
class VoteResult:
    all_voted: bool


@dataclass(frozen=True)
class ResolveOutcome:
    round_number: int
    eliminated_id: Optional[str]
    is_tie: bool
    winner: Optional[Winner]
    next_round: Optional[int]


def _new_id() -> str:
    return uuid.uuid4().hex


class RoomService:
    """
    Room state machine.

    Every command loads the room aggregate under repo.room_lock(room_id),
    validates against it and writes the whole change set with one repo.commit.
    A raised GameError therefore never leaves partial state behind.
    """

    def __init__(
        self,
        repo: Any,
        words: WordBank,
        *,
        default_settings: Optional[GameSettings] = None,
        code_max_attempts: int = 20,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.repo = repo
        self.words = words
        self.default_settings = default_settings or GameSettings()
        self.code_max_attempts = code_max_attempts
        self.rng = rng

    # -------------------------
    # Internal helpers
    # -------------------------

    async def _load_room(self, room_id: str) -> RoomStore:
        room = await self.repo.get_room(room_id)
        if room is None:
            raise NotFound(f"Room {room_id} not found", code="ROOM_NOT_FOUND")
        return room

    async def _load_player(self, room_id: str, player_id: str) -> PlayerStore:
        player = await self.repo.get_player(room_id, player_id)
        if player is None:
            raise NotFound(f"Player {player_id} not found", code="PLAYER_NOT_FOUND")
        return player

    @staticmethod
    def _move_room(room: RoomStore, target: RoomStatus) -> None:
        if not can_transition_to(room.status, target):
            raise InvalidState(f"Cannot move room from {room.status} to {target}")
        room.status = target

    @staticmethod
    def _move_round(rd: RoundStore, target: RoundStatus) -> None:
        if not can_transition_round(rd.status, target):
            raise InvalidState(f"Cannot move round {rd.round_number} from {rd.status} to {target}")
        rd.status = target

    async def _claim_unique_code(self, room_id: str) -> str:
        for attempt in range(self.code_max_attempts):
            code = generate_room_code(self.rng)
            if await self.repo.claim_code(code, room_id):
                return code
            logger.debug("[%s] room code collision on attempt %d", room_id, attempt + 1)
        logger.error("[%s] no free room code after %d attempts", room_id, self.code_max_attempts)
        raise CodeSpaceExhausted(f"No free room code after {self.code_max_attempts} attempts")

    # -------------------------
    # Lobby
    # -------------------------

    async def create_room(self, host_name: str, host_session_id: str) -> RoomRef:
        name = clean_name(host_name)
        session_id = clean_session(host_session_id)

        room_id = _new_id()
        code = await self._claim_unique_code(room_id)
        ts = now_ts()

        room = RoomStore(
            id=room_id,
            code=code,
            host_session_id=session_id,
            status="lobby",
            current_round=0,
            settings=self.default_settings.model_copy(),
            created_at=ts,
            last_activity=ts,
        )
        host = PlayerStore(
            id=_new_id(),
            room_id=room_id,
            name=name,
            session_id=session_id,
            role=None,
            is_alive=True,
            is_host=True,
            joined_at=ts,
        )
        try:
            async with self.repo.room_lock(room_id):
                await self.repo.commit(room_id, room=room, players=[host])
        except Exception:
            await self.repo.release_code(code)
            raise

        logger.info("[%s] room created code=%s host=%s", room_id, code, host.id)
        return RoomRef(room_id=room_id, code=code)

    async def join_room(self, code: str, player_name: str, session_id: str) -> JoinResult:
        code = normalize_room_code(code)
        name = clean_name(player_name)
        session_id = clean_session(session_id)

        room_id = await self.repo.find_room_id_by_code(code)
        if not room_id:
            raise NotFound(f"Room {code} not found", code="ROOM_NOT_FOUND")

        async with self.repo.room_lock(room_id):
            room = await self._load_room(room_id)
            if room.status != "lobby":
                raise InvalidState("Game has already started")

            players = await self.repo.list_players(room_id)
            existing = find_by_session(players, session_id)
            if existing is not None:
                return JoinResult(room_id=room_id, player_id=existing.id, rejoined=True)

            if len(players) >= room.settings.max_players:
                raise RoomFull("Room is full")

            ts = now_ts()
            player = PlayerStore(
                id=_new_id(),
                room_id=room_id,
                name=name,
                session_id=session_id,
                role=None,
                is_alive=True,
                is_host=False,
                joined_at=ts,
            )
            room.last_activity = ts
            await self.repo.commit(room_id, room=room, players=[player])

        logger.info("[%s] player %s joined (%d/%d)", room_id, player.id, len(players) + 1, room.settings.max_players)
        return JoinResult(room_id=room_id, player_id=player.id)

    async def update_settings(self, room_id: str, session_id: str, **changes: Any) -> GameSettings:
        async with self.repo.room_lock(room_id):
            room = await self._load_room(room_id)
            if not is_host(session_id, room):
                raise Unauthorized("Only the host can update settings")
            if room.status != "lobby":
                raise InvalidState("Cannot change settings after game has started")

            merged: Dict[str, Any] = room.settings.model_dump()
            merged.update({k: v for k, v in changes.items() if v is not None})
            try:
                settings = GameSettings.model_validate(merged)
            except ValidationError as e:
                raise InvalidInput(f"Invalid settings: {e.errors()[0].get('msg', 'bad value')}") from e

            players = await self.repo.list_players(room_id)
            if len(players) > settings.max_players:
                raise InvalidInput(f"Room already has {len(players)} players")

            room.settings = settings
            room.last_activity = now_ts()
            await self.repo.commit(room_id, room=room)

        logger.info("[%s] settings updated %s", room_id, settings.model_dump())
        return settings

    async def start_game(self, room_id: str, session_id: str) -> StartResult:
        async with self.repo.room_lock(room_id):
            room = await self._load_room(room_id)
            if not is_host(session_id, room):
                raise Unauthorized("Only the host can start the game")
            if room.status != "lobby":
                raise InvalidState("Game has already started")

            players = await self.repo.list_players(room_id)
            if len(players) < room.settings.min_players:
                raise InsufficientPlayers(f"Need at least {room.settings.min_players} players to start")

            pair = await self.words.random_pair()
            if pair is None:
                raise NoWordsAvailable("No word pairs available. Seed the word bank first.")

            roles = assign_roles([p.id for p in players], room.settings.undercover_count, self.rng)
            if effective_undercover_count(len(players), room.settings.undercover_count) == 0:
                logger.warning("[%s] starting with no undercover players (%d players)", room_id, len(players))
            for p in players:
                p.role = roles[p.id]
                p.is_alive = True

            self._move_room(room, "playing")
            room.civilian_word = pair.civilian_word
            room.undercover_word = pair.undercover_word
            room.current_round = 1
            room.last_activity = now_ts()
            first = RoundStore(room_id=room_id, round_number=1, status="describing")

            await self.repo.commit(room_id, room=room, players=players, rounds=[first])

        logger.info("[%s] game started with %d players", room_id, len(players))
        return StartResult(success=True)

    # -------------------------
    # Rounds
    # -------------------------

    async def submit_description(self, room_id: str, round_number: int, player_id: str, text: str) -> None:
        text = clean_description(text)

        async with self.repo.room_lock(room_id):
            room = await self._load_room(room_id)
            rd = await self.repo.get_round(room_id, round_number)
            if room.status != "playing" or rd is None or rd.status != "describing":
                raise InvalidState(f"Round {round_number} is not in describing phase")

            player = await self._load_player(room_id, player_id)
            if not player.is_alive:
                raise InvalidState("Eliminated players cannot describe")
            if any(d.player_id == player_id for d in rd.descriptions):
                raise DuplicateSubmission("Player already submitted a description")

            rd.descriptions.append(Description(player_id=player_id, text=text))

            players = await self.repo.list_players(room_id)
            if all_alive_described(rd.descriptions, alive_ids(players)):
                self._move_round(rd, "voting")
                logger.info("[%s] round %d moved to voting", room_id, round_number)

            room.last_activity = now_ts()
            await self.repo.commit(room_id, room=room, rounds=[rd])

    async def submit_vote(self, room_id: str, round_number: int, voter_id: str, target_id: str) -> VoteResult:
        async with self.repo.room_lock(room_id):
            room = await self._load_room(room_id)
            rd = await self.repo.get_round(room_id, round_number)
            if room.status != "playing" or rd is None or rd.status != "voting":
                raise InvalidState("Voting is not active")

            voter = await self._load_player(room_id, voter_id)
            if not voter.is_alive:
                raise InvalidState("Eliminated players cannot vote")
            target = await self._load_player(room_id, target_id)
            if not target.is_alive:
                raise InvalidState("Cannot vote for an eliminated player")
            if any(v.voter_id == voter_id for v in rd.votes):
                raise DuplicateSubmission("Player already voted")

            rd.votes.append(Vote(voter_id=voter_id, target_id=target_id))

            players = await self.repo.list_players(room_id)
            done = all_alive_voted(rd.votes, alive_ids(players))

            room.last_activity = now_ts()
            await self.repo.commit(room_id, room=room, rounds=[rd])

        return VoteResult(all_voted=done)

    async def resolve_round(self, room_id: str, round_number: int) -> ResolveOutcome:
        async with self.repo.room_lock(room_id):
            room = await self._load_room(room_id)
            rd = await self.repo.get_round(room_id, round_number)
            if rd is None:
                raise NotFound(f"Round {round_number} not found", code="ROUND_NOT_FOUND")
            if rd.status == "completed":
                raise InvalidState(f"Round {round_number} is already resolved")

            result = tally_votes(rd.votes)
            players = await self.repo.list_players(room_id)
            changed: List[PlayerStore] = []

            if result.eliminated_id:
                for p in players:
                    if p.id == result.eliminated_id:
                        p.is_alive = False
                        changed.append(p)
                rd.eliminated_player_id = result.eliminated_id
            rd.is_tie = result.is_tie
            self._move_round(rd, "completed")

            winner = evaluate_winner(players)
            rounds = [rd]
            release_code: Optional[str] = None
            next_round: Optional[int] = None
            if winner is not None:
                self._move_room(room, "finished")
                room.winner = winner
                release_code = room.code
            else:
                room.current_round = round_number + 1
                next_round = room.current_round
                rounds.append(RoundStore(room_id=room_id, round_number=next_round, status="describing"))

            room.last_activity = now_ts()
            await self.repo.commit(room_id, room=room, players=changed, rounds=rounds, release_code=release_code)

        if winner is not None:
            logger.info("[%s] game over after round %d, winner=%s", room_id, round_number, winner)
        else:
            logger.info(
                "[%s] round %d resolved eliminated=%s tie=%s",
                room_id, round_number, result.eliminated_id, result.is_tie,
            )
        return ResolveOutcome(
            round_number=round_number,
            eliminated_id=result.eliminated_id,
            is_tie=result.is_tie,
            winner=winner,
            next_round=next_round,
        )

    # -------------------------
    # Read model (no side effects)
    # -------------------------

    async def get_room(self, room_id: str) -> Optional[RoomStore]:
        return await self.repo.get_room(room_id)

    async def get_room_by_code(self, code: str) -> Optional[RoomStore]:
        room_id = await self.repo.find_room_id_by_code(normalize_room_code(code))
        if not room_id:
            return None
        return await self.repo.get_room(room_id)

    async def get_players(self, room_id: str) -> List[PlayerStore]:
        return await self.repo.list_players(room_id)

    async def get_player_by_session(self, room_id: str, session_id: str) -> Optional[PlayerStore]:
        if not session_id:
            return None
        return find_by_session(await self.repo.list_players(room_id), session_id)

    async def get_current_round(self, room_id: str) -> Optional[RoundStore]:
        room = await self.repo.get_room(room_id)
        if room is None or room.current_round == 0:
            return None
        return await self.repo.get_round(room_id, room.current_round)

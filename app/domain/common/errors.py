from __future__ import annotations


class GameError(Exception):
    """
    Base for every recoverable game error.
    `code` is the stable string sent to clients in OutError.
    """
    code = "GAME_ERROR"

    def __init__(self, message: str = "", *, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class NotFound(GameError):
    code = "NOT_FOUND"


class Unauthorized(GameError):
    code = "NOT_HOST"


class InvalidState(GameError):
    code = "BAD_STATE"


class InvalidInput(GameError):
    code = "INVALID_INPUT"


class InsufficientPlayers(GameError):
    code = "NOT_ENOUGH_PLAYERS"


class RoomFull(GameError):
    code = "ROOM_FULL"


class DuplicateSubmission(GameError):
    code = "DUPLICATE_SUBMISSION"


class NoWordsAvailable(GameError):
    code = "NO_WORDS"


class CodeSpaceExhausted(GameError):
    code = "CODE_SPACE_EXHAUSTED"

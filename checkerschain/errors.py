"""Registered error kinds of the checkers module and the error type that carries them."""

from __future__ import annotations

from dataclasses import dataclass

CODESPACE = "checkers"


@dataclass(frozen=True)
class ErrorKind:
    """A registered error: codespace, numeric code and description."""

    codespace: str
    code: int
    description: str

    def error(self, *args) -> str:
        """Return the description, filling in its placeholders with args."""
        if args:
            return self.description % args
        return self.description

    def wrap(self, message: str) -> CheckersError:
        """Return an error of this kind whose text is prefixed with message."""
        return CheckersError(f"{message}: {self.description}", kind=self)

    def __str__(self) -> str:
        return self.description


class CheckersError(Exception):
    """An error raised by the checkers module, optionally of a registered kind."""

    def __init__(self, message: str, kind: ErrorKind | None = None, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def is_kind(self, kind: ErrorKind) -> bool:
        """Tell whether this error, or one it wraps, is of the given kind."""
        if self.kind == kind:
            return True
        return isinstance(self.cause, CheckersError) and self.cause.is_kind(kind)

    def __str__(self) -> str:
        return self.message


def wrap(cause: BaseException, description: str) -> CheckersError:
    """Wrap an error with a leading description."""
    kind = cause.kind if isinstance(cause, CheckersError) else None
    return CheckersError(f"{description}: {cause}", kind=kind, cause=cause)


INVALID_ADDRESS = ErrorKind("sdk", 7, "invalid address")

INVALID_SIGNER = ErrorKind(CODESPACE, 1100, "expected gov account as only signer for proposal message")
INVALID_BLACK = ErrorKind(CODESPACE, 1101, "black address is invalid: %s")
INVALID_RED = ErrorKind(CODESPACE, 1102, "red address is invalid: %s")
GAME_NOT_PARSEABLE = ErrorKind(CODESPACE, 1103, "game cannot be parsed")
INVALID_GAME_INDEX = ErrorKind(CODESPACE, 1104, "game index is invalid")
INVALID_POSITION_INDEX = ErrorKind(CODESPACE, 1105, "position index is invalid")
MOVE_ABSENT = ErrorKind(CODESPACE, 1106, "there is no move")
GAME_NOT_FOUND = ErrorKind(CODESPACE, 1107, "game by id not found")
CREATOR_NOT_PLAYER = ErrorKind(CODESPACE, 1108, "message creator is not a player")
NOT_PLAYER_TURN = ErrorKind(CODESPACE, 1109, "player tried to play out of turn")
WRONG_MOVE = ErrorKind(CODESPACE, 1110, "wrong move")
GAME_FINISHED = ErrorKind(CODESPACE, 1111, "game is already finished")
INVALID_DEADLINE = ErrorKind(CODESPACE, 1112, "deadline cannot be parsed: %s")
CANNOT_FIND_WINNER_BY_COLOR = ErrorKind(CODESPACE, 1113, "cannot find winner by color: %s")
BLACK_CANNOT_PAY = ErrorKind(CODESPACE, 1114, "black cannot pay the wager")
RED_CANNOT_PAY = ErrorKind(CODESPACE, 1115, "red cannot pay the wager")
NOTHING_TO_PAY = ErrorKind(CODESPACE, 1116, "there is nothing to pay, should not have been called")
CANNOT_REFUND_WAGER = ErrorKind(CODESPACE, 1117, "cannot refund wager to: %s")
CANNOT_PAY_WINNINGS = ErrorKind(CODESPACE, 1118, "cannot pay winnings to winner: %s")
NOT_IN_REFUND_STATE = ErrorKind(CODESPACE, 1119, "game is not in a state to refund, move count: %d")
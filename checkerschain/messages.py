"""Transaction messages of the checkers module and their stateless checks."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from checkerschain import errors, rules
from checkerschain.types import DEFAULT_INDEX, AddressError, Params, acc_address_from_bech32

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT64 = 1 << 64


def _check_address(value: str, role: str) -> None:
    try:
        acc_address_from_bech32(value)
    except AddressError as err:
        raise errors.INVALID_ADDRESS.wrap(f"invalid {role} address ({err})") from err


@dataclass
class MsgCreateGame:
    creator: str = ""
    black: str = ""
    red: str = ""
    wager: int = 0

    def validate_basic(self) -> None:
        _check_address(self.creator, "creator")
        _check_address(self.black, "black")
        _check_address(self.red, "red")


@dataclass
class MsgCreateGameResponse:
    game_index: str = ""


@dataclass
class MsgPlayMove:
    creator: str = ""
    game_index: str = ""
    from_x: int = 0
    from_y: int = 0
    to_x: int = 0
    to_y: int = 0

    def validate_basic(self) -> None:
        _check_address(self.creator, "creator")
        index_text = self.game_index
        if not _INT_RE.fullmatch(index_text) or not -(1 << 63) <= int(index_text) < (1 << 63):
            reason = "invalid syntax" if not _INT_RE.fullmatch(index_text) else "value out of range"
            raise errors.INVALID_GAME_INDEX.wrap(
                f'not parseable (strconv.ParseInt: parsing "{index_text}": {reason})'
            )
        game_index = int(index_text)
        if game_index % _UINT64 < DEFAULT_INDEX:
            raise errors.INVALID_GAME_INDEX.wrap(f"number too low ({game_index})")
        for value, name in (
            (self.from_x, "fromX"), (self.to_x, "toX"),
            (self.from_y, "fromY"), (self.to_y, "toY"),
        ):
            if not 0 <= value < rules.BOARD_DIM:
                raise errors.INVALID_POSITION_INDEX.wrap(f"{name} out of range ({value})")
        if self.from_x == self.to_x and self.from_y == self.to_y:
            raise errors.MOVE_ABSENT.wrap(f"x ({self.from_x}) and y ({self.from_y})")


@dataclass
class MsgPlayMoveResponse:
    captured_x: int = 0
    captured_y: int = 0
    winner: str = ""


@dataclass
class MsgUpdateParams:
    authority: str = ""
    params: Params = field(default_factory=Params)

    def validate_basic(self) -> None:
        try:
            acc_address_from_bech32(self.authority)
        except AddressError as err:
            raise errors.wrap(err, "invalid authority address") from err
        self.params.validate()


@dataclass
class MsgUpdateParamsResponse:
    pass


MESSAGE_TYPES = (MsgCreateGame, MsgPlayMove, MsgUpdateParams)
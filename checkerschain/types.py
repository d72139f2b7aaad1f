"""Stored game state, genesis state, keys and the helpers that read them."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from checkerschain import errors, rules

MODULE_NAME = "checkers"
STORE_KEY = MODULE_NAME
MEM_STORE_KEY = "mem_checkers"
PARAMS_KEY = b"p_checkers"
SYSTEM_INFO_KEY = "SystemInfo/value/"
STORED_GAME_KEY_PREFIX = "StoredGame/value/"

GAME_CREATED_EVENT_TYPE = "new-game-created"
GAME_CREATED_EVENT_CREATOR = "creator"
GAME_CREATED_EVENT_GAME_INDEX = "game-index"
GAME_CREATED_EVENT_BLACK = "black"
GAME_CREATED_EVENT_RED = "red"
GAME_CREATED_EVENT_WAGER = "wager"

MOVE_PLAYED_EVENT_TYPE = "move-played"
MOVE_PLAYED_EVENT_CREATOR = "creator"
MOVE_PLAYED_EVENT_GAME_INDEX = "game-index"
MOVE_PLAYED_EVENT_CAPTURED_X = "captured-x"
MOVE_PLAYED_EVENT_CAPTURED_Y = "captured-y"
MOVE_PLAYED_EVENT_WINNER = "winner"
MOVE_PLAYED_EVENT_BOARD = "board"

GAME_FORFEITED_EVENT_TYPE = "game-forfeited"
GAME_FORFEITED_EVENT_GAME_INDEX = "game-index"
GAME_FORFEITED_EVENT_WINNER = "winner"
GAME_FORFEITED_EVENT_BOARD = "board"

MAX_TURN_DURATION = timedelta(minutes=5)
DEADLINE_LAYOUT = "2006-01-02 15:04:05.999999999 +0000 UTC"
NO_FIFO_INDEX = "-1"
DEFAULT_INDEX = 1

CREATE_GAME_GAS = 15000
PLAY_MOVE_GAS = 1000

BECH32_PREFIX = "cosmos"
DEFAULT_BOND_DENOM = "stake"

_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_GENERATORS = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)


class AddressError(ValueError):
    """Raised when a bech32 account address cannot be decoded."""


def _polymod(values) -> int:
    chk = 1
    for v in values:
        top = chk >> 25
        chk = ((chk & 0x1FFFFFF) << 5) ^ v
        for i, gen in enumerate(_GENERATORS):
            if (top >> i) & 1:
                chk ^= gen
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _checksum(hrp: str, data: list[int]) -> str:
    mod = _polymod(_hrp_expand(hrp) + data + [0] * 6) ^ 1
    return "".join(_CHARSET[(mod >> 5 * (5 - i)) & 31] for i in range(6))


def _bech32_decode(s: str) -> tuple[str, list[int]]:
    if len(s) < 8 or len(s) > 1023:
        raise AddressError(f"invalid bech32 string length {len(s)}")
    for c in s:
        if ord(c) < 33 or ord(c) > 126:
            raise AddressError(f"invalid character in string: '{c}'")
    if s.lower() != s and s.upper() != s:
        raise AddressError("string not all lowercase or all uppercase")
    s = s.lower()
    one = s.rfind("1")
    if one < 1 or one + 7 > len(s):
        raise AddressError(f"invalid separator index {one}")
    hrp = s[:one]
    data = []
    for c in s[one + 1:]:
        idx = _CHARSET.find(c)
        if idx < 0:
            raise AddressError(f"invalid character not part of charset: {ord(c)}")
        data.append(idx)
    if _polymod(_hrp_expand(hrp) + data) != 1:
        expected = _checksum(hrp, data[:-6])
        raise AddressError(f"invalid checksum (expected {expected} got {s[-6:]})")
    return hrp, data[:-6]


def _convert_bits(data: list[int], from_bits: int, to_bits: int) -> bytes:
    acc = 0
    bits = 0
    out = bytearray()
    maxv = (1 << to_bits) - 1
    for value in data:
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & maxv)
    if bits >= from_bits:
        raise AddressError("illegal zero padding")
    if (acc << (to_bits - bits)) & maxv:
        raise AddressError("non-zero padding")
    return bytes(out)


def acc_address_from_bech32(address: str) -> bytes:
    """Decode a bech32 account address with the chain's prefix into its bytes."""
    if not address.strip():
        raise AddressError("empty address string is not allowed")
    try:
        hrp, data = _bech32_decode(address)
        payload = _convert_bits(data, 5, 8)
    except AddressError as err:
        raise AddressError(f"decoding bech32 failed: {err}") from err
    if hrp != BECH32_PREFIX:
        raise AddressError(f"invalid Bech32 prefix; expected {BECH32_PREFIX}, got {hrp}")
    if not payload:
        raise AddressError("addresses cannot be empty")
    if len(payload) > 255:
        raise AddressError(f"address max length is 255, got {len(payload)}")
    return payload


def key_prefix(p: str) -> bytes:
    return p.encode("utf-8")


def stored_game_key(index: str) -> bytes:
    """Return the store key of a stored game from its index."""
    return index.encode("utf-8") + b"/"


class _TimeParseError(ValueError):
    pass


def _quote(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


_DEADLINE_CHUNKS = (
    ("", "2006"), ("-", "01"), ("-", "02"), (" ", "15"),
    (":", "04"), (":", "05"), ("", ".999999999"), (" +0000 UTC", None),
)


def _parse_deadline(value: str) -> datetime:
    def fail(rest: str, elem: str) -> _TimeParseError:
        return _TimeParseError(
            f"parsing time {_quote(value)} as {_quote(DEADLINE_LAYOUT)}: "
            f"cannot parse {_quote(rest)} as {_quote(elem)}"
        )

    rest = value
    nums: list[int] = []
    nanos = 0
    for prefix, std in _DEADLINE_CHUNKS:
        if not rest.startswith(prefix):
            raise fail(rest, prefix)
        rest = rest[len(prefix):]
        if std is None:
            continue
        if std == ".999999999":
            if len(rest) >= 2 and rest[0] == "." and rest[1].isdigit():
                end = 1
                while end < len(rest) and rest[end].isdigit():
                    end += 1
                nanos = int(rest[1:end][:9].ljust(9, "0"))
                rest = rest[end:]
            continue
        width = len(std)
        chunk = rest[:width]
        if len(chunk) != width or not chunk.isascii() or not chunk.isdigit():
            raise fail(rest, std)
        nums.append(int(chunk))
        rest = rest[width:]
    if rest:
        raise _TimeParseError(
            f"parsing time {_quote(value)}: extra text: {_quote(rest)}"
        )
    year, month, day, hour, minute, second = nums
    for name, ok in (
        ("month", 1 <= month <= 12),
        ("hour", hour < 24),
        ("minute", minute < 60),
        ("second", second < 60),
    ):
        if not ok:
            raise _TimeParseError(f"parsing time {_quote(value)}: {name} out of range")
    try:
        return datetime(year, month, day, hour, minute, second, nanos // 1000, tzinfo=timezone.utc)
    except ValueError as err:
        raise _TimeParseError(f"parsing time {_quote(value)}: day out of range") from err


def format_deadline(deadline: datetime) -> str:
    """Format a time in UTC with the deadline layout."""
    if deadline.tzinfo is not None:
        deadline = deadline.astimezone(timezone.utc)
    frac = f"{deadline.microsecond * 1000:09d}".rstrip("0")
    return (
        f"{deadline.year:04d}-{deadline.month:02d}-{deadline.day:02d} "
        f"{deadline.hour:02d}:{deadline.minute:02d}:{deadline.second:02d}"
        f"{'.' + frac if frac else ''} +0000 UTC"
    )


def next_deadline(block_time: datetime) -> datetime:
    return block_time + MAX_TURN_DURATION


@dataclass(frozen=True)
class Coin:
    """An amount of one denomination."""

    denom: str
    amount: int

    def __add__(self, other: Coin) -> Coin:
        if not isinstance(other, Coin):
            return NotImplemented
        if other.denom != self.denom:
            raise ValueError(f"invalid coin denominations; {self.denom}, {other.denom}")
        return Coin(self.denom, self.amount + other.amount)


@dataclass(frozen=True)
class Params:
    """Module parameters; there are none yet."""

    def validate(self) -> None:
        return None


def default_params() -> Params:
    return Params()


@dataclass
class SystemInfo:
    next_id: int = 0
    fifo_head_index: str = ""
    fifo_tail_index: str = ""


@dataclass
class StoredGame:
    index: str = ""
    board: str = ""
    turn: str = ""
    black: str = ""
    red: str = ""
    winner: str = ""
    deadline: str = ""
    move_count: int = 0
    before_index: str = ""
    after_index: str = ""
    wager: int = 0

    def _address(self, value: str, kind: errors.ErrorKind) -> bytes:
        try:
            return acc_address_from_bech32(value)
        except AddressError as err:
            raise errors.CheckersError(f"{kind.error(value)}: {err}", kind=kind, cause=err) from err

    def black_address(self) -> bytes:
        return self._address(self.black, errors.INVALID_BLACK)

    def red_address(self) -> bytes:
        return self._address(self.red, errors.INVALID_RED)

    def parse_game(self) -> rules.Game:
        """Rebuild the rules game from the board string and turn."""
        try:
            game = rules.parse(self.board)
        except rules.GameRuleError as err:
            raise errors.CheckersError(
                f"{errors.GAME_NOT_PARSEABLE.error()}: {err}",
                kind=errors.GAME_NOT_PARSEABLE, cause=err,
            ) from err
        piece = rules.STRING_PIECES.get(self.turn)
        if piece is None:
            raise errors.CheckersError(
                f"{errors.GAME_NOT_PARSEABLE.error()}: turn: {self.turn}",
                kind=errors.GAME_NOT_PARSEABLE,
            )
        game.turn = piece.player
        return game

    def validate(self) -> None:
        self.black_address()
        self.red_address()
        self.parse_game()
        self.deadline_as_time()

    def player_address(self, color: str) -> bytes | None:
        """Return the address playing the given colour string, or None."""
        black = self.black_address()
        red = self.red_address()
        return {
            rules.PIECE_STRINGS[rules.BLACK_PLAYER]: black,
            rules.PIECE_STRINGS[rules.RED_PLAYER]: red,
        }.get(color)

    def winner_address(self) -> bytes | None:
        return self.player_address(self.winner)

    def deadline_as_time(self) -> datetime:
        try:
            return _parse_deadline(self.deadline)
        except _TimeParseError as err:
            raise errors.CheckersError(
                f"{errors.INVALID_DEADLINE.error(self.deadline)}: {err}",
                kind=errors.INVALID_DEADLINE, cause=err,
            ) from err

    def wager_coin(self) -> Coin:
        return Coin(DEFAULT_BOND_DENOM, self.wager)


@dataclass
class GenesisState:
    params: Params = field(default_factory=Params)
    system_info: SystemInfo = field(default_factory=SystemInfo)
    stored_game_list: list[StoredGame] = field(default_factory=list)

    def validate(self) -> None:
        seen: set[bytes] = set()
        for game in self.stored_game_list:
            key = stored_game_key(game.index)
            if key in seen:
                raise errors.CheckersError("duplicated index for storedGame")
            seen.add(key)
        self.params.validate()


def default_genesis() -> GenesisState:
    return GenesisState(
        params=default_params(),
        system_info=SystemInfo(
            next_id=DEFAULT_INDEX,
            fifo_head_index=NO_FIFO_INDEX,
            fifo_tail_index=NO_FIFO_INDEX,
        ),
        stored_game_list=[],
    )
"""State access, FIFO bookkeeping and wager handling of the checkers module."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

from checkerschain import errors
from checkerschain.bank import BankKeeper
from checkerschain.types import (
    MODULE_NAME,
    NO_FIFO_INDEX,
    PARAMS_KEY,
    STORED_GAME_KEY_PREFIX,
    SYSTEM_INFO_KEY,
    AddressError,
    Coin,
    Params,
    StoredGame,
    SystemInfo,
    acc_address_from_bech32,
    key_prefix,
    stored_game_key,
)

_READ_FLAT = 1000
_READ_PER_BYTE = 3
_WRITE_FLAT = 2000
_WRITE_PER_BYTE = 30
_DELETE_COST = 1000
_ITER_NEXT_FLAT = 30

_GAME_PREFIX = key_prefix(STORED_GAME_KEY_PREFIX)
_SYSTEM_INFO_STORE_KEY = key_prefix(SYSTEM_INFO_KEY) + b"\x00"


@dataclass(frozen=True)
class Event:
    """A typed event with ordered key/value attributes."""

    type: str
    attributes: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "attributes", tuple((str(k), str(v)) for k, v in self.attributes)
        )


@dataclass
class GasMeter:
    """Counts gas consumed while handling a block or transaction."""

    consumed: int = 0

    def consume_gas(self, amount: int, descriptor: str) -> None:
        if amount < 0:
            raise ValueError(f"negative gas for {descriptor}: {amount}")
        self.consumed += amount


@dataclass
class Context:
    """Block time, gas meter, emitted events and the key/value store."""

    block_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    gas_meter: GasMeter = field(default_factory=GasMeter)
    events: list[Event] = field(default_factory=list)
    store: dict[bytes, bytes] = field(default_factory=dict)

    def emit_event(self, event: Event) -> None:
        self.events.append(event)


def _encode(value) -> bytes:
    return json.dumps(asdict(value), separators=(",", ":")).encode("utf-8")


def _coins(coin: Coin) -> list[Coin]:
    return [coin] if coin.amount else []


class Keeper:
    """Reads and writes the module's state and moves wagers through the bank."""

    def __init__(self, bank: BankKeeper, authority: str) -> None:
        try:
            acc_address_from_bech32(authority)
        except AddressError as err:
            raise ValueError(f"invalid authority address: {authority}") from err
        self.bank = bank
        self.authority = authority
        self.logger = logging.getLogger(f"x/{MODULE_NAME}")

    # Gas-metered store access.

    @staticmethod
    def _get(ctx: Context, key: bytes) -> bytes | None:
        meter = ctx.gas_meter
        meter.consume_gas(_READ_FLAT, "ReadFlat")
        meter.consume_gas(_READ_PER_BYTE * len(key), "ReadPerByte")
        value = ctx.store.get(key)
        if value is not None:
            meter.consume_gas(_READ_PER_BYTE * len(value), "ReadPerByte")
        return value

    @staticmethod
    def _set(ctx: Context, key: bytes, value: bytes) -> None:
        meter = ctx.gas_meter
        meter.consume_gas(_WRITE_FLAT, "WriteFlat")
        meter.consume_gas(_WRITE_PER_BYTE * len(key), "WritePerByte")
        meter.consume_gas(_WRITE_PER_BYTE * len(value), "WritePerByte")
        ctx.store[key] = value

    @staticmethod
    def _delete(ctx: Context, key: bytes) -> None:
        ctx.gas_meter.consume_gas(_DELETE_COST, "Delete")
        ctx.store.pop(key, None)

    @staticmethod
    def _iterate(ctx: Context, prefix: bytes) -> Iterator[bytes]:
        for key in sorted(k for k in ctx.store if k.startswith(prefix)):
            value = ctx.store[key]
            ctx.gas_meter.consume_gas(_ITER_NEXT_FLAT, "IterNextFlat")
            ctx.gas_meter.consume_gas(_READ_PER_BYTE * (len(key) + len(value)), "ValuePerByte")
            yield value

    # Stored games.

    def set_stored_game(self, ctx: Context, game: StoredGame) -> None:
        self._set(ctx, _GAME_PREFIX + stored_game_key(game.index), _encode(game))

    def get_stored_game(self, ctx: Context, index: str) -> StoredGame | None:
        raw = self._get(ctx, _GAME_PREFIX + stored_game_key(index))
        return None if raw is None else StoredGame(**json.loads(raw))

    def remove_stored_game(self, ctx: Context, index: str) -> None:
        self._delete(ctx, _GAME_PREFIX + stored_game_key(index))

    def all_stored_games(self, ctx: Context) -> list[StoredGame]:
        return [StoredGame(**json.loads(raw)) for raw in self._iterate(ctx, _GAME_PREFIX)]

    # System info.

    def set_system_info(self, ctx: Context, info: SystemInfo) -> None:
        self._set(ctx, _SYSTEM_INFO_STORE_KEY, _encode(info))

    def get_system_info(self, ctx: Context) -> SystemInfo | None:
        raw = self._get(ctx, _SYSTEM_INFO_STORE_KEY)
        return None if raw is None else SystemInfo(**json.loads(raw))

    def remove_system_info(self, ctx: Context) -> None:
        self._delete(ctx, _SYSTEM_INFO_STORE_KEY)

    # Params.

    def get_params(self, ctx: Context) -> Params:
        raw = self._get(ctx, PARAMS_KEY)
        return Params() if raw is None else Params(**json.loads(raw))

    def set_params(self, ctx: Context, params: Params) -> None:
        self._set(ctx, PARAMS_KEY, _encode(params))

    # FIFO of games ordered by deadline.

    def _must_get(self, ctx: Context, index: str, what: str) -> StoredGame:
        game = self.get_stored_game(ctx, index)
        if game is None:
            raise RuntimeError(what)
        return game

    def remove_from_fifo(self, ctx: Context, game: StoredGame, info: SystemInfo) -> None:
        """Unlink a game from the FIFO, updating its neighbours and head/tail."""
        if game.before_index != NO_FIFO_INDEX:
            before = self._must_get(ctx, game.before_index, "Element before in Fifo was not found")
            before.after_index = game.after_index
            self.set_stored_game(ctx, before)
            if game.after_index == NO_FIFO_INDEX:
                info.fifo_tail_index = before.index
        elif info.fifo_head_index == game.index:
            info.fifo_head_index = game.after_index
        if game.after_index != NO_FIFO_INDEX:
            after = self._must_get(ctx, game.after_index, "Element after in Fifo was not found")
            after.before_index = game.before_index
            self.set_stored_game(ctx, after)
            if game.before_index == NO_FIFO_INDEX:
                info.fifo_head_index = after.index
        elif info.fifo_tail_index == game.index:
            info.fifo_tail_index = game.before_index
        game.before_index = NO_FIFO_INDEX
        game.after_index = NO_FIFO_INDEX

    def send_to_fifo_tail(self, ctx: Context, game: StoredGame, info: SystemInfo) -> None:
        """Move a game to the tail of the FIFO, linking it in if needed."""
        head_empty = info.fifo_head_index == NO_FIFO_INDEX
        tail_empty = info.fifo_tail_index == NO_FIFO_INDEX
        if head_empty and tail_empty:
            game.before_index = NO_FIFO_INDEX
            game.after_index = NO_FIFO_INDEX
            info.fifo_head_index = game.index
            info.fifo_tail_index = game.index
        elif head_empty or tail_empty:
            raise RuntimeError("Fifo should have both head and tail or none")
        elif info.fifo_tail_index == game.index:
            return
        else:
            self.remove_from_fifo(ctx, game, info)
            tail = self._must_get(ctx, info.fifo_tail_index, "Current Fifo tail was not found")
            tail.after_index = game.index
            self.set_stored_game(ctx, tail)
            game.before_index = tail.index
            info.fifo_tail_index = game.index

    # Wagers.

    def collect_wager(self, ctx: Context, game: StoredGame) -> None:
        """Take the wager from black on the first move and from red on the second."""
        if game.move_count == 0:
            payer, kind = game.black_address(), errors.BLACK_CANNOT_PAY
        elif game.move_count == 1:
            payer, kind = game.red_address(), errors.RED_CANNOT_PAY
        else:
            return
        try:
            self.bank.send_coins_from_account_to_module(
                ctx, payer, MODULE_NAME, _coins(game.wager_coin())
            )
        except Exception as err:
            raise errors.CheckersError(f"{kind.error()}: {err}", kind=kind, cause=err) from err

    def must_pay_winnings(self, ctx: Context, game: StoredGame) -> None:
        """Pay the escrowed wagers to the winner."""
        winner = game.winner_address()
        if winner is None:
            kind = errors.CANNOT_FIND_WINNER_BY_COLOR
            raise errors.CheckersError(kind.error(game.winner), kind=kind)
        winnings = game.wager_coin()
        if game.move_count == 0:
            raise errors.CheckersError(errors.NOTHING_TO_PAY.error(), kind=errors.NOTHING_TO_PAY)
        if game.move_count > 1:
            winnings = winnings + winnings
        try:
            self.bank.send_coins_from_module_to_account(ctx, MODULE_NAME, winner, _coins(winnings))
        except Exception as err:
            kind = errors.CANNOT_PAY_WINNINGS
            raise errors.CheckersError(kind.error(str(err)), kind=kind, cause=err) from err

    def must_refund_wager(self, ctx: Context, game: StoredGame) -> None:
        """Give black back the wager of a game that only black has played."""
        if game.move_count == 0:
            return
        if game.move_count != 1:
            kind = errors.NOT_IN_REFUND_STATE
            raise errors.CheckersError(kind.error(game.move_count), kind=kind)
        black = game.black_address()
        try:
            self.bank.send_coins_from_module_to_account(
                ctx, MODULE_NAME, black, _coins(game.wager_coin())
            )
        except Exception as err:
            kind = errors.CANNOT_REFUND_WAGER
            raise errors.CheckersError(kind.error(str(err)), kind=kind, cause=err) from err


def _unused(_: Iterable) -> None:  # pragma: no cover
    return None
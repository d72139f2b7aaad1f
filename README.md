# checkerschain

A self-contained checkers (draughts) engine wrapped in the state machine of a
small ledger module: games are created with a wager, players take turns
through messages, stakes are escrowed in a bank, and games whose move deadline
has passed are forfeited at the end of a block.

## Installation

```
pip install .
pip install ".[test]"   # with the test dependencies
```

The package has no runtime dependencies.

## Parts of the package

- `checkerschain.rules`: the board and the rules. `new_game()` gives the
  starting position with black to play; `Game.move(src, dst)` plays a step or
  a jump and returns the captured `Pos` (or `NO_POS`), raising
  `GameRuleError` for an illegal move; `Game.winner()` reports the side left
  with pieces. `str(game)` and `parse(s)` convert a board to and from the
  `*b*b*b*b|b*b*b*b*|...` row notation (`b`/`r` for men, `B`/`R` for kings,
  `*` for an empty square).
- `checkerschain.types`: `StoredGame`, `SystemInfo`, `Params`, `GenesisState`
  and `Coin`; `acc_address_from_bech32` for checking bech32 account addresses
  (prefix `cosmos`); `format_deadline` and `next_deadline` (five minutes per
  turn); `stored_game_key`; `default_genesis()`.
- `checkerschain.messages`: `MsgCreateGame`, `MsgPlayMove`, `MsgUpdateParams`,
  their response classes, and the stateless `validate_basic` checks.
- `checkerschain.errors`: the module's error kinds (`GAME_NOT_FOUND`,
  `WRONG_MOVE`, `NOT_PLAYER_TURN`, ...) and `CheckersError`, whose `is_kind`
  tells which kind an error is.
- `checkerschain.bank`: the `BankKeeper` and `AccountKeeper` protocols, and
  `InMemoryBank`, which keeps account and module balances in memory
  (`mint`, `balance`, `module_balance`, and the two transfer methods).
- `checkerschain.keeper`: `Keeper(bank, authority)`, which stores games, the
  system info and params, maintains the expiry queue of games
  (`send_to_fifo_tail`, `remove_from_fifo`) and collects, pays and refunds
  wagers. `Context` carries the block time, the emitted `Event`s, a
  `GasMeter` and the key/value store itself; store reads and writes are
  charged to the gas meter.
- `checkerschain.msg_server`: `MsgServer(keeper)` with `create_game`,
  `play_move` and `update_params`.
- `checkerschain.endblock`: `forfeit_expired_games(keeper, ctx)`.
- `checkerschain.queries`: `params`, `stored_game`, `stored_game_all`
  (paginated by offset or key through `PageRequest`) and `system_info`;
  failures raise `QueryError` with a status code.
- `checkerschain.genesis`: `init_genesis(ctx, keeper, gen_state)` and
  `export_genesis(ctx, keeper)`.

## A short session

```python
from checkerschain.rules import new_game, Pos

game = new_game()
captured = game.move(Pos(1, 2), Pos(2, 3))
print(str(game))   # *b*b*b*b|b*b*b*b*|***b*b*b|**b*****|********|r*r*r*r*|*r*r*r*r|r*r*r*r*
print(captured)    # {-1 -1}: nothing was captured
```

Playing through the module: build a `Keeper` over an `InMemoryBank` with a
valid bech32 authority address, load the state with
`init_genesis(ctx, keeper, default_genesis())`, then send `MsgCreateGame` and
`MsgPlayMove` messages through a `MsgServer`. Black's stake is collected on
the first move and red's on the second. Each move refreshes the game's
deadline and moves it to the tail of the expiry queue; when a side wins, the
escrowed stakes are paid to it. Calling `forfeit_expired_games(keeper, ctx)`
with a later `ctx.block_time` ends overdue games: a game played at most once
is deleted (refunding black's stake if it was paid), any other is won by the
player who was not on turn.

## What it does not do

The package is the module's logic only. There is no command-line program, no
network node or server, and no persistent storage: all state lives in the
`Context.store` dictionary and the `InMemoryBank` for as long as the Python
objects do.

## Running the tests

```
pytest
```
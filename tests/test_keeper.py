import dataclasses

import pytest

from checkerschain import errors
from checkerschain.keeper import Context, Event, GasMeter, Keeper
from checkerschain.types import (
    Coin,
    SystemInfo,
    StoredGame,
    acc_address_from_bech32,
    default_params,
)

ALICE = "cosmos1jmjfq0tplp9tmx4v9uemw72y4d2wa5nr3xn9d3"
BOB = "cosmos1xyxs3skf3f4jfqeuv89yyaqvjc6lffavxqhc8g"


class RecordingBank:
    def __init__(self, fail=None):
        self.calls = []
        self.fail = fail

    def spendable_coins(self, ctx, address):
        return []

    def send_coins_from_account_to_module(self, ctx, sender, module, coins):
        self.calls.append(("pay", sender, module, list(coins)))
        if self.fail:
            raise RuntimeError(self.fail)

    def send_coins_from_module_to_account(self, ctx, module, recipient, coins):
        self.calls.append(("refund", module, recipient, list(coins)))
        if self.fail:
            raise RuntimeError(self.fail)


def setup(fail=None):
    bank = RecordingBank(fail)
    return Keeper(bank, ALICE), Context(), bank


def create_n_stored_games(keeper, ctx, n):
    items = [StoredGame(index=str(i)) for i in range(n)]
    for item in items:
        keeper.set_stored_game(ctx, item)
    return items


def test_invalid_authority_rejected():
    with pytest.raises(ValueError, match="invalid authority address: nope"):
        Keeper(RecordingBank(), "nope")


def test_authority_kept():
    keeper, _, _ = setup()
    assert keeper.authority == ALICE


def test_stored_game_get():
    keeper, ctx, _ = setup()
    for item in create_n_stored_games(keeper, ctx, 10):
        assert keeper.get_stored_game(ctx, item.index) == item


def test_stored_game_remove():
    keeper, ctx, _ = setup()
    for item in create_n_stored_games(keeper, ctx, 10):
        keeper.remove_stored_game(ctx, item.index)
        assert keeper.get_stored_game(ctx, item.index) is None


def test_stored_game_get_all():
    keeper, ctx, _ = setup()
    items = create_n_stored_games(keeper, ctx, 10)
    assert keeper.all_stored_games(ctx) == items


def test_stored_game_is_copied():
    keeper, ctx, _ = setup()
    game = StoredGame(index="1", board="x")
    keeper.set_stored_game(ctx, game)
    game.board = "changed"
    assert keeper.get_stored_game(ctx, "1").board == "x"


def test_system_info_get_and_remove():
    keeper, ctx, _ = setup()
    item = SystemInfo()
    keeper.set_system_info(ctx, item)
    assert keeper.get_system_info(ctx) == item
    keeper.remove_system_info(ctx)
    assert keeper.get_system_info(ctx) is None


def test_params_round_trip():
    keeper, ctx, _ = setup()
    params = default_params()
    keeper.set_params(ctx, params)
    assert keeper.get_params(ctx) == params


def test_store_access_consumes_gas():
    keeper, ctx, _ = setup()
    before = ctx.gas_meter.consumed
    keeper.set_stored_game(ctx, StoredGame(index="1"))
    assert ctx.gas_meter.consumed > before


def test_gas_meter_and_events():
    meter = GasMeter()
    meter.consume_gas(15000, "Create game")
    assert meter.consumed == 15000
    with pytest.raises(ValueError):
        meter.consume_gas(-1, "bad")
    ctx = Context()
    ctx.emit_event(Event("game-forfeited", [("game-index", "1")]))
    assert ctx.events == [Event("game-forfeited", (("game-index", "1"),))]


def test_fifo_three_games_and_removal():
    keeper, ctx, _ = setup()
    info = SystemInfo(next_id=1, fifo_head_index="-1", fifo_tail_index="-1")
    games = [StoredGame(index=str(i), before_index="-1", after_index="-1") for i in (1, 2, 3)]
    for game in games:
        keeper.send_to_fifo_tail(ctx, game, info)
        keeper.set_stored_game(ctx, game)
    assert (info.fifo_head_index, info.fifo_tail_index) == ("1", "3")
    middle = keeper.get_stored_game(ctx, "2")
    assert (middle.before_index, middle.after_index) == ("1", "3")

    keeper.remove_from_fifo(ctx, middle, info)
    assert (middle.before_index, middle.after_index) == ("-1", "-1")
    assert keeper.get_stored_game(ctx, "1").after_index == "3"
    assert keeper.get_stored_game(ctx, "3").before_index == "1"

    first = keeper.get_stored_game(ctx, "1")
    keeper.send_to_fifo_tail(ctx, first, info)
    keeper.set_stored_game(ctx, first)
    assert (info.fifo_head_index, info.fifo_tail_index) == ("3", "1")
    assert (first.before_index, first.after_index) == ("3", "-1")


def test_fifo_half_empty_is_an_error():
    keeper, ctx, _ = setup()
    info = SystemInfo(fifo_head_index="1", fifo_tail_index="-1")
    with pytest.raises(RuntimeError, match="both head and tail"):
        keeper.send_to_fifo_tail(ctx, StoredGame(index="2"), info)


def test_collect_wrong_no_black():
    keeper, ctx, _ = setup()
    with pytest.raises(errors.CheckersError) as exc:
        keeper.collect_wager(ctx, StoredGame(move_count=0))
    assert str(exc.value) == "black address is invalid: : empty address string is not allowed"


def test_collect_failed_no_move():
    keeper, ctx, _ = setup(fail="oops")
    with pytest.raises(errors.CheckersError) as exc:
        keeper.collect_wager(ctx, StoredGame(black=ALICE, move_count=0, wager=45))
    assert str(exc.value) == "black cannot pay the wager: oops"


def test_collect_no_move():
    keeper, ctx, bank = setup()
    keeper.collect_wager(ctx, StoredGame(black=ALICE, move_count=0, wager=45))
    assert bank.calls == [("pay", acc_address_from_bech32(ALICE), "checkers", [Coin("stake", 45)])]


def test_collect_second_move_from_red_and_none_after():
    keeper, ctx, bank = setup()
    keeper.collect_wager(ctx, StoredGame(black=ALICE, red=BOB, move_count=1, wager=45))
    keeper.collect_wager(ctx, StoredGame(black=ALICE, red=BOB, move_count=2, wager=45))
    assert bank.calls == [("pay", acc_address_from_bech32(BOB), "checkers", [Coin("stake", 45)])]


def test_pay_wrong_escrow_failed():
    keeper, ctx, _ = setup(fail="oops")
    with pytest.raises(errors.CheckersError) as exc:
        keeper.must_pay_winnings(
            ctx, StoredGame(black=ALICE, red=BOB, winner="b", move_count=1, wager=45)
        )
    assert str(exc.value) == "cannot pay winnings to winner: oops"


def test_pay_escrow_called_two_moves():
    keeper, ctx, bank = setup()
    keeper.must_pay_winnings(
        ctx, StoredGame(black=ALICE, red=BOB, winner="b", move_count=2, wager=45)
    )
    assert bank.calls == [
        ("refund", "checkers", acc_address_from_bech32(ALICE), [Coin("stake", 90)])
    ]


def test_pay_without_winner():
    keeper, ctx, _ = setup()
    with pytest.raises(errors.CheckersError) as exc:
        keeper.must_pay_winnings(ctx, StoredGame(black=ALICE, red=BOB, winner="*", move_count=2))
    assert exc.value.is_kind(errors.CANNOT_FIND_WINNER_BY_COLOR)


def test_pay_nothing_to_pay():
    keeper, ctx, bank = setup()
    with pytest.raises(errors.CheckersError) as exc:
        keeper.must_pay_winnings(ctx, StoredGame(black=ALICE, red=BOB, winner="r", move_count=0))
    assert str(exc.value) == "there is nothing to pay, should not have been called"
    assert bank.calls == []


def test_refund_wrong_many_moves():
    keeper, ctx, _ = setup()
    with pytest.raises(errors.CheckersError) as exc:
        keeper.must_refund_wager(ctx, StoredGame(move_count=2))
    assert str(exc.value) == "game is not in a state to refund, move count: 2"


def test_refund_no_moves():
    keeper, ctx, bank = setup()
    keeper.must_refund_wager(ctx, StoredGame(move_count=0))
    assert bank.calls == []


def test_refund_wrong_no_black():
    keeper, ctx, _ = setup()
    with pytest.raises(errors.CheckersError) as exc:
        keeper.must_refund_wager(ctx, StoredGame(move_count=1))
    assert str(exc.value) == "black address is invalid: : empty address string is not allowed"


def test_refund_wrong_escrow_failed():
    keeper, ctx, _ = setup(fail="oops")
    with pytest.raises(errors.CheckersError) as exc:
        keeper.must_refund_wager(ctx, StoredGame(black=ALICE, move_count=1, wager=45))
    assert str(exc.value) == "cannot refund wager to: oops"


def test_refund_called():
    keeper, ctx, bank = setup()
    keeper.must_refund_wager(ctx, StoredGame(black=ALICE, move_count=1, wager=45))
    assert bank.calls == [
        ("refund", "checkers", acc_address_from_bech32(ALICE), [Coin("stake", 45)])
    ]


def test_game_written_then_modified_is_independent_copy():
    keeper, ctx, _ = setup()
    game = StoredGame(index="7", wager=45)
    keeper.set_stored_game(ctx, game)
    loaded = keeper.get_stored_game(ctx, "7")
    loaded.wager = 1
    assert keeper.get_stored_game(ctx, "7") == dataclasses.replace(game)
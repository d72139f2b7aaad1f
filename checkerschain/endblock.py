"""End-of-block processing: forfeit games whose turn deadline has passed."""

from __future__ import annotations

from datetime import datetime, timezone

from checkerschain import errors, rules
from checkerschain.keeper import Context, Event, Keeper
from checkerschain.types import (
    GAME_FORFEITED_EVENT_BOARD,
    GAME_FORFEITED_EVENT_GAME_INDEX,
    GAME_FORFEITED_EVENT_TYPE,
    GAME_FORFEITED_EVENT_WINNER,
    NO_FIFO_INDEX,
)

_OPPONENTS = {
    rules.PIECE_STRINGS[rules.BLACK_PLAYER]: rules.PIECE_STRINGS[rules.RED_PLAYER],
    rules.PIECE_STRINGS[rules.RED_PLAYER]: rules.PIECE_STRINGS[rules.BLACK_PLAYER],
}


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def forfeit_expired_games(keeper: Keeper, ctx: Context) -> None:
    """Walk the FIFO from its head and forfeit every game past its deadline.

    Games that were played at most once are deleted (refunding black if it paid);
    others are won by the player who was not on turn.
    """
    info = keeper.get_system_info(ctx)
    if info is None:
        raise RuntimeError("SystemInfo not found")

    block_time = _aware(ctx.block_time)
    game_index = info.fifo_head_index
    while game_index != NO_FIFO_INDEX:
        game = keeper.get_stored_game(ctx, game_index)
        if game is None:
            raise RuntimeError("Fifo head game not found " + info.fifo_head_index)
        deadline = game.deadline_as_time()
        if not deadline < block_time:
            # Every game after this one has a later deadline.
            break

        keeper.remove_from_fifo(ctx, game, info)
        last_board = game.board
        if game.move_count <= 1:
            keeper.remove_stored_game(ctx, game_index)
            if game.move_count == 1:
                keeper.must_refund_wager(ctx, game)
        else:
            winner = _OPPONENTS.get(game.turn)
            if winner is None:
                kind = errors.CANNOT_FIND_WINNER_BY_COLOR
                raise errors.CheckersError(kind.error(game.turn), kind=kind)
            game.winner = winner
            keeper.must_pay_winnings(ctx, game)
            game.board = ""
            keeper.set_stored_game(ctx, game)

        ctx.emit_event(
            Event(
                GAME_FORFEITED_EVENT_TYPE,
                (
                    (GAME_FORFEITED_EVENT_GAME_INDEX, game_index),
                    (GAME_FORFEITED_EVENT_WINNER, game.winner),
                    (GAME_FORFEITED_EVENT_BOARD, last_board),
                ),
            )
        )
        game_index = info.fifo_head_index

    keeper.set_system_info(ctx, info)
"""Transaction handlers of the checkers module: create games, play moves, update params."""

from __future__ import annotations

from checkerschain import errors, rules
from checkerschain.keeper import Context, Event, Keeper
from checkerschain.messages import (
    MsgCreateGame,
    MsgCreateGameResponse,
    MsgPlayMove,
    MsgPlayMoveResponse,
    MsgUpdateParams,
    MsgUpdateParamsResponse,
)
from checkerschain.types import (
    CREATE_GAME_GAS,
    GAME_CREATED_EVENT_BLACK,
    GAME_CREATED_EVENT_CREATOR,
    GAME_CREATED_EVENT_GAME_INDEX,
    GAME_CREATED_EVENT_RED,
    GAME_CREATED_EVENT_TYPE,
    GAME_CREATED_EVENT_WAGER,
    MOVE_PLAYED_EVENT_BOARD,
    MOVE_PLAYED_EVENT_CAPTURED_X,
    MOVE_PLAYED_EVENT_CAPTURED_Y,
    MOVE_PLAYED_EVENT_CREATOR,
    MOVE_PLAYED_EVENT_GAME_INDEX,
    MOVE_PLAYED_EVENT_TYPE,
    MOVE_PLAYED_EVENT_WINNER,
    NO_FIFO_INDEX,
    PLAY_MOVE_GAS,
    StoredGame,
    SystemInfo,
    format_deadline,
    next_deadline,
)

_NO_WINNER = rules.PIECE_STRINGS[rules.NO_PLAYER]
_UNKNOWN_PIECE = rules.Piece(rules.Player(""), False)


class MsgServer:
    """Handles the module's transaction messages against a keeper."""

    def __init__(self, keeper: Keeper) -> None:
        self.keeper = keeper

    def _system_info(self, ctx: Context) -> SystemInfo:
        info = self.keeper.get_system_info(ctx)
        if info is None:
            raise RuntimeError("SystemInfo not found")
        return info

    def create_game(self, ctx: Context, msg: MsgCreateGame) -> MsgCreateGameResponse:
        """Store a new game in its starting position at the tail of the FIFO."""
        info = self._system_info(ctx)
        new_index = str(info.next_id)

        game = rules.new_game()
        stored = StoredGame(
            index=new_index,
            board=str(game),
            turn=rules.PIECE_STRINGS[game.turn],
            black=msg.black,
            red=msg.red,
            winner=_NO_WINNER,
            deadline=format_deadline(next_deadline(ctx.block_time)),
            move_count=0,
            before_index=NO_FIFO_INDEX,
            after_index=NO_FIFO_INDEX,
            wager=msg.wager,
        )
        stored.validate()

        self.keeper.send_to_fifo_tail(ctx, stored, info)
        self.keeper.set_stored_game(ctx, stored)

        info.next_id += 1
        self.keeper.set_system_info(ctx, info)
        ctx.gas_meter.consume_gas(CREATE_GAME_GAS, "Create game")

        ctx.emit_event(
            Event(
                GAME_CREATED_EVENT_TYPE,
                (
                    (GAME_CREATED_EVENT_CREATOR, msg.creator),
                    (GAME_CREATED_EVENT_GAME_INDEX, new_index),
                    (GAME_CREATED_EVENT_BLACK, msg.black),
                    (GAME_CREATED_EVENT_RED, msg.red),
                    (GAME_CREATED_EVENT_WAGER, str(msg.wager)),
                ),
            )
        )
        return MsgCreateGameResponse(game_index=new_index)

    def play_move(self, ctx: Context, msg: MsgPlayMove) -> MsgPlayMoveResponse:
        """Play one move in a stored game, handling wagers, FIFO and the winner."""
        stored = self.keeper.get_stored_game(ctx, msg.game_index)
        if stored is None:
            raise errors.GAME_NOT_FOUND.wrap(msg.game_index)

        if stored.winner != _NO_WINNER:
            raise errors.CheckersError(errors.GAME_FINISHED.error(), kind=errors.GAME_FINISHED)

        is_black = stored.black == msg.creator
        is_red = stored.red == msg.creator
        if not is_black and not is_red:
            raise errors.CREATOR_NOT_PLAYER.wrap(msg.creator)
        if is_black and is_red:
            player = rules.STRING_PIECES.get(stored.turn, _UNKNOWN_PIECE).player
        elif is_black:
            player = rules.BLACK_PLAYER
        else:
            player = rules.RED_PLAYER

        try:
            game = stored.parse_game()
        except errors.CheckersError as err:
            raise RuntimeError(str(err)) from err

        if not game.turn_is(player):
            raise errors.NOT_PLAYER_TURN.wrap(str(player))

        self.keeper.collect_wager(ctx, stored)

        try:
            captured = game.move(
                rules.Pos(int(msg.from_x), int(msg.from_y)),
                rules.Pos(int(msg.to_x), int(msg.to_y)),
            )
        except rules.GameRuleError as err:
            raise errors.WRONG_MOVE.wrap(str(err)) from err

        winner = rules.PIECE_STRINGS[game.winner()]
        stored.winner = winner
        last_board = str(game)

        info = self._system_info(ctx)
        if winner == _NO_WINNER:
            stored.board = last_board
            self.keeper.send_to_fifo_tail(ctx, stored, info)
        else:
            stored.board = ""
            self.keeper.remove_from_fifo(ctx, stored, info)
            self.keeper.must_pay_winnings(ctx, stored)

        stored.deadline = format_deadline(next_deadline(ctx.block_time))
        stored.move_count += 1
        stored.turn = rules.PIECE_STRINGS[game.turn]
        self.keeper.set_stored_game(ctx, stored)
        self.keeper.set_system_info(ctx, info)
        ctx.gas_meter.consume_gas(PLAY_MOVE_GAS, "Play a move")

        ctx.emit_event(
            Event(
                MOVE_PLAYED_EVENT_TYPE,
                (
                    (MOVE_PLAYED_EVENT_CREATOR, msg.creator),
                    (MOVE_PLAYED_EVENT_GAME_INDEX, msg.game_index),
                    (MOVE_PLAYED_EVENT_CAPTURED_X, str(captured.x)),
                    (MOVE_PLAYED_EVENT_CAPTURED_Y, str(captured.y)),
                    (MOVE_PLAYED_EVENT_WINNER, winner),
                    (MOVE_PLAYED_EVENT_BOARD, last_board),
                ),
            )
        )
        return MsgPlayMoveResponse(captured_x=captured.x, captured_y=captured.y, winner=winner)

    def update_params(self, ctx: Context, msg: MsgUpdateParams) -> MsgUpdateParamsResponse:
        """Replace the module parameters; only the authority may do so."""
        if self.keeper.authority != msg.authority:
            raise errors.INVALID_SIGNER.wrap(
                f"invalid authority; expected {self.keeper.authority}, got {msg.authority}"
            )
        self.keeper.set_params(ctx, msg.params)
        return MsgUpdateParamsResponse()
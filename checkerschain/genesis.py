"""Loading the module state from a genesis state and exporting it back."""

from __future__ import annotations

from checkerschain.keeper import Context, Keeper
from checkerschain.types import GenesisState, default_genesis


def init_genesis(ctx: Context, keeper: Keeper, gen_state: GenesisState) -> None:
    """Write the system info, stored games and params of a genesis state."""
    keeper.set_system_info(ctx, gen_state.system_info)
    for game in gen_state.stored_game_list:
        keeper.set_stored_game(ctx, game)
    keeper.set_params(ctx, gen_state.params)


def export_genesis(ctx: Context, keeper: Keeper) -> GenesisState:
    """Read the module state back into a genesis state."""
    genesis = default_genesis()
    genesis.params = keeper.get_params(ctx)
    info = keeper.get_system_info(ctx)
    if info is not None:
        genesis.system_info = info
    genesis.stored_game_list = keeper.all_stored_games(ctx)
    return genesis
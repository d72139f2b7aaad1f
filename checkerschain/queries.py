"""Read-only queries of the checkers module: params, stored games and system info."""

from __future__ import annotations

from dataclasses import dataclass, field

from checkerschain.keeper import Context, Keeper
from checkerschain.types import Params, StoredGame, SystemInfo, stored_game_key

_DEFAULT_LIMIT = 100


class QueryError(Exception):
    """A failed query, carrying a status code and a description."""

    INVALID_ARGUMENT = "InvalidArgument"
    NOT_FOUND = "NotFound"
    INTERNAL = "Internal"

    def __init__(self, code: str, message: str) -> None:
        super().__init__(f"rpc error: code = {code} desc = {message}")
        self.code = code
        self.message = message


@dataclass
class PageRequest:
    key: bytes | None = None
    offset: int = 0
    limit: int = 0
    count_total: bool = False
    reverse: bool = False


@dataclass
class PageResponse:
    next_key: bytes | None = None
    total: int = 0


@dataclass
class QueryParamsRequest:
    pass


@dataclass
class QueryParamsResponse:
    params: Params = field(default_factory=Params)


@dataclass
class QueryGetStoredGameRequest:
    index: str = ""


@dataclass
class QueryGetStoredGameResponse:
    stored_game: StoredGame = field(default_factory=StoredGame)


@dataclass
class QueryAllStoredGameRequest:
    pagination: PageRequest | None = None


@dataclass
class QueryAllStoredGameResponse:
    stored_game: list[StoredGame] = field(default_factory=list)
    pagination: PageResponse | None = None


@dataclass
class QueryGetSystemInfoRequest:
    pass


@dataclass
class QueryGetSystemInfoResponse:
    system_info: SystemInfo = field(default_factory=SystemInfo)


def _invalid_request() -> QueryError:
    return QueryError(QueryError.INVALID_ARGUMENT, "invalid request")


def params(keeper: Keeper, ctx: Context, request: QueryParamsRequest | None) -> QueryParamsResponse:
    if request is None:
        raise _invalid_request()
    return QueryParamsResponse(params=keeper.get_params(ctx))


def stored_game(
    keeper: Keeper, ctx: Context, request: QueryGetStoredGameRequest | None
) -> QueryGetStoredGameResponse:
    if request is None:
        raise _invalid_request()
    game = keeper.get_stored_game(ctx, request.index)
    if game is None:
        raise QueryError(QueryError.NOT_FOUND, "not found")
    return QueryGetStoredGameResponse(stored_game=game)


def _paginate(
    entries: list[tuple[bytes, StoredGame]], page: PageRequest | None
) -> tuple[list[StoredGame], PageResponse]:
    page = page or PageRequest()
    key = page.key or b""
    offset = page.offset
    limit = page.limit
    count_total = page.count_total

    if offset > 0 and key:
        raise ValueError("invalid request, either offset or key is expected, got both")
    if limit == 0:
        limit = _DEFAULT_LIMIT
        count_total = True

    if page.reverse:
        entries = entries[::-1]

    results: list[StoredGame] = []
    if key:
        if page.reverse:
            remaining = [(k, v) for k, v in entries if k <= key]
        else:
            remaining = [(k, v) for k, v in entries if k >= key]
        next_key = None
        for entry_key, game in remaining:
            if len(results) == limit:
                next_key = entry_key
                break
            results.append(game)
        return results, PageResponse(next_key=next_key)

    end = offset + limit
    next_key = None
    count = 0
    for entry_key, game in entries:
        count += 1
        if count <= offset:
            continue
        if count <= end:
            results.append(game)
        elif count == end + 1:
            next_key = entry_key
            if not count_total:
                break
    return results, PageResponse(next_key=next_key, total=count if count_total else 0)


def stored_game_all(
    keeper: Keeper, ctx: Context, request: QueryAllStoredGameRequest | None
) -> QueryAllStoredGameResponse:
    """List stored games page by page, in store-key order."""
    if request is None:
        raise _invalid_request()
    entries = [(stored_game_key(game.index), game) for game in keeper.all_stored_games(ctx)]
    entries.sort(key=lambda entry: entry[0])
    try:
        games, page = _paginate(entries, request.pagination)
    except ValueError as err:
        raise QueryError(QueryError.INTERNAL, str(err)) from err
    return QueryAllStoredGameResponse(stored_game=games, pagination=page)


def system_info(
    keeper: Keeper, ctx: Context, request: QueryGetSystemInfoRequest | None
) -> QueryGetSystemInfoResponse:
    if request is None:
        raise _invalid_request()
    info = keeper.get_system_info(ctx)
    if info is None:
        raise QueryError(QueryError.NOT_FOUND, "not found")
    return QueryGetSystemInfoResponse(system_info=info)
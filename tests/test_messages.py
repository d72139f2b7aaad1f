import pytest

from checkerschain import errors
from checkerschain.messages import MsgCreateGame, MsgPlayMove, MsgUpdateParams

ALICE = "cosmos1jmjfq0tplp9tmx4v9uemw72y4d2wa5nr3xn9d3"
BOB = "cosmos1xyxs3skf3f4jfqeuv89yyaqvjc6lffavxqhc8g"
CAROL = "cosmos1e0w5t53nrq7p66fye6c8p0ynyhf6y24l4yuxd7"


@pytest.mark.parametrize(
    "msg",
    [
        MsgCreateGame(creator="invalid_address", black=ALICE, red=BOB),
        MsgCreateGame(creator=ALICE, black="invalid_address", red=BOB),
        MsgCreateGame(creator=ALICE, black=BOB, red="invalid_address"),
    ],
)
def test_create_game_invalid(msg):
    with pytest.raises(errors.CheckersError) as info:
        msg.validate_basic()
    assert info.value.is_kind(errors.INVALID_ADDRESS)
    assert str(info.value).endswith("invalid separator index -1): invalid address")


def test_create_game_valid():
    assert MsgCreateGame(creator=ALICE, black=BOB, red=CAROL).validate_basic() is None


@pytest.mark.parametrize(
    "msg, kind",
    [
        (MsgPlayMove("invalid_address", "5", 0, 5, 1, 4), errors.INVALID_ADDRESS),
        (MsgPlayMove(ALICE, "invalid_index", 0, 5, 1, 4), errors.INVALID_GAME_INDEX),
        (MsgPlayMove(ALICE, "0", 0, 5, 1, 4), errors.INVALID_GAME_INDEX),
        (MsgPlayMove(ALICE, "5", 8, 5, 1, 4), errors.INVALID_POSITION_INDEX),
        (MsgPlayMove(ALICE, "5", 0, 8, 1, 4), errors.INVALID_POSITION_INDEX),
        (MsgPlayMove(ALICE, "5", 0, 5, 8, 4), errors.INVALID_POSITION_INDEX),
        (MsgPlayMove(ALICE, "5", 0, 5, 1, 8), errors.INVALID_POSITION_INDEX),
        (MsgPlayMove(ALICE, "5", 0, 5, 0, 5), errors.MOVE_ABSENT),
    ],
)
def test_play_move_invalid(msg, kind):
    with pytest.raises(errors.CheckersError) as info:
        msg.validate_basic()
    assert info.value.is_kind(kind)


def test_play_move_messages():
    with pytest.raises(errors.CheckersError) as info:
        MsgPlayMove(ALICE, "5", 8, 5, 1, 4).validate_basic()
    assert str(info.value) == "fromX out of range (8): position index is invalid"
    with pytest.raises(errors.CheckersError) as info2:
        MsgPlayMove(ALICE, "5", 0, 5, 0, 5).validate_basic()
    assert str(info2.value) == "x (0) and y (5): there is no move"


def test_play_move_valid():
    assert MsgPlayMove(ALICE, "5", 0, 5, 1, 4).validate_basic() is None


def test_update_params():
    with pytest.raises(errors.CheckersError, match="invalid authority address"):
        MsgUpdateParams(authority="invalid").validate_basic()
    assert MsgUpdateParams(authority=ALICE).validate_basic() is None
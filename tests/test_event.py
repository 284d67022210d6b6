import pytest

from slpstream.enums import CSSCharacter, Stage
from slpstream.event import (
    FrameBookend,
    GameEnd,
    GameStart,
    ItemUpdate,
    MatchType,
    PostFrameUpdate,
    PreFrameUpdate,
    parse_message,
)

from . import builder as b


def test_game_start():
    payload = b.game_start(
        players=[
            b.player(0, character=CSSCharacter.FOX, color=2, nametag="ＡＢＣ".encode("shift-jis")),
            b.player(1, character=CSSCharacter.MARTH, type=1, stocks=3, connect_code="ＭＡ＃１".encode("shift-jis")),
        ],
        stage=Stage.FINAL_DESTINATION,
        is_pal=True,
        match_id=b"mode.unranked-2023-01-01T12:00:00.00-0",
    )
    start = parse_message(b.GAME_START, payload)

    assert isinstance(start, GameStart)
    assert start.slp_version == "3.12.0"
    assert start.is_teams is False
    assert start.stage is Stage.FINAL_DESTINATION
    assert start.random_seed == 0x1234
    assert start.is_pal is True
    assert start.match_type is MatchType.UNRANKED
    assert start.game_number == 1
    assert len(start.players) == 4

    fox, marth, empty, _ = start.players
    assert fox.port == 1
    assert fox.character is CSSCharacter.FOX
    assert fox.character_color == 2
    assert fox.nametag == "ABC"
    assert fox.controller_fix == "UCF"
    assert marth.type == 1
    assert marth.start_stocks == 3
    assert marth.connect_code == "MA#1"
    assert empty.type == 3
    assert empty.controller_fix == "None"


@pytest.mark.parametrize(
    "dashback, shield_drop, expected",
    [(1, 1, "UCF"), (2, 2, "Dween"), (0, 0, "None"), (1, 2, "Mixed"), (5, 5, "None")],
)
def test_controller_fix(dashback, shield_drop, expected):
    payload = b.game_start(players=[b.player(0, dashback=dashback, shield_drop=shield_drop)])
    assert parse_message(b.GAME_START, payload).players[0].controller_fix == expected


def test_match_type_offline_without_match_id():
    assert parse_message(b.GAME_START, b.game_start()).match_type is MatchType.OFFLINE


def test_old_game_start_has_no_newer_fields():
    # 1.0.0 replays end before the random seed
    start = parse_message(b.GAME_START, b.game_start(version=(1, 0, 0), size=0x13C))
    assert start.slp_version == "1.0.0"
    assert start.players[0].character_id == 2
    assert start.random_seed is None
    assert start.is_pal is None
    assert start.match_id is None
    assert start.players[0].nametag == ""


def test_pre_frame_update():
    payload = b.pre_frame(-39, 1, buttons=0x100, joystick=(0.5, -1.0), l_trigger=0.25, percent=12.0)
    pre = parse_message(b.FRAME_PRE, payload)

    assert isinstance(pre, PreFrameUpdate)
    assert pre.frame == -39
    assert pre.player_index == 1
    assert pre.is_follower is False
    assert pre.physical_buttons == 0x100
    assert pre.joystick_x == 0.5
    assert pre.joystick_y == -1.0
    assert pre.physical_l_trigger == 0.25
    assert pre.percent == 12.0


def test_truncated_pre_frame_update():
    pre = parse_message(b.FRAME_PRE, b.pre_frame(10, 0, size=0x3A))
    assert pre.frame == 10
    assert pre.physical_r_trigger is not None
    assert pre.raw_joystick_x is None
    assert pre.percent is None


def test_post_frame_update():
    payload = b.post_frame(100, 0, action_state=66, percent=33.5, stocks=2, last_hit_by=1, l_cancel=1, facing=-1.0)
    post = parse_message(b.FRAME_POST, payload)

    assert isinstance(post, PostFrameUpdate)
    assert post.frame == 100
    assert post.action_state_id == 66
    assert post.action_state.name == "ATTACK_AIR_F"
    assert post.percent == 33.5
    assert post.stocks_remaining == 2
    assert post.last_hit_by == 1
    assert post.l_cancel_status == 1
    assert post.facing_direction == -1.0
    assert post.shield_size == 60.0
    assert post.animation_index == 0


def test_item_update():
    item = parse_message(b.ITEM, b.item_update(5, type_id=0x36, spawn_id=9, owner=1))
    assert isinstance(item, ItemUpdate)
    assert (item.frame, item.type_id, item.spawn_id, item.owner) == (5, 0x36, 9, 1)


def test_frame_bookend():
    bookend = parse_message(b.FRAME_BOOKEND, b.frame_bookend(20, latest_finalized=13))
    assert bookend == FrameBookend(frame=20, latest_finalized_frame=13)


def test_game_end():
    end = parse_message(b.GAME_END, b.game_end(method=7, lras=1, placements=(1, 0, -1, -1)))
    assert end == GameEnd(game_end_method=7, lras_initiator_index=1, placements=(1, 0, -1, -1))


def test_old_game_end():
    end = parse_message(b.GAME_END, bytes([b.GAME_END, 3]))
    assert end.game_end_method == 3
    assert end.lras_initiator_index is None
    assert end.placements is None


def test_undecoded_commands():
    assert parse_message(b.FRAME_START, bytes(13)) is None
    assert parse_message(0x99, bytes(4)) is None

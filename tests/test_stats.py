import polars as pl
import pytest

from slpstream import SlippiGame, StatOptions
from slpstream.enums import ActionState
from slpstream.event import parse_message
from slpstream.stats import (
    ComboEvent,
    ConversionData,
    ConversionEvent,
    MoveLanded,
    OpeningType,
    Ratio,
    generate_overall_stats,
)
from slpstream.stats.combo_computer import PunishComputer

from . import builder as b


def _kill_replay() -> bytes:
    """Player 0 hits player 1 for 10% on frame 10, player 1 dies on frame 20"""
    messages = [b.message_sizes(), b.game_start()]
    for frame in range(31):
        attacker = {"action_state": ActionState.ATTACK_AIR_F if 9 <= frame <= 10 else ActionState.WAIT}
        if frame >= 10:
            attacker["last_attack_landed"] = 14

        if frame < 10:
            victim = {}
        elif frame < 20:
            victim = {"action_state": ActionState.DAMAGE_HI_1, "percent": 10.0, "last_hit_by": 0}
        elif frame == 20:
            victim = {"action_state": ActionState.DEAD_DOWN, "stocks": 3, "last_hit_by": 0}
        else:
            victim = {"action_state": ActionState.REBIRTH, "stocks": 3}

        messages += b.frame(frame, posts={0: attacker, 1: victim})
    messages.append(b.game_end())
    return b.replay(messages)


def test_stocks():
    stocks = SlippiGame(_kill_replay()).get_stats().stocks

    closed = [s for s in stocks if s.end_frame is not None]
    assert len(closed) == 1
    lost = closed[0]
    assert lost.player_index == 1
    assert lost.count == 4
    assert (lost.start_frame, lost.end_frame) == (0, 20)
    assert lost.end_percent == 10.0
    assert lost.death_animation == ActionState.DEAD_DOWN

    respawned = [s for s in stocks if s.player_index == 1 and s.end_frame is None]
    assert [(s.start_frame, s.count) for s in respawned] == [(21, 3)]


def test_conversion_ends_in_kill():
    stats = SlippiGame(_kill_replay()).get_stats()

    assert len(stats.conversions) == 1
    conversion = stats.conversions[0]
    assert conversion.player_index == 1
    assert conversion.last_hit_by == 0
    assert conversion.did_kill
    assert (conversion.start_frame, conversion.end_frame) == (10, 20)
    assert (conversion.start_percent, conversion.end_percent) == (0.0, 10.0)
    assert conversion.total_damage() == 10.0
    assert conversion.opening_type is OpeningType.NEUTRAL_WIN

    assert len(conversion.moves) == 1
    move = conversion.moves[0]
    assert (move.player_index, move.frame, move.move_id, move.hit_count, move.damage) == (0, 10, 14, 1, 10.0)


def test_combo_ends_in_kill():
    combos = SlippiGame(_kill_replay()).get_stats().combos

    assert len(combos) == 1
    assert combos[0].did_kill
    assert combos[0].end_frame == 20
    assert combos[0].minimum_damage(10)
    assert not combos[0].minimum_length(2)


def test_combo_events():
    game = SlippiGame(_kill_replay())
    received = []
    game.on_combo_event(lambda event, combo: received.append((event, combo.start_frame)))
    game.get_stats()

    assert received == [(ComboEvent.COMBO_START, 10), (ComboEvent.COMBO_END, 10)]


def test_overall():
    stats = SlippiGame(_kill_replay()).get_stats()
    attacker, victim = stats.overall

    assert attacker.player_index == 0
    assert attacker.conversion_count == 1
    assert attacker.kill_count == 1
    assert attacker.total_damage == 10.0
    assert attacker.openings_per_kill == Ratio(1, 1, 1.0)
    assert attacker.damage_per_opening == Ratio(10.0, 1, 10.0)
    assert attacker.neutral_win_ratio == Ratio(1, 1, 1.0)
    assert attacker.counter_hit_ratio == Ratio(0, 0, None)

    assert victim.conversion_count == 0
    assert victim.kill_count == 0
    assert victim.neutral_win_ratio == Ratio(0, 1, 0.0)
    assert victim.openings_per_kill.ratio is None


def test_trades():
    messages = [b.message_sizes(), b.game_start()]
    for frame in range(21):
        posts = {}
        if frame >= 10:
            posts[0] = {"percent": 10.0, "last_hit_by": 1}
            posts[1] = {"percent": 12.0, "last_hit_by": 0}
        if frame == 10:
            posts[0]["action_state"] = ActionState.DAMAGE_N_1
            posts[1]["action_state"] = ActionState.DAMAGE_N_1
        messages += b.frame(frame, posts=posts)
    stats = SlippiGame(b.replay(messages)).get_stats()

    assert stats.game_complete is False
    assert [c.opening_type for c in stats.conversions] == [OpeningType.TRADE, OpeningType.TRADE]
    assert stats.overall[0].beneficial_trade_ratio == Ratio(1, 1, 1.0)
    assert stats.overall[1].beneficial_trade_ratio == Ratio(0, 1, 0.0)
    assert stats.overall[0].neutral_win_ratio.ratio is None


def test_input_counts():
    pres = {
        -38: {"buttons": 0x100, "joystick": (1.0, 0.0), "l_trigger": 0.5},
        -37: {"buttons": 0x100, "l_trigger": 0.5},
        -36: {"buttons": 0x300, "joystick": (-1.0, 0.0), "cstick": (0.0, 1.0), "l_trigger": 0.5},
        # start is not an input
        -35: {"buttons": 0x1300},
    }
    messages = [b.message_sizes(), b.game_start()]
    for frame in range(-40, -34):
        messages += b.frame(frame, pres={0: pres.get(frame, {})})
    stats = SlippiGame(b.replay(messages)).get_stats()

    inputs = {counts.player_index: counts for counts in stats.inputs}
    assert (inputs[0].buttons, inputs[0].triggers, inputs[0].joystick, inputs[0].cstick) == (2, 1, 2, 1)
    assert inputs[0].total == 6
    assert inputs[1].total == 0

    # no frames past zero, so there is no time to divide by
    assert stats.playable_frame_count == 0
    assert stats.overall[0].inputs_per_minute == Ratio(6, 0, None)


def test_action_counts():
    states = [
        ActionState.WAIT,
        ActionState.DASH,
        ActionState.TURN,
        ActionState.DASH,
        ActionState.WAIT,
        ActionState.KNEE_BEND,
        ActionState.ESCAPE_AIR,
        ActionState.LAND_FALL_SPECIAL,
        *[ActionState.WAIT] * 9,
        ActionState.FALL,
        ActionState.LAND_FALL_SPECIAL,
        ActionState.ATTACK_AIR_F,
        ActionState.LANDING_AIR_F,
        ActionState.ESCAPE_F,
        ActionState.WAIT,
    ]
    messages = [b.message_sizes(), b.game_start(players=[b.player(0)])]
    for frame, state in enumerate(states):
        post = {"action_state": state}
        if state == ActionState.LANDING_AIR_F:
            post["l_cancel"] = 1
        messages += b.frame(frame, posts={0: post}, players=(0,))
    messages.append(b.game_end())

    (counts,) = SlippiGame(b.replay(messages)).get_stats().action_counts
    assert counts.dash_dance_count == 1
    assert counts.wavedash_count == 1
    assert counts.waveland_count == 1
    assert counts.air_dodge_count == 0
    assert counts.roll_count == 1
    assert counts.attack_count.fair == 1
    assert counts.l_cancel_count.success == 1
    assert counts.l_cancel_count.fail == 0


@pytest.mark.parametrize("count, total, expected", [(1, 4, 0.25), (3, 0, None), (0, 0, None)])
def test_ratio(count, total, expected):
    assert Ratio.of(count, total).ratio == expected


def test_processing_on_the_fly_matches_batch():
    data = _kill_replay()
    batch = SlippiGame(data).get_stats()
    streamed = SlippiGame(data, StatOptions(process_on_the_fly=True)).get_stats()

    assert list(streamed.stocks) == list(batch.stocks)
    assert list(streamed.conversions) == list(batch.conversions)
    assert list(streamed.combos) == list(batch.combos)
    assert streamed.overall == batch.overall


def test_polars_export():
    stats = SlippiGame(_kill_replay()).get_stats()

    conversions = stats.conversions.to_polars()
    assert conversions.shape[0] == 1
    assert conversions["opening_type"].to_list() == ["neutral-win"]
    assert conversions["move_count"].to_list() == [1]
    assert conversions["total_damage"].to_list() == [10.0]

    stocks = stats.stocks.to_polars()
    assert stocks.shape[0] == 3
    assert stocks.schema["end_frame"] == pl.Int64
    assert stocks["end_frame"].null_count() == 2


def _counter_attack_messages() -> tuple[list[bytes], int]:
    """Player 0 hits player 1 on frame 10. Player 1 is back in control on frame 15 and hits player 0 on frame 20,
    while still inside their own conversion window. Also returns the message count up to the end of frame 17."""
    messages = [b.message_sizes(), b.game_start()]
    cut = 0
    for frame in range(81):
        posts = {}
        if 10 <= frame < 15:
            posts[1] = {"action_state": ActionState.DAMAGE_HI_1, "percent": 10.0, "last_hit_by": 0}
        elif frame >= 15:
            posts[1] = {"percent": 10.0, "last_hit_by": 0}
        if 20 <= frame < 25:
            posts[0] = {"action_state": ActionState.DAMAGE_HI_1, "percent": 8.0, "last_hit_by": 1}
        elif frame >= 25:
            posts[0] = {"percent": 8.0, "last_hit_by": 1}
        messages += b.frame(frame, posts=posts)
        if frame == 17:
            cut = len(messages)
    messages.append(b.game_end())
    return messages, cut


def test_counter_attack():
    messages, _ = _counter_attack_messages()
    conversions = SlippiGame(b.replay(messages)).get_stats().conversions

    assert [(c.player_index, c.start_frame, c.end_frame) for c in conversions] == [(1, 10, 60), (0, 20, 70)]
    assert [c.opening_type for c in conversions] == [OpeningType.NEUTRAL_WIN, OpeningType.COUNTER_ATTACK]


def test_opening_types_unaffected_by_polling(tmp_path):
    messages, cut = _counter_attack_messages()
    path = tmp_path / "live.slp"
    path.write_bytes(b.replay(messages[:cut], finished=False))

    game = SlippiGame(path)
    early = game.get_stats()
    assert [c.opening_type for c in early.conversions] == [OpeningType.NEUTRAL_WIN]

    path.write_bytes(b.replay(messages, finished=False))
    polled = game.get_stats()
    one_pass = SlippiGame(b.replay(messages, finished=False)).get_stats()

    assert polled.game_complete
    assert list(polled.conversions) == list(one_pass.conversions)
    assert polled.overall == one_pass.overall
    assert polled.overall[1].counter_hit_ratio == Ratio(1, 1, 1.0)


def test_conversion_events():
    game = SlippiGame(_kill_replay())
    received = []
    game.on_conversion_event(lambda event, conversion: received.append((event, conversion.end_frame)))
    game.get_stats()

    assert received == [(ConversionEvent.CONVERSION, 20)]


def test_punish_computer_is_abstract():
    with pytest.raises(TypeError):
        PunishComputer()


def _trade(victim: int, attacker: int, start_frame: int, damage: float) -> ConversionData:
    return ConversionData(
        player_index=victim,
        last_hit_by=attacker,
        start_frame=start_frame,
        start_percent=0.0,
        current_percent=damage,
        moves=[MoveLanded(player_index=attacker, frame=start_frame, move_id=1, hit_count=1, damage=damage)],
        opening_type=OpeningType.TRADE,
    )


def test_trades_paired_by_start_frame():
    settings = parse_message(b.GAME_START, b.game_start())
    conversions = [
        # player 0's trade on frame 10 has no recorded counterpart
        _trade(victim=1, attacker=0, start_frame=10, damage=20.0),
        _trade(victim=0, attacker=1, start_frame=50, damage=10.0),
        _trade(victim=1, attacker=0, start_frame=50, damage=5.0),
    ]
    overall = generate_overall_stats(settings, [], conversions, 3600)

    assert overall[0].beneficial_trade_ratio == Ratio(0, 2, 0.0)
    assert overall[1].beneficial_trade_ratio == Ratio(1, 1, 1.0)

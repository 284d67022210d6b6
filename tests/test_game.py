import io
from datetime import datetime, timezone

import pytest

from slpstream import SlippiGame, SourceError, UnsupportedSourceError
from slpstream.metadata import Platform

from . import builder as b

METADATA = {
    "startAt": "2023-01-01T12:00:00Z",
    "lastFrame": 9,
    "playedOn": "dolphin",
    "players": {"0": {"characters": {"1": 133}, "names": {"netplay": "Fox", "code": "FOX#1"}}},
}


def _messages(frames=range(-123, 10), end: bool = True) -> list[bytes]:
    messages = [b.message_sizes(), b.game_start()]
    for frame in frames:
        messages += b.frame(frame)
    if end:
        messages.append(b.game_end())
    return messages


def test_unsupported_source():
    with pytest.raises(UnsupportedSourceError):
        SlippiGame(12)


def test_missing_file(tmp_path):
    with pytest.raises(SourceError):
        SlippiGame(tmp_path / "missing.slp")


@pytest.mark.parametrize("wrap", [bytes, bytearray, io.BytesIO])
def test_sources(wrap):
    game = SlippiGame(wrap(b.replay(_messages())))
    assert game.get_settings().slp_version == "3.12.0"
    assert game.get_game_end().game_end_method == 2


def test_file_source(tmp_path):
    path = tmp_path / "game.slp"
    path.write_bytes(b.replay(_messages(), metadata=METADATA))

    game = SlippiGame(str(path))
    assert game.get_file_path() == str(path)
    assert len(game.get_frames()) == 133
    assert sorted(game.get_finalized_frames()) == list(range(-123, 10))
    assert game.get_latest_frame().frame == 9


def test_buffer_has_no_path():
    assert SlippiGame(b.replay(_messages())).get_file_path() is None


def test_settings_only_read_as_far_as_needed():
    game = SlippiGame(b.replay(_messages()))
    assert game.get_settings() is not None
    assert game._parser.latest_frame_index is None

    assert game.get_latest_frame().frame == 9


def test_stats_cached_after_game_end():
    game = SlippiGame(b.replay(_messages()))
    stats = game.get_stats()

    assert stats.game_complete
    assert stats.last_frame == 9
    assert stats.playable_frame_count == 10
    assert game.get_stats() is stats


def test_stats_unavailable_without_settings():
    assert SlippiGame(b.replay([b.message_sizes()], finished=False)).get_stats() is None


def test_rollback_stats():
    messages = _messages(range(5), end=False)
    messages += [b.pre_frame(3, 0), b.post_frame(3, 0, percent=4.0), b.frame_bookend(3)]
    stats = SlippiGame(b.replay(messages)).get_rollback_stats()

    assert stats.frames == 1
    assert stats.lengths == [1]


def test_metadata():
    game = SlippiGame(b.replay(_messages(), metadata=METADATA))
    assert game.get_metadata() == METADATA

    metadata = game.get_parsed_metadata()
    assert metadata.date == datetime(2023, 1, 1, 12, tzinfo=timezone.utc)
    assert metadata.date.tzinfo is not None
    assert metadata.last_frame == 9
    assert metadata.duration == 133
    assert metadata.platform is Platform.DOLPHIN
    assert metadata.players[0].connect_code == "FOX#1"
    assert metadata.players[0].display_name == "Fox"


def test_metadata_missing_while_in_progress():
    game = SlippiGame(b.replay(_messages(end=False), finished=False))
    assert game.get_metadata() is None
    assert game.get_parsed_metadata() is None


def test_replay_read_while_being_written(tmp_path):
    data = b.replay(_messages(), finished=False)
    # cut in the middle of a frame
    cut = len(data) // 2 + 7
    path = tmp_path / "live.slp"
    path.write_bytes(data[:cut])

    game = SlippiGame(path)
    assert game.get_settings() is not None
    partial = game.get_stats()
    assert partial is not None and not partial.game_complete
    assert game.get_game_end() is None
    frames_so_far = len(game.get_frames())
    assert 0 < frames_so_far < 133

    path.write_bytes(data)

    assert game.get_game_end() is not None
    assert len(game.get_frames()) == 133

    complete = SlippiGame(data)
    assert game.get_finalized_frames() == complete.get_finalized_frames()
    assert game.get_stats().overall == complete.get_stats().overall

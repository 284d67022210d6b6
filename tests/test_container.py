import struct

from slpstream.container import (
    LEGACY_MESSAGE_SIZES,
    RAW_HEADER_LENGTH,
    build_message_size_table,
    get_metadata,
    locate_raw_region,
    open_slp_file,
)
from slpstream.reader import BufferSource

from . import builder as b


def test_raw_region_of_finished_replay():
    messages = [b.message_sizes(), b.game_start(), *b.frame(-123)]
    data = b.replay(messages)
    assert locate_raw_region(data) == (RAW_HEADER_LENGTH, len(b"".join(messages)))


def test_raw_region_of_replay_in_progress():
    data = b.replay([b.message_sizes(), b.game_start()], finished=False)
    assert locate_raw_region(data) == (RAW_HEADER_LENGTH, len(data) - RAW_HEADER_LENGTH)


def test_raw_region_is_clamped_to_available_bytes():
    data = b"{U\x03raw[$U#l" + struct.pack(">i", 1000) + bytes(20)
    assert locate_raw_region(data) == (RAW_HEADER_LENGTH, 20)


def test_raw_region_without_container():
    data = b.message_sizes() + b.game_start()
    assert locate_raw_region(data) == (0, len(data))


def test_legacy_message_sizes_at_start_of_file():
    assert build_message_size_table(b"\x36" + bytes(10), 0) == LEGACY_MESSAGE_SIZES


def test_message_size_table():
    data = bytes(15) + b.message_sizes()
    sizes = build_message_size_table(data, 15)
    assert sizes[0x35] == 3 * len(b.MESSAGE_SIZES) + 1
    for command, size in b.MESSAGE_SIZES.items():
        assert sizes[command] == size


def test_message_size_table_missing():
    assert build_message_size_table(bytes(15) + b"\x36\x00", 15) == {}


def test_message_size_table_ignores_incomplete_group():
    data = bytes(15) + bytes([0x35, 0x05, 0x36, 0x01, 0x40, 0x37])
    assert build_message_size_table(data, 15) == {0x35: 5, 0x36: 0x140}


def test_metadata_is_decoded():
    metadata = {"startAt": "2023-01-01T12:00:00Z", "lastFrame": 1234, "playedOn": "dolphin"}
    slp_file = open_slp_file(BufferSource(b.replay([b.message_sizes()], metadata=metadata)))
    assert get_metadata(slp_file) == metadata


def test_metadata_missing_while_in_progress():
    slp_file = open_slp_file(BufferSource(b.replay([b.message_sizes()], finished=False)))
    assert get_metadata(slp_file) is None


def test_metadata_malformed():
    raw = b.message_sizes()
    data = b"{U\x03raw[$U#l" + struct.pack(">i", len(raw)) + raw + b"U\x08metadata" + b"\xfe\xfe\xfe" + b"}"
    assert get_metadata(open_slp_file(BufferSource(data))) is None

"""Locates the regions of a .slp container.

A finished replay is a UBJSON object of the form `{"raw": [bytes...], "metadata": {...}}`. To avoid running the
whole event stream through a UBJSON decoder, the "raw" array is assumed to be the first element and its bounds are
computed from the fixed-size header. Files produced by very old recorders have no container at all and are treated
as a single raw region.
"""

from __future__ import annotations

from dataclasses import dataclass

import ubjson

from .event import EventType
from .log import log
from .reader import ReplaySource
from .util import read_int32, read_uint8

# b'{U\x03raw[$U#l' followed by the int32 array length
RAW_HEADER_LENGTH = 15
# b'U\x08metadata'
METADATA_KEY_LENGTH = 10

# Message sizes used by replays recorded before the message size table existed
LEGACY_MESSAGE_SIZES = {
    EventType.GAME_START: 0x140,
    EventType.FRAME_PRE: 0x6,
    EventType.FRAME_POST: 0x46,
    EventType.GAME_END: 0x1,
}


@dataclass
class SlpFile:
    """A snapshot of a replay's bytes along with the computed region bounds"""

    source: ReplaySource
    data: bytes
    raw_data_position: int
    raw_data_length: int
    metadata_position: int
    metadata_length: int
    message_sizes: dict[int, int]


def locate_raw_region(data: bytes) -> tuple[int, int]:
    """Returns (position, length) of the raw event region"""
    if len(data) == 0 or data[0] != ord("{"):
        return 0, len(data)

    position = RAW_HEADER_LENGTH
    available = max(len(data) - position, 0)
    length = read_int32(data, position - 4)

    # Replays still being written have a zero length in the header
    if length is None or length <= 0:
        return position, available

    return position, min(length, available)


def locate_metadata_region(data: bytes, raw_position: int, raw_length: int) -> tuple[int, int]:
    position = raw_position + raw_length + METADATA_KEY_LENGTH
    # the trailing byte closes the outer container object
    return position, len(data) - position - 1


def build_message_size_table(data: bytes, position: int) -> dict[int, int]:
    """Reads the Message Sizes event at `position` into a {command byte: payload size} mapping.

    Payload sizes exclude the command byte itself.
    """
    if position == 0:
        return dict(LEGACY_MESSAGE_SIZES)

    if read_uint8(data, position) != EventType.MESSAGE_SIZES:
        log.debug("no message size table at %d" % position)
        return {}

    payload_length = read_uint8(data, position + 1)
    if payload_length is None:
        return {}

    sizes = {EventType.MESSAGE_SIZES.value: payload_length}
    entries = data[position + 2 : position + payload_length + 1]
    for i in range(0, payload_length - 1, 3):
        entry = entries[i : i + 3]
        # incomplete trailing group
        if len(entry) < 3:
            break
        sizes[entry[0]] = (entry[1] << 8) | entry[2]

    return sizes


def open_slp_file(source: ReplaySource) -> SlpFile:
    data = source.read_all()
    raw_position, raw_length = locate_raw_region(data)
    metadata_position, metadata_length = locate_metadata_region(data, raw_position, raw_length)

    return SlpFile(
        source=source,
        data=data,
        raw_data_position=raw_position,
        raw_data_length=raw_length,
        metadata_position=metadata_position,
        metadata_length=metadata_length,
        message_sizes=build_message_size_table(data, raw_position),
    )


def get_metadata(slp_file: SlpFile) -> dict | None:
    """Decodes the metadata block. Returns None if it is missing or malformed."""
    if slp_file.metadata_length <= 0:
        return None

    start = slp_file.metadata_position
    block = slp_file.data[start : start + slp_file.metadata_length]
    try:
        metadata = ubjson.loadb(block)
    except (ubjson.DecoderException, ValueError) as exc:
        log.info("unable to decode metadata: %s" % exc)
        return None

    return metadata if isinstance(metadata, dict) else None

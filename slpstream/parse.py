from __future__ import annotations

from typing import Callable

from .container import SlpFile
from .event import Event, EventType, parse_message
from .log import log
from .util import try_enum


def iterate_events(
    slp_file: SlpFile,
    on_event: Callable[[int, Event | None], bool | None],
    start_pos: int | None = None,
) -> int:
    """Walks the raw region one message at a time, passing each decoded message to `on_event`.

    :param slp_file: snapshot produced by `open_slp_file`
    :param on_event: called with (command byte, decoded event or None). Returning True stops iteration.
    :param start_pos: absolute offset to resume from, defaults to the start of the raw region
    :return: the offset of the first unconsumed message. Passing it back in as `start_pos` resumes exactly where
        this call left off, which is how replays still being written are read incrementally.
    """
    data = slp_file.data
    message_sizes = slp_file.message_sizes
    position = start_pos if start_pos is not None and start_pos > 0 else slp_file.raw_data_position
    stop = slp_file.raw_data_position + slp_file.raw_data_length

    while position < stop:
        command = data[position]
        payload_size = message_sizes.get(command)
        if payload_size is None:
            log.info("unknown command byte 0x%x at %d, stopping" % (command, position))
            break

        message_size = payload_size + 1
        # partially written message, wait for more data
        if message_size > stop - position:
            log.debug("incomplete %s message at %d" % (try_enum(EventType, command), position))
            break

        event = parse_message(command, data[position : position + message_size])
        position += message_size

        if on_event(command, event):
            break

    return position

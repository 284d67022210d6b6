from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

import tzlocal

from .enums.character import InGameCharacter
from .event import FIRST_FRAME_INDEX
from .log import log
from .util import Base, Enum, try_enum

# timezone & fractional seconds aren't always provided, and strptime lacks support for optional components
_START_AT = re.compile(r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(?:Z|([+-])(\d{2}):?(\d{2}))?$")


class Platform(Enum):
    CONSOLE = "console"
    DOLPHIN = "dolphin"
    NETWORK = "network"
    NINTENDONT = "nintendont"


def parse_start_at(raw: str) -> datetime | None:
    """Parses the metadata `startAt` timestamp and converts it to the local timezone of the parsing machine"""
    # workaround for Nintendont/Slippi<1.5 bug
    match = _START_AT.search(raw.rstrip("\x00"))
    if match is None:
        return None

    year, month, day, hour, minute, second, fraction, sign, tz_hours, tz_minutes = match.groups()
    # only the first 6 fractional digits fit in a datetime
    microsecond = int((fraction or "0")[:6].ljust(6, "0"))
    offset = timedelta(hours=int(tz_hours or 0), minutes=int(tz_minutes or 0))
    if sign == "-":
        offset = -offset

    date = datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), microsecond, timezone(offset)
    )
    return date.astimezone(tzlocal.get_localzone())


class MetadataPlayer(Base):
    """Per-port metadata written by the Slippi client.

    Attributes:
        port : int
            0-indexed port
        characters : dict[InGameCharacter | int, int]
            Character(s) used, with usage duration in frames. Contains multiple characters for Sheik/Zelda
        connect_code : str | None
            Connect code in the format "CODE#123"
        display_name : str | None
    """

    __slots__ = ("port", "characters", "connect_code", "display_name")

    def __init__(
        self,
        port: int,
        characters: dict[InGameCharacter | int, int],
        connect_code: str | None = None,
        display_name: str | None = None,
    ):
        self.port = port
        self.characters = characters
        self.connect_code = connect_code
        self.display_name = display_name

    @classmethod
    def _parse(cls, port: int, json: dict) -> MetadataPlayer:
        characters = {}
        for char_id, frames in (json.get("characters") or {}).items():
            characters[try_enum(InGameCharacter, int(char_id))] = frames
        names = json.get("names") or {}
        return cls(port, characters, names.get("code"), names.get("netplay"))

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return (
            self.port == other.port
            and self.characters == other.characters
            and self.connect_code == other.connect_code
            and self.display_name == other.display_name
        )


class Metadata(Base):
    """
    Miscellaneous data not directly provided by Melee.

    date : datetime | None
        Game start date & time, converted to the local timezone
    last_frame : int | None
    duration : int | None
        Total duration of game in frames. Counts pre-go frames, so it will not match the in-game timer.
    platform : Platform | str | None
        Platform the game was played on (console/dolphin)
    players : dict[int, MetadataPlayer]
        Keyed by 0-indexed port. Empty ports are absent
    console_name : str | None
    """

    __slots__ = ("date", "last_frame", "duration", "platform", "players", "console_name")

    def __init__(
        self,
        date: datetime | None,
        last_frame: int | None,
        platform: Platform | str | None,
        players: dict[int, MetadataPlayer],
        console_name: str | None = None,
    ):
        self.date = date
        self.last_frame = last_frame
        # Duration is stored as the final frame index + the "pre-Go" frames.
        self.duration = None if last_frame is None else 1 + last_frame - FIRST_FRAME_INDEX
        self.platform = platform
        self.players = players
        self.console_name = console_name

    @classmethod
    def _parse(cls, json: dict) -> Metadata:
        start_at = json.get("startAt")
        date = parse_start_at(start_at) if isinstance(start_at, str) else None

        played_on = json.get("playedOn")
        platform = try_enum(Platform, played_on) if played_on is not None else None

        players = {}
        for port, player in (json.get("players") or {}).items():
            try:
                players[int(port)] = MetadataPlayer._parse(int(port), player)
            except (TypeError, ValueError, AttributeError):
                log.info("skipping malformed metadata for port %s" % port)

        return cls(
            date=date,
            last_frame=json.get("lastFrame"),
            platform=platform,
            players=players,
            console_name=json.get("consoleNick"),
        )

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return (
            self.date == other.date
            and self.last_frame == other.last_frame
            and self.platform == other.platform
            and self.players == other.players
            and self.console_name == other.console_name
        )

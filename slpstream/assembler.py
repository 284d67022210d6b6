"""Assembles decoded events into frames.

Online replays contain rollbacks: the game re-simulates up to MAX_ROLLBACK_FRAMES frames when a remote input
arrives late, and every re-simulated frame is written to the replay again. The parser keeps two views of the game:
`frames` always holds the most recently written data for each frame, while `finalized_frames` holds copies taken once
a frame can no longer change. Anything overwritten by a re-simulation is kept in `rollback_frames`.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable

from .enums.character import CSSCharacter, InGameCharacter
from .event import (
    FIRST_FRAME_INDEX,
    MAX_ROLLBACK_FRAMES,
    Event,
    EventType,
    FrameBookend,
    GameEnd,
    GameStart,
    ItemUpdate,
    PlayerType,
    PostFrameUpdate,
    PreFrameUpdate,
)
from .log import log
from .util import Base, Enum, version_at_least


class ParseEvent(Enum):
    """Parser notifications, used as keys for event handlers.
    Comments indicate the object that will be passed to each handler."""

    SETTINGS = "settings"  # GameStart
    FRAME = "frame"  # FrameEntry, once its data has been fully transferred
    FINALIZED_FRAME = "finalized_frame"  # FrameEntry, a copy that will never change
    ROLLBACK_FRAME = "rollback_frame"  # FrameEntry, the superseded data
    END = "end"  # GameEnd


class ParserState(Enum):
    AWAITING_SETTINGS = "awaiting_settings"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class PlayerFrameData(Base):
    __slots__ = ("pre", "post")

    pre: PreFrameUpdate | None
    post: PostFrameUpdate | None

    def __init__(self, pre: PreFrameUpdate | None = None, post: PostFrameUpdate | None = None):
        self.pre = pre
        self.post = post

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return self.pre == other.pre and self.post == other.post


class FrameEntry(Base):
    """All data written for a single frame.

    Attributes:
        frame : int
            Frame number, starting at -123
        players : dict[int, PlayerFrameData]
            Keyed by player index
        followers : dict[int, PlayerFrameData]
            Keyed by player index, only populated for Ice Climbers (Nana)
        items : list[ItemUpdate]
        is_transfer_complete : bool
            True once the frame's bookend has been received
    """

    __slots__ = ("frame", "players", "followers", "items", "is_transfer_complete")

    frame: int
    players: dict[int, PlayerFrameData]
    followers: dict[int, PlayerFrameData]
    items: list[ItemUpdate]
    is_transfer_complete: bool

    def __init__(self, frame: int):
        self.frame = frame
        self.players = {}
        self.followers = {}
        self.items = []
        self.is_transfer_complete = False

    def copy(self) -> FrameEntry:
        # event records are frozen, so only the containers need copying
        entry = FrameEntry(self.frame)
        entry.players = {i: PlayerFrameData(d.pre, d.post) for i, d in self.players.items()}
        entry.followers = {i: PlayerFrameData(d.pre, d.post) for i, d in self.followers.items()}
        entry.items = list(self.items)
        entry.is_transfer_complete = self.is_transfer_complete
        return entry

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return (
            self.frame == other.frame
            and self.players == other.players
            and self.followers == other.followers
            and self.items == other.items
        )


class SlpParser:
    """Frame assembly state machine.

    Feed it every (command, event) pair produced by `iterate_events` via `handle_command`. Notifications are
    delivered through `handlers`, a dict of ParseEvent keys to callables.
    """

    def __init__(self, handlers: dict[ParseEvent, Callable[[Any], None]] | None = None):
        self.handlers = dict(handlers) if handlers else {}
        self.reset()

    def reset(self) -> None:
        self.state = ParserState.AWAITING_SETTINGS
        self.frames: dict[int, FrameEntry] = {}
        self.finalized_frames: dict[int, FrameEntry] = {}
        self.rollback_frames: dict[int, list[FrameEntry]] = {}
        self.rollback_lengths: list[int] = []
        self.game_end: GameEnd | None = None
        self.latest_frame_index: int | None = None
        self.last_finalized_frame: int | None = None

        self._settings: GameStart | None = None
        self._settings_complete = False
        self._writing: int | None = None
        self._last_rollback: int | None = None

    def on(self, event: ParseEvent, handler: Callable[[Any], None]) -> None:
        self.handlers[event] = handler

    def _emit(self, event: ParseEvent, obj) -> None:
        handler = self.handlers.get(event)
        if handler is not None:
            handler(obj)

    # --------------------------------- Queries -------------------------------- #

    @property
    def settings(self) -> GameStart | None:
        """Game settings, or None until they are complete (see `_handle_post_frame` for older replays)"""
        return self._settings if self._settings_complete else None

    def get_latest_frame(self) -> FrameEntry | None:
        if self.latest_frame_index is None:
            return None
        # while the game is running the newest frame may be only partially written
        index = self.latest_frame_index if self.game_end else self.latest_frame_index - 1
        return self.frames.get(index)

    def get_playable_frame_count(self) -> int:
        """Number of finalized frames from frame 0 onwards"""
        if self.last_finalized_frame is None or self.last_finalized_frame < 0:
            return 0
        return sum(1 for frame in self.finalized_frames if frame >= 0)

    def get_rollback_count(self) -> int:
        return sum(len(snapshots) for snapshots in self.rollback_frames.values())

    # --------------------------------- Handlers ------------------------------- #

    def handle_command(self, command: int, event: Event | None) -> None:
        if self.state is ParserState.COMPLETE or event is None:
            return

        match command:
            case EventType.FRAME_PRE | EventType.FRAME_POST:
                self._handle_frame_update(command, event)
            case EventType.ITEM:
                self._handle_item(event)
            case EventType.FRAME_BOOKEND:
                self._handle_frame_bookend(event)
            case EventType.GAME_START:
                self._handle_game_start(event)
            case EventType.GAME_END:
                self._handle_game_end(event)

    def _handle_game_start(self, event: GameStart) -> None:
        if self._settings is not None:
            log.info("ignoring duplicate game start")
            return

        players = tuple(p for p in event.players if p.type is not None and p.type != PlayerType.EMPTY)
        self._settings = replace(event, players=players)
        self.state = ParserState.IN_PROGRESS

        # Sheik/Zelda character ids are only correct in the game start event from 1.6.0 onwards
        if version_at_least(event.slp_version, (1, 6, 0)):
            self._complete_settings()

    def _complete_settings(self) -> None:
        if self._settings_complete:
            return
        self._settings_complete = True
        self._emit(ParseEvent.SETTINGS, self._settings)

    def _is_legacy(self) -> bool:
        # frame bookends, and therefore rollback, were introduced after 2.2.0.
        # Nothing is finalized before the settings are complete so stat consumers always see settings first.
        if self.settings is None:
            return False
        version = self.settings.slp_version
        return version is None or not version_at_least(version, (2, 2, 1))

    def _write_frame(self, frame: int) -> FrameEntry:
        """Returns the entry for `frame`, recording a rollback if the frame is being written a second time"""
        entry = self.frames.get(frame)
        if entry is None:
            entry = FrameEntry(frame)
            self.frames[frame] = entry
        elif self._writing != frame:
            snapshot = entry.copy()
            self.rollback_frames.setdefault(frame, []).append(snapshot)
            if self._last_rollback is not None and self._last_rollback == frame - 1 and self.rollback_lengths:
                self.rollback_lengths[-1] += 1
            else:
                self.rollback_lengths.append(1)
            self._last_rollback = frame
            entry.items = []
            entry.is_transfer_complete = False
            self._emit(ParseEvent.ROLLBACK_FRAME, snapshot)

        self._writing = frame
        if self.latest_frame_index is None or frame > self.latest_frame_index:
            self.latest_frame_index = frame
        return entry

    def _handle_frame_update(self, command: int, event: PreFrameUpdate | PostFrameUpdate) -> None:
        if event.frame is None or event.player_index is None:
            log.debug("dropping frame update with no frame or player index")
            return

        entry = self._write_frame(event.frame)
        container = entry.followers if event.is_follower else entry.players
        data = container.get(event.player_index)
        if data is None:
            data = PlayerFrameData()
            container[event.player_index] = data

        if command == EventType.FRAME_PRE:
            data.pre = event
        else:
            data.post = event
            self._handle_post_frame(event)

        # Legacy replays have no bookends, a new frame number means the previous frame is done
        if self._is_legacy():
            previous = self.frames.get(event.frame - 1)
            if previous is not None and not previous.is_transfer_complete:
                previous.is_transfer_complete = True
                self._emit(ParseEvent.FRAME, previous)
            self._finalize_frames(event.frame - 1)

    def _handle_post_frame(self, event: PostFrameUpdate) -> None:
        if self._settings is None or self._settings_complete:
            return

        if event.frame > FIRST_FRAME_INDEX:
            self._complete_settings()
            return

        # Older replays report Zelda for both Sheik and Zelda in the game start event. The first frame has the
        # in-game character, which is used to fix the settings.
        if event.is_follower or event.internal_character_id not in (InGameCharacter.SHEIK, InGameCharacter.ZELDA):
            return

        character_id = CSSCharacter.from_internal_id(event.internal_character_id)
        self._settings = replace(
            self._settings,
            players=tuple(
                replace(p, character_id=int(character_id)) if p.player_index == event.player_index else p
                for p in self._settings.players
            ),
        )

    def _handle_item(self, event: ItemUpdate) -> None:
        if event.frame is None:
            log.debug("dropping item update with no frame")
            return
        self._write_frame(event.frame).items.append(event)

    def _handle_frame_bookend(self, event: FrameBookend) -> None:
        if event.frame is None:
            log.debug("dropping frame bookend with no frame")
            return

        entry = self.frames.get(event.frame)
        if entry is not None:
            entry.is_transfer_complete = True
            self._emit(ParseEvent.FRAME, entry)
        self._writing = None

        latest_finalized = event.latest_finalized_frame
        if latest_finalized is not None and latest_finalized >= FIRST_FRAME_INDEX:
            self._finalize_frames(latest_finalized)
        else:
            self._finalize_frames(event.frame - MAX_ROLLBACK_FRAMES)

    def _handle_game_end(self, event: GameEnd) -> None:
        if self.latest_frame_index is not None:
            self._finalize_frames(self.latest_frame_index)

        self.game_end = event
        self.state = ParserState.COMPLETE
        self._emit(ParseEvent.END, event)

    def _finalize_frames(self, target: int) -> None:
        """Copies every unfinalized frame up to and including `target` into `finalized_frames`, in order"""
        if not self.frames or self.latest_frame_index is None:
            return

        target = min(target, self.latest_frame_index)
        if self.last_finalized_frame is None:
            start = min(self.frames)
        else:
            start = self.last_finalized_frame + 1

        for frame in range(start, target + 1):
            entry = self.frames.get(frame)
            if entry is None:
                continue
            snapshot = entry.copy()
            self.finalized_frames[frame] = snapshot
            self.last_finalized_frame = frame
            self._emit(ParseEvent.FINALIZED_FRAME, snapshot)

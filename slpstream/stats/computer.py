from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from ..assembler import FrameEntry
from ..event import GameStart
from ..log import log


@dataclass
class StatOptions:
    process_on_the_fly: bool = False
    """Process each finalized frame as soon as it is added instead of waiting for `process()`"""


class StatComputer(ABC):
    """Base for per-frame stat computers.

    Computers are fed every completed frame exactly once, in ascending frame order. `all_frames` contains every
    frame added so far, so computers can look backwards (e.g. the previous frame) but never forwards.
    """

    @abstractmethod
    def setup(self, settings: GameStart) -> None:
        pass

    @abstractmethod
    def process_frame(self, frame: FrameEntry, all_frames: dict[int, FrameEntry]) -> None:
        pass

    @abstractmethod
    def fetch(self) -> Any:
        pass


class StatsPipeline:
    """Feeds finalized frames to a set of StatComputers in order.

    Frames can be added one at a time as a replay is being written, `process()` only advances over frames that
    contain post-frame data for every player, so a partially transferred frame is picked up on a later call.
    """

    def __init__(self, opts: StatOptions | None = None):
        self.opts = opts or StatOptions()
        self.computers: list[StatComputer] = []
        self.settings: GameStart | None = None
        self.frames: dict[int, FrameEntry] = {}
        self.last_processed_frame: int | None = None

    def register(self, *computers: StatComputer) -> None:
        self.computers.extend(computers)

    def setup(self, settings: GameStart) -> None:
        self.settings = settings
        self.frames = {}
        self.last_processed_frame = None
        for computer in self.computers:
            computer.setup(settings)

    def add_frame(self, frame: FrameEntry) -> None:
        self.frames[frame.frame] = frame
        if self.opts.process_on_the_fly:
            self.process()

    def _is_complete(self, frame: FrameEntry) -> bool:
        for player in self.settings.players:
            data = frame.players.get(player.player_index)
            if data is None or data.post is None:
                return False
        return True

    def process(self) -> None:
        if self.settings is None or not self.frames:
            return

        next_frame = min(self.frames) if self.last_processed_frame is None else self.last_processed_frame + 1
        while next_frame in self.frames:
            frame = self.frames[next_frame]
            if not self._is_complete(frame):
                log.debug("frame %d is missing post-frame data, waiting" % next_frame)
                return

            for computer in self.computers:
                computer.process_frame(frame, self.frames)

            self.last_processed_frame = next_frame
            next_frame += 1

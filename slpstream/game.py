from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import BinaryIO, Callable

from .assembler import FrameEntry, ParseEvent, SlpParser
from .container import get_metadata, open_slp_file
from .event import Event, GameEnd, GameStart
from .metadata import Metadata
from .parse import iterate_events
from .reader import get_source
from .stats import (
    ActionComputer,
    ActionCounts,
    ComboComputer,
    ComboData,
    Combos,
    ConversionComputer,
    ConversionData,
    Conversions,
    InputComputer,
    InputCounts,
    OverallData,
    StatOptions,
    StatsPipeline,
    StockComputer,
    Stocks,
    generate_overall_stats,
)
from .util import Base, Enum


@dataclass
class GameStats:
    """Everything computed by the stat pipeline for a single game. Once the game has ended this never changes."""

    game_complete: bool
    last_frame: int | None
    playable_frame_count: int
    stocks: Stocks
    conversions: Conversions
    combos: Combos
    action_counts: list[ActionCounts]
    inputs: list[InputCounts]
    overall: list[OverallData]


@dataclass
class RollbackStats:
    frames: int = 0
    """Number of frame snapshots that were superseded by a re-simulation"""
    lengths: list[int] = field(default_factory=list)
    """Number of consecutive frames re-simulated by each rollback"""


class SlippiGame(Base):
    """Replay data from a game of Super Smash Brothers Melee.

    Reading is lazy: each query reads whatever has been written to the source since the previous query, so the same
    object can be polled while Dolphin is still recording the replay.

    :param source: replay path, bytes-like buffer, or seekable binary stream
    :param opts: stat processing options
    """

    def __init__(self, source: BinaryIO | str | os.PathLike | bytes, opts: StatOptions | None = None):
        self._source = get_source(source)
        self._read_position: int | None = None
        self._metadata: dict | None = None
        self._final_stats: GameStats | None = None

        self._stock_computer = StockComputer()
        self._combo_computer = ComboComputer()
        self._conversion_computer = ConversionComputer()
        self._input_computer = InputComputer()
        self._action_computer = ActionComputer()

        self._stats = StatsPipeline(opts)
        self._stats.register(
            self._stock_computer,
            self._conversion_computer,
            self._combo_computer,
            self._input_computer,
            self._action_computer,
        )

        self._parser = SlpParser(
            {
                ParseEvent.SETTINGS: self._stats.setup,
                ParseEvent.FINALIZED_FRAME: self._stats.add_frame,
            }
        )

    def _process(self, settings_only: bool = False) -> None:
        if self._parser.game_end is not None:
            return

        slp_file = open_slp_file(self._source)

        def on_event(command: int, event: Event | None) -> bool:
            self._parser.handle_command(command, event)
            return settings_only and self._parser.settings is not None

        self._read_position = iterate_events(slp_file, on_event, self._read_position)

    def get_settings(self) -> GameStart | None:
        """Game settings, or None if they have not been written yet. Only reads as far as it needs to."""
        self._process(settings_only=True)
        return self._parser.settings

    def get_latest_frame(self) -> FrameEntry | None:
        self._process()
        return self._parser.get_latest_frame()

    def get_frames(self) -> dict[int, FrameEntry]:
        """The latest data for every frame, including frames that may still be rolled back"""
        self._process()
        return self._parser.frames

    def get_finalized_frames(self) -> dict[int, FrameEntry]:
        self._process()
        return self._parser.finalized_frames

    def get_rollback_frames(self) -> dict[int, list[FrameEntry]]:
        self._process()
        return self._parser.rollback_frames

    def get_rollback_stats(self) -> RollbackStats:
        self._process()
        return RollbackStats(self._parser.get_rollback_count(), list(self._parser.rollback_lengths))

    def get_game_end(self) -> GameEnd | None:
        self._process()
        return self._parser.game_end

    def get_stats(self) -> GameStats | None:
        if self._final_stats is not None:
            return self._final_stats

        self._process()
        settings = self._parser.settings
        if settings is None:
            return None

        self._stats.process()

        playable_frame_count = self._parser.get_playable_frame_count()
        conversions = self._conversion_computer.fetch()
        inputs = self._input_computer.fetch()
        stats = GameStats(
            game_complete=self._parser.game_end is not None,
            last_frame=self._parser.latest_frame_index,
            playable_frame_count=playable_frame_count,
            stocks=self._stock_computer.fetch(),
            conversions=conversions,
            combos=self._combo_computer.fetch(),
            action_counts=self._action_computer.fetch(),
            inputs=inputs,
            overall=generate_overall_stats(settings, inputs, conversions, playable_frame_count),
        )

        # Stats can't change after the game ends
        if stats.game_complete:
            self._final_stats = stats

        return stats

    def on_combo_event(self, listener: Callable[[Enum, ComboData], None]) -> None:
        """Registers a listener for combo start/extend/end events, delivered as frames are processed"""
        self._combo_computer.on_event(listener)

    def on_conversion_event(self, listener: Callable[[Enum, ConversionData], None]) -> None:
        """Registers a listener called with each conversion as it closes. Opening types are only assigned by
        `get_stats`, so they read as UNKNOWN inside the listener."""
        self._conversion_computer.on_event(listener)

    def get_metadata(self) -> dict | None:
        """Raw metadata dict, or None if the replay has no (readable) metadata yet"""
        if self._metadata is not None:
            return self._metadata

        self._metadata = get_metadata(open_slp_file(self._source))
        return self._metadata

    def get_parsed_metadata(self) -> Metadata | None:
        metadata = self.get_metadata()
        return Metadata._parse(metadata) if metadata is not None else None

    def get_file_path(self) -> str | None:
        path = self._source.path
        return str(path) if path is not None else None

from __future__ import annotations

from abc import ABC
from collections import UserList
from dataclasses import dataclass, field

import polars as pl

from ..util import Enum


class Stat(ABC):
    pass


class OpeningType(Enum):
    UNKNOWN = "unknown"
    NEUTRAL_WIN = "neutral-win"
    COUNTER_ATTACK = "counter-attack"
    TRADE = "trade"


# ---------------------------------- Stocks ---------------------------------- #


@dataclass
class StockData(Stat):
    """Contains all data for a single stock.

    Attributes:
        player_index : int
        start_frame : int
            First frame the player was alive on this stock
        end_frame : int | None
            Frame the stock was lost on, None while the stock is still alive
        start_percent : float
        current_percent : float
        end_percent : float | None
            Percent on the last frame before the stock was lost
        count : int
            Stocks remaining at the start of this stock
        death_animation : int | None
            Action state on the frame the stock was lost
    """

    player_index: int
    start_frame: int
    count: int | None
    start_percent: float = 0.0
    current_percent: float = 0.0
    end_frame: int | None = None
    end_percent: float | None = None
    death_animation: int | None = None


# ----------------------------- Combos/Conversions ---------------------------- #


@dataclass
class MoveLanded(Stat):
    """Contains all data for a single move connecting"""

    player_index: int
    """Index of the attacking player"""
    frame: int
    move_id: int | None
    hit_count: int = 0
    damage: float = 0.0


@dataclass
class ComboData(Stat):
    """Contains a single combo, including movelist

    `player_index` is the player being comboed, `last_hit_by` the player doing the comboing.

    Helper functions for filtering combos include:
    minimum_damage(num)
    minimum_length(num)
    total_damage()"""

    player_index: int
    last_hit_by: int | None
    start_frame: int
    start_percent: float
    current_percent: float
    end_frame: int | None = None
    end_percent: float | None = None
    moves: list[MoveLanded] = field(default_factory=list)
    did_kill: bool = False

    def total_damage(self) -> float:
        """Calculates total damage of the combo"""
        return self.current_percent - self.start_percent

    def minimum_length(self, num: int | float) -> bool:
        """Recieves number, returns True if combo's move count is greater than number"""
        return len(self.moves) >= num

    def minimum_damage(self, num: int | float) -> bool:
        """Recieves number, returns True if combo's total damage was over number"""
        return self.total_damage() >= num


@dataclass
class ConversionData(ComboData):
    """A combo that lasts until the victim has been back in control for a while, rather than until they escape
    hitstun. `opening_type` describes how the conversion started."""

    opening_type: OpeningType = OpeningType.UNKNOWN


# ---------------------------------- Actions --------------------------------- #


@dataclass
class AttackCounts:
    jab1: int = 0
    jab2: int = 0
    jab3: int = 0
    jabm: int = 0
    dash: int = 0
    ftilt: int = 0
    utilt: int = 0
    dtilt: int = 0
    fsmash: int = 0
    usmash: int = 0
    dsmash: int = 0
    nair: int = 0
    fair: int = 0
    bair: int = 0
    uair: int = 0
    dair: int = 0


@dataclass
class GrabCounts:
    success: int = 0
    fail: int = 0


@dataclass
class ThrowCounts:
    up: int = 0
    forward: int = 0
    back: int = 0
    down: int = 0


@dataclass
class GroundTechCounts:
    away: int = 0
    toward: int = 0
    neutral: int = 0
    fail: int = 0


@dataclass
class WallTechCounts:
    success: int = 0
    fail: int = 0


@dataclass
class LCancelCounts:
    success: int = 0
    fail: int = 0


@dataclass
class ActionCounts(Stat):
    player_index: int
    wavedash_count: int = 0
    waveland_count: int = 0
    air_dodge_count: int = 0
    dash_dance_count: int = 0
    spot_dodge_count: int = 0
    ledgegrab_count: int = 0
    roll_count: int = 0
    l_cancel_count: LCancelCounts = field(default_factory=LCancelCounts)
    attack_count: AttackCounts = field(default_factory=AttackCounts)
    grab_count: GrabCounts = field(default_factory=GrabCounts)
    throw_count: ThrowCounts = field(default_factory=ThrowCounts)
    ground_tech_count: GroundTechCounts = field(default_factory=GroundTechCounts)
    wall_tech_count: WallTechCounts = field(default_factory=WallTechCounts)


# ---------------------------------- Inputs ---------------------------------- #


@dataclass
class InputCounts(Stat):
    """Number of new inputs per player. A held button or stick only counts once."""

    player_index: int
    buttons: int = 0
    triggers: int = 0
    joystick: int = 0
    cstick: int = 0

    @property
    def total(self) -> int:
        return self.buttons + self.triggers + self.joystick + self.cstick


# ---------------------------------- Overall --------------------------------- #


@dataclass
class Ratio:
    count: float
    total: float
    ratio: float | None

    @classmethod
    def of(cls, count: float, total: float) -> Ratio:
        return cls(count, total, count / total if total else None)


@dataclass
class OverallData(Stat):
    player_index: int
    input_counts: InputCounts
    conversion_count: int
    total_damage: float
    kill_count: int
    inputs_per_minute: Ratio
    openings_per_kill: Ratio
    damage_per_opening: Ratio
    neutral_win_ratio: Ratio
    counter_hit_ratio: Ratio
    beneficial_trade_ratio: Ratio


# ---------------------------------------------------------------------------- #
#                                  Containers                                  #
# ---------------------------------------------------------------------------- #


class StatList(ABC, UserList):
    data: list[Stat]
    _schema: dict

    def _row(self, stat: Stat) -> dict:
        return vars(stat)

    def to_polars(self) -> pl.DataFrame:
        """Returns a Polars DataFrame representing the contents of the container, one row per stat.

        Enum members are stored by value, nested movelists are summarized as `move_count` and `total_damage`.
        """
        rows = [self._row(stat) for stat in self.data if stat is not None]
        columns = {}
        for name in self._schema:
            columns[name] = [row[name].value if isinstance(row[name], Enum) else row[name] for row in rows]
        return pl.DataFrame(columns, schema=self._schema)


class Stocks(StatList):
    """Iterable wrapper, treat as list[StockData]."""

    data: list[StockData]
    _schema = {
        "player_index": pl.Int64,
        "start_frame": pl.Int64,
        "end_frame": pl.Int64,
        "count": pl.Int64,
        "start_percent": pl.Float64,
        "current_percent": pl.Float64,
        "end_percent": pl.Float64,
        "death_animation": pl.Int64,
    }


class Combos(StatList):
    """Iterable wrapper, treat as list[ComboData]."""

    data: list[ComboData]
    _schema = {
        "player_index": pl.Int64,
        "last_hit_by": pl.Int64,
        "start_frame": pl.Int64,
        "end_frame": pl.Int64,
        "start_percent": pl.Float64,
        "current_percent": pl.Float64,
        "end_percent": pl.Float64,
        "move_count": pl.Int64,
        "total_damage": pl.Float64,
        "did_kill": pl.Boolean,
    }

    def _row(self, stat: ComboData) -> dict:
        return vars(stat) | {"move_count": len(stat.moves), "total_damage": stat.total_damage()}


class Conversions(Combos):
    """Iterable wrapper, treat as list[ConversionData]."""

    data: list[ConversionData]
    _schema = Combos._schema | {"opening_type": pl.Utf8}

from __future__ import annotations

from itertools import groupby

from ..util import Enum
from .combo_computer import ComboState, PunishComputer
from .common import PUNISH_RESET_FRAMES, is_in_control
from .stat_types import ConversionData, Conversions, OpeningType


class ConversionEvent(Enum):
    CONVERSION = "CONVERSION"


class ConversionComputer(PunishComputer):
    """A conversion (punish) lasts until the victim has been back in control for PUNISH_RESET_FRAMES frames.

    Opening types are assigned when the results are fetched, since a trade can only be recognized once every
    conversion starting on the same frame is known.
    """

    reset_frames = PUNISH_RESET_FRAMES
    record_type = ConversionData
    container_type = Conversions
    end_event = ConversionEvent.CONVERSION

    def _update_reset_counter(self, state: ComboState, victim_state: int, in_punish: bool) -> None:
        if in_punish:
            state.reset_counter = 0

        # once the victim has been in control for a frame, the counter keeps running until they get hit again
        if is_in_control(victim_state) or state.reset_counter > 0:
            state.reset_counter += 1

    def _populate_opening_types(self) -> None:
        # Every conversion is reclassified on each fetch. A conversion that was still open on an earlier fetch has
        # no end frame yet, and that end frame decides whether later conversions are counter-attacks.
        last_end_frame_by_victim: dict[int, int | None] = {}
        ordered = sorted(self.records, key=lambda c: c.start_frame)

        for _, group in groupby(ordered, key=lambda c: c.start_frame):
            conversions = list(group)
            is_trade = len(conversions) >= 2
            for conversion in conversions:
                last_end_frame_by_victim[conversion.player_index] = conversion.end_frame
                if is_trade:
                    conversion.opening_type = OpeningType.TRADE
                    continue

                # A counter-attack starts while the attacker is still being converted on
                attacker = conversion.moves[-1].player_index if conversion.moves else conversion.player_index
                attacker_end_frame = last_end_frame_by_victim.get(attacker)
                if attacker_end_frame is not None and attacker_end_frame > conversion.start_frame:
                    conversion.opening_type = OpeningType.COUNTER_ATTACK
                else:
                    conversion.opening_type = OpeningType.NEUTRAL_WIN

    def fetch(self) -> Conversions:
        self._populate_opening_types()
        return self.records

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import Callable

from ..assembler import FrameEntry
from ..event import GameStart, PostFrameUpdate
from ..util import Enum
from .common import (
    COMBO_STRING_RESET_FRAMES,
    calc_damage_taken,
    did_lose_stock,
    get_attacker_index,
    get_post,
    is_cmd_grabbed,
    is_damaged,
    is_downed,
    is_dying,
    is_grabbed,
    is_teching,
)
from .computer import StatComputer
from .stat_types import ComboData, Combos, MoveLanded


class ComboEvent(Enum):
    """Enumeration for combo states"""

    COMBO_START = "COMBO_START"
    COMBO_EXTEND = "COMBO_EXTEND"
    COMBO_END = "COMBO_END"


@dataclass
class ComboState:
    """Contains info used during combo calculation to build the final combo"""

    combo: ComboData | None = None
    move: MoveLanded | None = None
    reset_counter: int = 0
    last_hit_animation: int | None = None
    event: Enum | None = None


class PunishComputer(StatComputer):
    """Shared hit tracking for combos and conversions.

    State is tracked per victim. The attacker is whoever the victim was last hit by, so the same logic covers 1v1s,
    free-for-alls and doubles. Subclasses decide when the punish is over via `_update_reset_counter`.
    """

    reset_frames: int
    record_type: type[ComboData]
    container_type: type[Combos]
    start_event: Enum | None = None
    extend_event: Enum | None = None
    end_event: Enum | None = None

    def __init__(self):
        self.settings: GameStart | None = None
        self.records = self.container_type()
        self.states: dict[int, ComboState] = {}
        self.listeners: list[Callable[[Enum, ComboData], None]] = []

    def on_event(self, listener: Callable[[Enum, ComboData], None]) -> None:
        self.listeners.append(listener)

    def setup(self, settings: GameStart) -> None:
        self.settings = settings
        self.records = self.container_type()
        self.states = {p.player_index: ComboState() for p in settings.players}

    def fetch(self) -> Combos:
        return self.records

    @abstractmethod
    def _update_reset_counter(self, state: ComboState, victim_state: int, in_punish: bool) -> None:
        pass

    def process_frame(self, frame: FrameEntry, all_frames: dict[int, FrameEntry]) -> None:
        for victim_index, state in self.states.items():
            victim = get_post(all_frames, frame.frame, victim_index)
            if victim is None or victim.action_state_id is None:
                continue
            self._process_victim(frame.frame, all_frames, state, victim)

    def _process_victim(
        self,
        frame_number: int,
        all_frames: dict[int, FrameEntry],
        state: ComboState,
        victim: PostFrameUpdate,
    ) -> None:
        prev_victim = get_post(all_frames, frame_number - 1, victim.player_index)
        attacker_index = get_attacker_index(self.settings, victim)
        attacker = prev_attacker = None
        if attacker_index is not None:
            attacker = get_post(all_frames, frame_number, attacker_index)
            prev_attacker = get_post(all_frames, frame_number - 1, attacker_index)

        victim_state = victim.action_state_id
        in_punish = is_damaged(victim_state) or is_grabbed(victim_state) or is_cmd_grabbed(victim_state)
        damage_taken = calc_damage_taken(victim, prev_victim) if prev_victim is not None else 0.0

        # The attack changing (or restarting, for moves like jab that can be repeated quickly) means the next
        # hit belongs to a new move. Older replays have no counter, so only the action state is compared.
        if attacker is not None:
            action_changed = attacker.action_state_id != state.last_hit_animation
            counter = attacker.action_state_counter
            prev_counter = prev_attacker.action_state_counter if prev_attacker is not None else None
            counter_reset = counter is not None and prev_counter is not None and counter < prev_counter
            if action_changed or counter_reset:
                state.last_hit_animation = None

        started = False
        if in_punish:
            if state.combo is None:
                state.combo = self.record_type(
                    player_index=victim.player_index,
                    last_hit_by=attacker_index,
                    start_frame=frame_number,
                    start_percent=(prev_victim.percent or 0.0) if prev_victim is not None else 0.0,
                    current_percent=victim.percent or 0.0,
                )
                self.records.append(state.combo)
                started = True

            if attacker_index is not None:
                state.combo.last_hit_by = attacker_index

            if damage_taken and attacker is not None:
                # multi-hit moves (e.g. fox's drill) only count as one move
                if state.last_hit_animation is None:
                    state.move = MoveLanded(
                        player_index=attacker_index,
                        frame=frame_number,
                        move_id=attacker.last_attack_landed,
                    )
                    state.combo.moves.append(state.move)
                    if not started:
                        state.event = self.extend_event

                if state.move is not None:
                    state.move.hit_count += 1
                    state.move.damage += damage_taken

                # The previous frame's animation should be the move that actually connected, even on trades
                state.last_hit_animation = prev_attacker.action_state_id if prev_attacker is not None else None

            if started:
                state.event = self.start_event

        combo = state.combo
        if combo is None:
            return

        lost_stock = did_lose_stock(victim, prev_victim)
        if not lost_stock:
            combo.current_percent = victim.percent or 0.0

        self._update_reset_counter(state, victim_state, in_punish)

        should_terminate = False
        if lost_stock:
            combo.did_kill = True
            should_terminate = True
        if state.reset_counter > self.reset_frames:
            should_terminate = True

        if should_terminate:
            combo.end_frame = frame_number
            combo.end_percent = (prev_victim.percent or 0.0) if prev_victim is not None else 0.0
            state.event = self.end_event
            state.combo = None
            state.move = None
            state.reset_counter = 0

        if state.event is not None:
            for listener in self.listeners:
                listener(state.event, combo)
            state.event = None


class ComboComputer(PunishComputer):
    """A combo lasts as long as the victim keeps getting hit before they can act."""

    reset_frames = COMBO_STRING_RESET_FRAMES
    record_type = ComboData
    container_type = Combos
    start_event = ComboEvent.COMBO_START
    extend_event = ComboEvent.COMBO_EXTEND
    end_event = ComboEvent.COMBO_END

    def _update_reset_counter(self, state: ComboState, victim_state: int, in_punish: bool) -> None:
        if (
            in_punish
            or is_teching(victim_state)
            or is_downed(victim_state)
            or is_dying(victim_state)
        ):
            state.reset_counter = 0
        else:
            state.reset_counter += 1

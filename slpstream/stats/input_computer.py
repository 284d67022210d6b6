from __future__ import annotations

from ..assembler import FrameEntry
from ..controller import newly_pressed, trigger_pressed
from ..event import FIRST_PLAYABLE_FRAME, GameStart, PreFrameUpdate
from .common import JoystickRegion, get_joystick_region
from .computer import StatComputer
from .stat_types import InputCounts


def _get_pre(frames: dict[int, FrameEntry], frame: int, player_index: int) -> PreFrameUpdate | None:
    entry = frames.get(frame)
    if entry is None:
        return None
    data = entry.players.get(player_index)
    return None if data is None else data.pre


def _stick_moved(x, y, prev_x, prev_y) -> bool:
    # returning to the deadzone is not an input
    region = get_joystick_region(x, y)
    return region != get_joystick_region(prev_x, prev_y) and region != JoystickRegion.DEAD_ZONE


class InputComputer(StatComputer):
    """Counts new inputs per player, starting from the first frame players can act"""

    def __init__(self):
        self.inputs: dict[int, InputCounts] = {}

    def setup(self, settings: GameStart) -> None:
        self.inputs = {p.player_index: InputCounts(p.player_index) for p in settings.players}

    def process_frame(self, frame: FrameEntry, all_frames: dict[int, FrameEntry]) -> None:
        if frame.frame < FIRST_PLAYABLE_FRAME:
            return

        for player_index, counts in self.inputs.items():
            pre = _get_pre(all_frames, frame.frame, player_index)
            prev_pre = _get_pre(all_frames, frame.frame - 1, player_index)
            if pre is None or prev_pre is None:
                continue

            if pre.physical_buttons is not None and prev_pre.physical_buttons is not None:
                counts.buttons += int(newly_pressed(pre.physical_buttons, prev_pre.physical_buttons)).bit_count()

            if _stick_moved(pre.joystick_x, pre.joystick_y, prev_pre.joystick_x, prev_pre.joystick_y):
                counts.joystick += 1

            if _stick_moved(pre.cstick_x, pre.cstick_y, prev_pre.cstick_x, prev_pre.cstick_y):
                counts.cstick += 1

            if trigger_pressed(pre.physical_l_trigger, prev_pre.physical_l_trigger):
                counts.triggers += 1

            if trigger_pressed(pre.physical_r_trigger, prev_pre.physical_r_trigger):
                counts.triggers += 1

    def fetch(self) -> list[InputCounts]:
        return list(self.inputs.values())

from __future__ import annotations

from enum import IntFlag


class PhysicalButtons(IntFlag):
    """Physical button-state bitmask from the pre-frame update"""

    START = 2**12
    Y = 2**11
    X = 2**10
    B = 2**9
    A = 2**8
    L = 2**6
    R = 2**5
    Z = 2**4
    DPAD_UP = 2**3
    DPAD_DOWN = 2**2
    DPAD_RIGHT = 2**1
    DPAD_LEFT = 2**0
    NONE = 0

    def pressed(self) -> list[PhysicalButtons]:
        """Returns a list of all buttons being pressed."""
        pressed = []
        for button in self.__class__:
            if button and self & button:
                pressed.append(button)
        return pressed


# START is excluded, pausing is not an input
COUNTED_BUTTONS_MASK = 0xFFF

# Analog trigger presses only count once they pass the threshold where the game registers a shield/airdodge
TRIGGER_PRESS_THRESHOLD = 0.3


def newly_pressed(buttons: int, prev_buttons: int) -> PhysicalButtons:
    """Buttons that are pressed this frame but were not pressed last frame"""
    return PhysicalButtons(~prev_buttons & buttons & COUNTED_BUTTONS_MASK)


def trigger_pressed(value: float | None, prev_value: float | None) -> bool:
    return (prev_value or 0.0) < TRIGGER_PRESS_THRESHOLD <= (value or 0.0)

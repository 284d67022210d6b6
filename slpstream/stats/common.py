from __future__ import annotations

from ..assembler import FrameEntry
from ..enums.state import ActionRange, ActionState
from ..event import GameStart, PostFrameUpdate
from ..util import IntEnum

# Frames without being hit/grabbed before a conversion or combo string is considered over
PUNISH_RESET_FRAMES = 45
COMBO_STRING_RESET_FRAMES = 45

# Values of last_hit_by at or above this mean nobody
NO_PLAYER = 4

# ---------------------------------------------------------------------------- #
#                                 State Helpers                                #
# ---------------------------------------------------------------------------- #


def is_damaged(action_state: int) -> bool:
    """Takes action state, returns whether or not the player is in a damaged state.
    This includes tumble and both jab reset states."""
    return (
        (ActionRange.DAMAGE_START <= action_state <= ActionRange.DAMAGE_END)
        or action_state == ActionState.DAMAGE_FALL
        or action_state == ActionState.DOWN_DAMAGE_U
        or action_state == ActionState.DOWN_DAMAGE_D
    )


def is_grabbed(action_state: int) -> bool:
    """Takes action state, returns whether or not player is grabbed"""
    return ActionRange.CAPTURE_START <= action_state <= ActionRange.CAPTURE_END


def is_cmd_grabbed(action_state: int) -> bool:
    """Takes action state, returns whether or not player is command grabbed
    (falcon up b, kirby succ, cargo throw, etc)"""
    return (
        (ActionRange.COMMAND_GRAB_RANGE1_START <= action_state <= ActionRange.COMMAND_GRAB_RANGE1_END)
        or (ActionRange.COMMAND_GRAB_RANGE2_START <= action_state <= ActionRange.COMMAND_GRAB_RANGE2_END)
    ) and not action_state == ActionState.BARREL_WAIT


def is_teching(action_state: int) -> bool:
    return ActionRange.TECH_START <= action_state <= ActionRange.TECH_END


def is_downed(action_state: int) -> bool:
    """Takes action state, returns whether or not player is downed (i.e. missed tech)"""
    return ActionRange.DOWN_START <= action_state <= ActionRange.DOWN_END


def is_dying(action_state: int) -> bool:
    """Takes action state, returns whether or not player is in the dying animation from any blast zone"""
    return ActionRange.DYING_START <= action_state <= ActionRange.DYING_END


def is_in_control(action_state: int) -> bool:
    """Takes action state, returns whether or not the player is actionable on the ground"""
    ground = ActionRange.GROUNDED_CONTROL_START <= action_state <= ActionRange.GROUNDED_CONTROL_END
    squat = ActionRange.SQUAT_START <= action_state <= ActionRange.SQUAT_END
    # jab 1 is excluded, it can be buffered out of hitstun/shieldstun
    ground_attack = ActionRange.GROUND_ATTACK_START < action_state <= ActionRange.GROUND_ATTACK_END
    return ground or squat or ground_attack or action_state == ActionState.CATCH


def is_missed_ground_tech(action_state: int) -> bool:
    return action_state == ActionState.DOWN_BOUND_U or action_state == ActionState.DOWN_BOUND_D


def is_rolling(action_state: int) -> bool:
    return action_state == ActionState.ESCAPE_F or action_state == ActionState.ESCAPE_B


def did_lose_stock(curr_frame: PostFrameUpdate | None, prev_frame: PostFrameUpdate | None) -> bool:
    """Takes current and previous frame, returns True if the stock count went down"""
    if curr_frame is None or prev_frame is None:
        return False
    if curr_frame.stocks_remaining is None or prev_frame.stocks_remaining is None:
        return False
    return prev_frame.stocks_remaining - curr_frame.stocks_remaining > 0


def calc_damage_taken(curr_frame: PostFrameUpdate, prev_frame: PostFrameUpdate) -> float:
    """Takes current and previous frames, returns float of the difference in damage between the two"""
    return (curr_frame.percent or 0.0) - (prev_frame.percent or 0.0)


# ---------------------------------------------------------------------------- #
#                                 Frame Helpers                                #
# ---------------------------------------------------------------------------- #


def get_post(frames: dict[int, FrameEntry], frame: int, player_index: int) -> PostFrameUpdate | None:
    entry = frames.get(frame)
    if entry is None:
        return None
    data = entry.players.get(player_index)
    return None if data is None else data.post


def get_opponent_indices(settings: GameStart, player_index: int) -> list[int]:
    """Every other player in the game, excluding teammates in team games"""
    me = next((p for p in settings.players if p.player_index == player_index), None)
    opponents = []
    for player in settings.players:
        if player.player_index == player_index:
            continue
        if settings.is_teams and me is not None and player.team_id == me.team_id:
            continue
        opponents.append(player.player_index)
    return opponents


def get_attacker_index(settings: GameStart, victim: PostFrameUpdate) -> int | None:
    """The player most recently credited with hitting `victim`, falling back to the only opponent in 1v1s"""
    last_hit_by = victim.last_hit_by
    player_indices = [p.player_index for p in settings.players]
    if last_hit_by is not None and last_hit_by < NO_PLAYER and last_hit_by != victim.player_index:
        if last_hit_by in player_indices:
            return last_hit_by

    opponents = get_opponent_indices(settings, victim.player_index)
    return opponents[0] if len(opponents) == 1 else None


class JoystickRegion(IntEnum):
    """Generalized control stick positions. Enumerated sequentially in clock-wise order starting at DEAD_ZONE = -1"""

    DEAD_ZONE = -1
    UP = 0
    UP_RIGHT = 1
    RIGHT = 2
    DOWN_RIGHT = 3
    DOWN = 4
    DOWN_LEFT = 5
    LEFT = 6
    UP_LEFT = 7


def get_joystick_region(stick_x: float | None, stick_y: float | None) -> JoystickRegion:
    region = JoystickRegion.DEAD_ZONE

    stick_x, stick_y = stick_x or 0.0, stick_y or 0.0

    if stick_x >= 0.2875 and stick_y >= 0.2875:
        region = JoystickRegion.UP_RIGHT

    elif stick_x >= 0.2875 and stick_y <= -0.2875:
        region = JoystickRegion.DOWN_RIGHT

    elif stick_x <= -0.2875 and stick_y <= -0.2875:
        region = JoystickRegion.DOWN_LEFT

    elif stick_x <= -0.2875 and stick_y >= 0.2875:
        region = JoystickRegion.UP_LEFT

    elif stick_y >= 0.2875:
        region = JoystickRegion.UP

    elif stick_x >= 0.2875:
        region = JoystickRegion.RIGHT

    elif stick_y <= -0.2875:
        region = JoystickRegion.DOWN

    elif stick_x <= -0.2875:
        region = JoystickRegion.LEFT

    return region

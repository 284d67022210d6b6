from __future__ import annotations

from collections import deque

from ..assembler import FrameEntry
from ..enums.state import ActionRange, ActionState
from ..event import GameStart, PostFrameUpdate
from .common import get_opponent_indices, get_post, is_missed_ground_tech, is_rolling
from .computer import StatComputer
from .stat_types import ActionCounts

DASH_DANCE_ANIMATIONS = [ActionState.DASH, ActionState.TURN, ActionState.DASH]
# Enough history to cover jumpsquat + airdodge + landing for any character
WAVEDASH_WINDOW = 8

_ATTACKS = {
    ActionState.ATTACK_11: "jab1",
    ActionState.ATTACK_12: "jab2",
    ActionState.ATTACK_13: "jab3",
    ActionState.ATTACK_100_START: "jabm",
    ActionState.ATTACK_DASH: "dash",
    ActionState.ATTACK_S_3_HI: "ftilt",
    ActionState.ATTACK_S_3_HI_S: "ftilt",
    ActionState.ATTACK_S_3_S: "ftilt",
    ActionState.ATTACK_S_3_LW_S: "ftilt",
    ActionState.ATTACK_S_3_LW: "ftilt",
    ActionState.ATTACK_HI_3: "utilt",
    ActionState.ATTACK_LW_3: "dtilt",
    ActionState.ATTACK_S_4_HI: "fsmash",
    ActionState.ATTACK_S_4_HI_S: "fsmash",
    ActionState.ATTACK_S_4_S: "fsmash",
    ActionState.ATTACK_S_4_LW_S: "fsmash",
    ActionState.ATTACK_S_4_LW: "fsmash",
    ActionState.ATTACK_HI_4: "usmash",
    ActionState.ATTACK_LW_4: "dsmash",
    ActionState.ATTACK_AIR_N: "nair",
    ActionState.ATTACK_AIR_F: "fair",
    ActionState.ATTACK_AIR_B: "bair",
    ActionState.ATTACK_AIR_HI: "uair",
    ActionState.ATTACK_AIR_LW: "dair",
}

_THROWS = {
    ActionState.THROW_HI: "up",
    ActionState.THROW_F: "forward",
    ActionState.THROW_B: "back",
    ActionState.THROW_LW: "down",
}


def is_grabbing(action_state: int | None) -> bool:
    return action_state == ActionState.CATCH or action_state == ActionState.CATCH_DASH


def is_grab_action(action_state: int) -> bool:
    """Grab pull, hold, pummel and throws"""
    return ActionState.CATCH < action_state <= ActionState.THROW_LW and action_state != ActionState.CATCH_DASH


def is_wavedash_initiation(action_state: int | None) -> bool:
    if action_state == ActionState.ESCAPE_AIR:
        return True
    return action_state is not None and (
        ActionRange.CONTROLLED_JUMP_START <= action_state <= ActionRange.CONTROLLED_JUMP_END
    )


class _PlayerState:
    __slots__ = ("counts", "animations", "prev_counter")

    def __init__(self, player_index: int):
        self.counts = ActionCounts(player_index)
        self.animations: deque[int] = deque(maxlen=WAVEDASH_WINDOW)
        self.prev_counter: float | None = None


class ActionComputer(StatComputer):
    def __init__(self):
        self.settings: GameStart | None = None
        self.states: dict[int, _PlayerState] = {}

    def setup(self, settings: GameStart) -> None:
        self.settings = settings
        self.states = {p.player_index: _PlayerState(p.player_index) for p in settings.players}

    def fetch(self) -> list[ActionCounts]:
        return [state.counts for state in self.states.values()]

    def process_frame(self, frame: FrameEntry, all_frames: dict[int, FrameEntry]) -> None:
        for player_index, state in self.states.items():
            post = get_post(all_frames, frame.frame, player_index)
            if post is None or post.action_state_id is None:
                continue

            opponent = None
            opponents = get_opponent_indices(self.settings, player_index)
            if opponents:
                opponent = get_post(all_frames, frame.frame, opponents[0])

            self._process_player(state, post, opponent)

    def _process_player(self, state: _PlayerState, post: PostFrameUpdate, opponent: PostFrameUpdate | None) -> None:
        counts = state.counts
        animation = post.action_state_id
        prev_animation = state.animations[-1] if state.animations else None
        state.animations.append(animation)

        # The counter restarting catches repeated actions, e.g. jab 1 into jab 1
        counter_reset = (
            post.action_state_counter is not None
            and state.prev_counter is not None
            and post.action_state_counter < state.prev_counter
        )
        state.prev_counter = post.action_state_counter
        is_new_action = animation != prev_animation or counter_reset

        if list(state.animations)[-3:] == DASH_DANCE_ANIMATIONS:
            counts.dash_dance_count += 1

        if is_new_action:
            if is_rolling(animation):
                counts.roll_count += 1
            elif animation == ActionState.ESCAPE:
                counts.spot_dodge_count += 1
            elif animation == ActionState.ESCAPE_AIR:
                counts.air_dodge_count += 1
            elif animation == ActionState.CLIFF_CATCH:
                counts.ledgegrab_count += 1

            attack = _ATTACKS.get(animation)
            if attack is not None:
                setattr(counts.attack_count, attack, getattr(counts.attack_count, attack) + 1)

            throw = _THROWS.get(animation)
            if throw is not None:
                setattr(counts.throw_count, throw, getattr(counts.throw_count, throw) + 1)

            self._count_techs(counts, post, opponent)

        if is_grabbing(prev_animation) and animation != prev_animation:
            if is_grab_action(animation):
                counts.grab_count.success += 1
            else:
                counts.grab_count.fail += 1
        # boost grabs go through the dash attack animation first
        if animation == ActionState.CATCH_DASH and prev_animation == ActionState.ATTACK_DASH:
            counts.attack_count.dash -= 1

        if ActionRange.AERIAL_ATTACK_START <= animation <= ActionRange.AERIAL_ATTACK_END:
            if post.l_cancel_status == 1:
                counts.l_cancel_count.success += 1
            elif post.l_cancel_status == 2:
                counts.l_cancel_count.fail += 1

        self._count_wavedash(state, prev_animation)

    def _count_techs(self, counts: ActionCounts, post: PostFrameUpdate, opponent: PostFrameUpdate | None) -> None:
        animation = post.action_state_id
        if is_missed_ground_tech(animation):
            counts.ground_tech_count.fail += 1
        elif animation == ActionState.PASSIVE:
            counts.ground_tech_count.neutral += 1
        elif animation in (ActionState.PASSIVE_STAND_F, ActionState.PASSIVE_STAND_B):
            facing_opponent = False
            if opponent is not None and None not in (post.position_x, opponent.position_x):
                opponent_direction = -1 if post.position_x > opponent.position_x else 1
                facing_opponent = post.facing_direction == opponent_direction
            # a forward tech moves in the direction the player is facing
            if (animation == ActionState.PASSIVE_STAND_F) == facing_opponent:
                counts.ground_tech_count.toward += 1
            else:
                counts.ground_tech_count.away += 1
        elif animation == ActionState.PASSIVE_WALL:
            counts.wall_tech_count.success += 1
        elif animation == ActionState.FLY_REFLECT_WALL:
            counts.wall_tech_count.fail += 1

    def _count_wavedash(self, state: _PlayerState, prev_animation: int | None) -> None:
        animation = state.animations[-1]
        if animation != ActionState.LAND_FALL_SPECIAL or not is_wavedash_initiation(prev_animation):
            return

        recent = set(state.animations)
        # Only airdodge and landing means the airdodge went on long enough to be a real airdodge
        if recent == {ActionState.LAND_FALL_SPECIAL, ActionState.ESCAPE_AIR}:
            return

        # airdodges used to wavedash/waveland aren't counted as airdodges
        if ActionState.ESCAPE_AIR in recent:
            state.counts.air_dodge_count -= 1

        if ActionState.KNEE_BEND in recent:
            state.counts.wavedash_count += 1
        else:
            state.counts.waveland_count += 1

from __future__ import annotations

from dataclasses import dataclass

from .enums.character import CSSCharacter, InGameCharacter
from .enums.stage import Stage
from .enums.state import ActionState
from .text import decode_shift_jis
from .util import (
    Enum,
    IntEnum,
    read_bool,
    read_bytes,
    read_float,
    read_int8,
    read_int32,
    read_uint8,
    read_uint16,
    read_uint32,
    try_enum,
)

# The first frame of the game is indexed -123, counting up to zero (which is when the word "GO" appears).
# But since players actually get control before frame zero (!!!), we need to record these frames.
FIRST_FRAME_INDEX = -123
FIRST_PLAYABLE_FRAME = -39
# Online play never re-simulates further back than this
MAX_ROLLBACK_FRAMES = 7


class EventType(IntEnum):
    """Slippi events that can appear in a game's `raw` data."""

    MESSAGE_SIZES = 0x35
    GAME_START = 0x36
    FRAME_PRE = 0x37
    FRAME_POST = 0x38
    GAME_END = 0x39
    FRAME_START = 0x3A
    ITEM = 0x3B
    FRAME_BOOKEND = 0x3C
    GECKO_LIST = 0x3D
    MESSAGE_SPLITTER = 0x10


class MatchType(Enum):
    OFFLINE = -1
    RANKED = 0
    UNRANKED = 1
    DIRECT = 2
    OTHER = 3


class PlayerType(IntEnum):
    HUMAN = 0
    CPU = 1
    DEMO = 2
    EMPTY = 3


def _controller_fix(dashback: int | None, shield_drop: int | None) -> str:
    if dashback != shield_drop:
        return "Mixed"
    match dashback:
        case 1:
            return "UCF"
        case 2:
            return "Dween"
        case _:
            return "None"


# ---------------------------------------------------------------------------- #
#                                  Game Start                                  #
# ---------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class PlayerSettings:
    """Per-port information from the Game Start event.

    Attributes:
        player_index : int
            0-indexed port
        port : int
            1-indexed port, as displayed in game
        character_id : int
            External (CSS) character ID
        type : int
            0 = human, 1 = cpu, 2 = demo, 3 = empty
        start_stocks : int
        character_color : int
        team_id : int
    `Minimum Replay Version: 1.0.0`:
        controller_fix : str
            "UCF", "Dween", "Mixed" if dashback and shield drop fixes differ, otherwise "None"
    `Minimum Replay Version: 1.3.0`:
        nametag : str
    `Minimum Replay Version: 3.9.0`:
        display_name : str
        connect_code : str
    """

    player_index: int
    port: int
    character_id: int | None
    type: int | None
    start_stocks: int | None
    character_color: int | None
    team_id: int | None
    controller_fix: str
    nametag: str
    display_name: str
    connect_code: str

    @property
    def character(self) -> CSSCharacter | int | None:
        return None if self.character_id is None else try_enum(CSSCharacter, self.character_id)

    @classmethod
    def _parse(cls, payload: bytes, player_index: int) -> PlayerSettings:
        offset = player_index * 0x24
        fix_offset = player_index * 0x8

        return cls(
            player_index=player_index,
            port=player_index + 1,
            character_id=read_uint8(payload, 0x65 + offset),
            type=read_uint8(payload, 0x66 + offset),
            start_stocks=read_uint8(payload, 0x67 + offset),
            character_color=read_uint8(payload, 0x68 + offset),
            team_id=read_uint8(payload, 0x6E + offset),
            controller_fix=_controller_fix(
                read_uint32(payload, 0x141 + fix_offset),
                read_uint32(payload, 0x145 + fix_offset),
            ),
            nametag=decode_shift_jis(read_bytes(payload, 0x161 + player_index * 0x10, 0x10)),
            display_name=decode_shift_jis(read_bytes(payload, 0x1A5 + player_index * 0x1F, 0x1F)),
            connect_code=decode_shift_jis(read_bytes(payload, 0x221 + player_index * 0xA, 0xA)),
        )


@dataclass(frozen=True, slots=True)
class GameStart:
    """Information used to initialize the game such as the game mode, settings, characters & stage.

    Attributes:
        slp_version : str
            Version of the recorder that generated the replay, "major.minor.build"
        is_teams : bool
        stage_id : int
        players : tuple[PlayerSettings, ...]
            One entry per port, including empty ports
        random_seed : int
    `Minimum Replay Version: 1.5.0`:
        is_pal : bool
    `Minimum Replay Version: 2.0.0`:
        is_frozen_ps : bool
    `Minimum Replay Version: 3.7.0`:
        scene : int
        game_mode : int
    `Minimum Replay Version: 3.12.0`:
        language : int
    `Minimum Replay Version: 3.14.0`:
        match_id : str
            In format mode.[mode]-[ISO 8601 timestamp]
        game_number : int
        tiebreaker_number : int
    """

    slp_version: str | None
    is_teams: bool | None
    stage_id: int | None
    players: tuple[PlayerSettings, ...]
    random_seed: int | None
    is_pal: bool | None
    is_frozen_ps: bool | None
    scene: int | None
    game_mode: int | None
    language: int | None
    match_id: str | None
    game_number: int | None
    tiebreaker_number: int | None

    @property
    def stage(self) -> Stage | int | None:
        return None if self.stage_id is None else try_enum(Stage, self.stage_id)

    @property
    def match_type(self) -> MatchType:
        if not self.match_id or len(self.match_id) < 6:
            return MatchType.OFFLINE
        match self.match_id[5]:
            case "r":
                return MatchType.RANKED
            case "u":
                return MatchType.UNRANKED
            case "d":
                return MatchType.DIRECT
            case _:
                return MatchType.OTHER

    @classmethod
    def _parse(cls, payload: bytes) -> GameStart:
        version = [read_uint8(payload, i) for i in range(1, 4)]
        slp_version = None if None in version else ".".join(str(v) for v in version)

        match_id = read_bytes(payload, 0x2BE, 50)
        if match_id is not None:
            match_id = match_id.split(b"\x00", 1)[0].decode("utf-8", errors="replace")

        return cls(
            slp_version=slp_version,
            is_teams=read_bool(payload, 0xD),
            stage_id=read_uint16(payload, 0x13),
            players=tuple(PlayerSettings._parse(payload, i) for i in range(4)),
            random_seed=read_uint32(payload, 0x13D),
            is_pal=read_bool(payload, 0x1A1),
            is_frozen_ps=read_bool(payload, 0x1A2),
            scene=read_uint8(payload, 0x1A3),
            game_mode=read_uint8(payload, 0x1A4),
            language=read_uint8(payload, 0x2BD),
            match_id=match_id,
            game_number=read_uint32(payload, 0x2F1),
            tiebreaker_number=read_uint32(payload, 0x2F5),
        )


# ---------------------------------------------------------------------------- #
#                                  Frame Data                                  #
# ---------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class PreFrameUpdate:
    """Controller and positional state before the game engine processes the frame's inputs.

    `physical_buttons`, `physical_l_trigger` and `physical_r_trigger` are the raw controller values, the rest are
    the values the game actually uses.
    """

    frame: int | None
    player_index: int | None
    is_follower: bool | None
    seed: int | None
    action_state_id: int | None
    position_x: float | None
    position_y: float | None
    facing_direction: float | None
    joystick_x: float | None
    joystick_y: float | None
    cstick_x: float | None
    cstick_y: float | None
    trigger: float | None
    buttons: int | None
    physical_buttons: int | None
    physical_l_trigger: float | None
    physical_r_trigger: float | None
    raw_joystick_x: int | None
    percent: float | None

    @classmethod
    def _parse(cls, payload: bytes) -> PreFrameUpdate:
        return cls(
            frame=read_int32(payload, 0x1),
            player_index=read_uint8(payload, 0x5),
            is_follower=read_bool(payload, 0x6),
            seed=read_uint32(payload, 0x7),
            action_state_id=read_uint16(payload, 0xB),
            position_x=read_float(payload, 0xD),
            position_y=read_float(payload, 0x11),
            facing_direction=read_float(payload, 0x15),
            joystick_x=read_float(payload, 0x19),
            joystick_y=read_float(payload, 0x1D),
            cstick_x=read_float(payload, 0x21),
            cstick_y=read_float(payload, 0x25),
            trigger=read_float(payload, 0x29),
            buttons=read_uint32(payload, 0x2D),
            physical_buttons=read_uint16(payload, 0x31),
            physical_l_trigger=read_float(payload, 0x33),
            physical_r_trigger=read_float(payload, 0x37),
            raw_joystick_x=read_int8(payload, 0x3B),
            percent=read_float(payload, 0x3C),
        )


@dataclass(frozen=True, slots=True)
class PostFrameUpdate:
    """Character state after the game engine has processed the frame.

    Attributes:
        internal_character_id : int
            In-game character ID. Differs from the CSS ID and is the only place Sheik/Zelda transformations show up
        action_state_id : int
        last_attack_landed : int
            Attack ID of the last move this character connected with
        last_hit_by : int
            Port index of the character that last hit this one. Values of 4 or more mean "nobody"
        stocks_remaining : int
        action_state_counter : float
            Number of frames spent in the current action state. Resets when the same state is re-entered
    `Minimum Replay Version: 2.0.0`:
        state_bit_flags_1-5 : int
        misc_action_state : float
        is_airborne : bool
        last_ground_id : int
        jumps_remaining : int
        l_cancel_status : int
            0 = none, 1 = successful, 2 = unsuccessful
    `Minimum Replay Version: 2.1.0`:
        hurtbox_collision_state : int
    `Minimum Replay Version: 3.5.0`:
        self_induced_air_x, self_induced_y, attack_based_x, attack_based_y, self_induced_ground_x : float
    `Minimum Replay Version: 3.8.0`:
        hitlag_remaining : float
    `Minimum Replay Version: 3.11.0`:
        animation_index : int
    """

    frame: int | None
    player_index: int | None
    is_follower: bool | None
    internal_character_id: int | None
    action_state_id: int | None
    position_x: float | None
    position_y: float | None
    facing_direction: float | None
    percent: float | None
    shield_size: float | None
    last_attack_landed: int | None
    current_combo_count: int | None
    last_hit_by: int | None
    stocks_remaining: int | None
    action_state_counter: float | None
    state_bit_flags_1: int | None
    state_bit_flags_2: int | None
    state_bit_flags_3: int | None
    state_bit_flags_4: int | None
    state_bit_flags_5: int | None
    misc_action_state: float | None
    is_airborne: bool | None
    last_ground_id: int | None
    jumps_remaining: int | None
    l_cancel_status: int | None
    hurtbox_collision_state: int | None
    self_induced_air_x: float | None
    self_induced_y: float | None
    attack_based_x: float | None
    attack_based_y: float | None
    self_induced_ground_x: float | None
    hitlag_remaining: float | None
    animation_index: int | None

    @property
    def character(self) -> InGameCharacter | int | None:
        if self.internal_character_id is None:
            return None
        return try_enum(InGameCharacter, self.internal_character_id)

    @property
    def action_state(self) -> ActionState | int | None:
        if self.action_state_id is None:
            return None
        return try_enum(ActionState, self.action_state_id)

    @classmethod
    def _parse(cls, payload: bytes) -> PostFrameUpdate:
        return cls(
            frame=read_int32(payload, 0x1),
            player_index=read_uint8(payload, 0x5),
            is_follower=read_bool(payload, 0x6),
            internal_character_id=read_uint8(payload, 0x7),
            action_state_id=read_uint16(payload, 0x8),
            position_x=read_float(payload, 0xA),
            position_y=read_float(payload, 0xE),
            facing_direction=read_float(payload, 0x12),
            percent=read_float(payload, 0x16),
            shield_size=read_float(payload, 0x1A),
            last_attack_landed=read_uint8(payload, 0x1E),
            current_combo_count=read_uint8(payload, 0x1F),
            last_hit_by=read_uint8(payload, 0x20),
            stocks_remaining=read_uint8(payload, 0x21),
            action_state_counter=read_float(payload, 0x22),
            state_bit_flags_1=read_uint8(payload, 0x26),
            state_bit_flags_2=read_uint8(payload, 0x27),
            state_bit_flags_3=read_uint8(payload, 0x28),
            state_bit_flags_4=read_uint8(payload, 0x29),
            state_bit_flags_5=read_uint8(payload, 0x2A),
            misc_action_state=read_float(payload, 0x2B),
            is_airborne=read_bool(payload, 0x2F),
            last_ground_id=read_uint16(payload, 0x30),
            jumps_remaining=read_uint8(payload, 0x32),
            l_cancel_status=read_uint8(payload, 0x33),
            hurtbox_collision_state=read_uint8(payload, 0x34),
            self_induced_air_x=read_float(payload, 0x35),
            self_induced_y=read_float(payload, 0x39),
            attack_based_x=read_float(payload, 0x3D),
            attack_based_y=read_float(payload, 0x41),
            self_induced_ground_x=read_float(payload, 0x45),
            hitlag_remaining=read_float(payload, 0x49),
            animation_index=read_uint32(payload, 0x4D),
        )


@dataclass(frozen=True, slots=True)
class ItemUpdate:
    """A single active item (including projectiles) on a given frame

    `Minimum Replay Version: 3.0.0`
    """

    frame: int | None
    type_id: int | None
    state: int | None
    facing_direction: float | None
    velocity_x: float | None
    velocity_y: float | None
    position_x: float | None
    position_y: float | None
    damage_taken: int | None
    expiration_timer: float | None
    spawn_id: int | None
    missile_type: int | None
    turnip_face: int | None
    charge_shot_launched: int | None
    charge_power: int | None
    owner: int | None

    @classmethod
    def _parse(cls, payload: bytes) -> ItemUpdate:
        return cls(
            frame=read_int32(payload, 0x1),
            type_id=read_uint16(payload, 0x5),
            state=read_uint8(payload, 0x7),
            facing_direction=read_float(payload, 0x8),
            velocity_x=read_float(payload, 0xC),
            velocity_y=read_float(payload, 0x10),
            position_x=read_float(payload, 0x14),
            position_y=read_float(payload, 0x18),
            damage_taken=read_uint16(payload, 0x1C),
            expiration_timer=read_float(payload, 0x1E),
            spawn_id=read_uint32(payload, 0x22),
            missile_type=read_uint8(payload, 0x26),
            turnip_face=read_uint8(payload, 0x27),
            charge_shot_launched=read_uint8(payload, 0x28),
            charge_power=read_uint8(payload, 0x29),
            owner=read_int8(payload, 0x2A),
        )


@dataclass(frozen=True, slots=True)
class FrameBookend:
    """Marks the end of a frame's data.

    `latest_finalized_frame` (3.7.0+) is the newest frame that can no longer be rolled back.
    """

    frame: int | None
    latest_finalized_frame: int | None

    @classmethod
    def _parse(cls, payload: bytes) -> FrameBookend:
        return cls(
            frame=read_int32(payload, 0x1),
            latest_finalized_frame=read_int32(payload, 0x5),
        )


# ---------------------------------------------------------------------------- #
#                                   Game End                                   #
# ---------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class GameEnd:
    """Information about the end of the game.

    Attributes:
        game_end_method : int
            0 = unresolved, 1 = time, 2 = game, 7 = no contest (2.0.0+). Older replays use 3 for "resolved"
    `Minimum Replay Version: 2.0.0`:
        lras_initiator_index : int
            Index of the player that quit out with L+R+A+Start, -1 if nobody did
    `Minimum Replay Version: 3.13.0`:
        placements : tuple[int, ...]
            0-indexed placement for each port, -1 for empty ports
    """

    game_end_method: int | None
    lras_initiator_index: int | None
    placements: tuple[int, ...] | None

    @classmethod
    def _parse(cls, payload: bytes) -> GameEnd:
        placements = tuple(read_int8(payload, 0x3 + i) for i in range(4))

        return cls(
            game_end_method=read_uint8(payload, 0x1),
            lras_initiator_index=read_int8(payload, 0x2),
            placements=None if None in placements else placements,
        )


Event = GameStart | PreFrameUpdate | PostFrameUpdate | ItemUpdate | FrameBookend | GameEnd

# Manual jump table, cheaper than a match statement for the hot path
EVENT_PARSERS = {
    EventType.GAME_START: GameStart._parse,
    EventType.FRAME_PRE: PreFrameUpdate._parse,
    EventType.FRAME_POST: PostFrameUpdate._parse,
    EventType.ITEM: ItemUpdate._parse,
    EventType.FRAME_BOOKEND: FrameBookend._parse,
    EventType.GAME_END: GameEnd._parse,
}


def parse_message(command: int, payload: bytes) -> Event | None:
    """Decodes a single message. `payload` starts with the command byte, so field offsets match the published
    replay format documentation.

    Returns None for commands that are sized but not decoded (frame start, gecko list, message splitter) and for
    unknown commands.
    """
    parse = EVENT_PARSERS.get(command)
    if parse is None:
        return None
    return parse(payload)

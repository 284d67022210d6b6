from ..util import IntEnum

# Common action states only. Character-specific states (341+) vary per character and are left as raw ints.


class ActionRange(IntEnum):
    # ID Ranges - used to simplify checks for stat calculators
    DYING_START = 0
    DYING_END = 10
    GROUNDED_CONTROL_START = 14
    GROUNDED_CONTROL_END = 24
    CONTROLLED_JUMP_START = 24
    CONTROLLED_JUMP_END = 34
    SQUAT_START = 39
    SQUAT_END = 41
    GROUND_ATTACK_START = 44
    GROUND_ATTACK_END = 64
    AERIAL_ATTACK_START = 65
    AERIAL_ATTACK_END = 74
    DAMAGE_START = 75
    DAMAGE_END = 91
    DOWN_START = 183
    DOWN_END = 198
    TECH_START = 199
    TECH_END = 204
    CAPTURE_START = 223
    CAPTURE_END = 232
    DODGE_START = 233
    DODGE_END = 236
    # Command Grabs
    COMMAND_GRAB_RANGE1_START = 266
    COMMAND_GRAB_RANGE1_END = 304

    COMMAND_GRAB_RANGE2_START = 327
    COMMAND_GRAB_RANGE2_END = 338


class ActionState(IntEnum):
    DEAD_DOWN = 0  # Bottom blast zone death
    DEAD_LEFT = 1
    DEAD_RIGHT = 2
    DEAD_UP = 3
    DEAD_UP_STAR = 4  # Standard star KO
    DEAD_UP_STAR_ICE = 5
    DEAD_UP_FALL = 6
    DEAD_UP_FALL_HIT_CAMERA = 7
    DEAD_UP_FALL_HIT_CAMERA_FLAT = 8
    DEAD_UP_FALL_ICE = 9
    DEAD_UP_FALL_HIT_CAMERA_ICE = 10
    SLEEP = 11  # Sheik/Zelda state when the other is active
    REBIRTH = 12  # Entering on halo
    REBIRTH_WAIT = 13
    WAIT = 14  # Default standing state
    WALK_SLOW = 15
    WALK_MIDDLE = 16
    WALK_FAST = 17
    TURN = 18
    TURN_RUN = 19
    DASH = 20
    RUN = 21
    RUN_DIRECT = 22
    RUN_BRAKE = 23
    KNEE_BEND = 24  # Jumpsquat
    JUMP_F = 25
    JUMP_B = 26
    JUMP_AERIAL_F = 27
    JUMP_AERIAL_B = 28
    FALL = 29
    FALL_F = 30
    FALL_B = 31
    FALL_AERIAL = 32
    FALL_AERIAL_F = 33
    FALL_AERIAL_B = 34
    FALL_SPECIAL = 35
    FALL_SPECIAL_F = 36
    FALL_SPECIAL_B = 37
    DAMAGE_FALL = 38  # Tumble
    SQUAT = 39
    SQUAT_WAIT = 40
    SQUAT_RV = 41
    LAND = 42
    LAND_FALL_SPECIAL = 43  # Wavedash/waveland landing lag
    ATTACK_11 = 44  # Jab 1
    ATTACK_12 = 45
    ATTACK_13 = 46
    ATTACK_100_START = 47  # Rapid jab
    ATTACK_100_LOOP = 48
    ATTACK_100_END = 49
    ATTACK_DASH = 50
    ATTACK_S_3_HI = 51  # Ftilt, 5 angles
    ATTACK_S_3_HI_S = 52
    ATTACK_S_3_S = 53
    ATTACK_S_3_LW_S = 54
    ATTACK_S_3_LW = 55
    ATTACK_HI_3 = 56  # Utilt
    ATTACK_LW_3 = 57  # Dtilt
    ATTACK_S_4_HI = 58  # Fsmash, 5 angles
    ATTACK_S_4_HI_S = 59
    ATTACK_S_4_S = 60
    ATTACK_S_4_LW_S = 61
    ATTACK_S_4_LW = 62
    ATTACK_HI_4 = 63  # Usmash
    ATTACK_LW_4 = 64  # Dsmash
    ATTACK_AIR_N = 65
    ATTACK_AIR_F = 66
    ATTACK_AIR_B = 67
    ATTACK_AIR_HI = 68
    ATTACK_AIR_LW = 69
    LANDING_AIR_N = 70
    LANDING_AIR_F = 71
    LANDING_AIR_B = 72
    LANDING_AIR_HI = 73
    LANDING_AIR_LW = 74
    DAMAGE_HI_1 = 75  # Start of generic damage animations
    DAMAGE_HI_2 = 76
    DAMAGE_HI_3 = 77
    DAMAGE_N_1 = 78
    DAMAGE_N_2 = 79
    DAMAGE_N_3 = 80
    DAMAGE_LW_1 = 81
    DAMAGE_LW_2 = 82
    DAMAGE_LW_3 = 83
    DAMAGE_AIR_1 = 84
    DAMAGE_AIR_2 = 85
    DAMAGE_AIR_3 = 86
    DAMAGE_FLY_HI = 87
    DAMAGE_FLY_N = 88
    DAMAGE_FLY_LW = 89
    DAMAGE_FLY_TOP = 90
    DAMAGE_FLY_ROLL = 91  # End of generic damage animations
    GUARD_ON = 178
    GUARD = 179
    GUARD_OFF = 180
    GUARD_SET_OFF = 181  # Shield stun
    GUARD_REFLECT = 182  # Powershield
    DOWN_BOUND_U = 183  # Missed tech bounce, facing up
    DOWN_WAIT_U = 184
    DOWN_DAMAGE_U = 185  # Jab reset, facing up
    DOWN_BOUND_D = 191  # Missed tech bounce, facing down
    DOWN_WAIT_D = 192
    DOWN_DAMAGE_D = 193  # Jab reset, facing down
    PASSIVE = 199  # Neutral tech
    PASSIVE_STAND_F = 200  # Forward tech
    PASSIVE_STAND_B = 201  # Backward tech
    PASSIVE_WALL = 202  # Wall tech
    PASSIVE_WALL_JUMP = 203
    PASSIVE_CEIL = 204
    CATCH = 212  # Grab
    CATCH_PULL = 213
    CATCH_DASH = 214  # Dash grab
    CATCH_DASH_PULL = 215
    CATCH_WAIT = 216
    THROW_F = 219
    THROW_B = 220
    THROW_HI = 221
    THROW_LW = 222
    ESCAPE_F = 233  # Roll forward
    ESCAPE_B = 234  # Roll backward
    ESCAPE = 235  # Spot dodge
    ESCAPE_AIR = 236  # Airdodge
    FLY_REFLECT_WALL = 247  # Missed walltech
    FLY_REFLECT_CEIL = 248  # Missed ceiling tech
    CLIFF_CATCH = 252  # Ledge grab
    CLIFF_WAIT = 253
    BARREL_WAIT = 293  # DK barrel, inside the command grab range but not a grab

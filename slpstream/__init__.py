from .assembler import FrameEntry, ParseEvent, ParserState, PlayerFrameData, SlpParser
from .container import SlpFile, get_metadata, open_slp_file
from .controller import PhysicalButtons
from .enums import ActionRange, ActionState, CSSCharacter, InGameCharacter, Stage
from .event import (
    FIRST_FRAME_INDEX,
    FIRST_PLAYABLE_FRAME,
    MAX_ROLLBACK_FRAMES,
    EventType,
    FrameBookend,
    GameEnd,
    GameStart,
    ItemUpdate,
    PlayerSettings,
    PostFrameUpdate,
    PreFrameUpdate,
    parse_message,
)
from .game import GameStats, RollbackStats, SlippiGame
from .metadata import Metadata
from .parse import iterate_events
from .reader import SourceError, UnsupportedSourceError, get_source
from .stats import StatOptions

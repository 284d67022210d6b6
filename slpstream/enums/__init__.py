from .character import CSSCharacter, InGameCharacter
from .stage import Stage
from .state import ActionRange, ActionState

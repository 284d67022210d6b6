from .action_computer import ActionComputer
from .combo_computer import ComboComputer, ComboEvent
from .computer import StatComputer, StatOptions, StatsPipeline
from .conversion_computer import ConversionComputer, ConversionEvent
from .input_computer import InputComputer
from .overall import generate_overall_stats
from .stat_types import (
    ActionCounts,
    ComboData,
    Combos,
    ConversionData,
    Conversions,
    InputCounts,
    MoveLanded,
    OpeningType,
    OverallData,
    Ratio,
    StockData,
    Stocks,
)
from .stock_computer import StockComputer

from __future__ import annotations

from ..assembler import FrameEntry
from ..event import GameStart
from .common import did_lose_stock, get_post, is_dying
from .computer import StatComputer
from .stat_types import StockData, Stocks


class StockComputer(StatComputer):
    """Tracks the lifetime of each stock. A stock opens on the first frame a player is alive and closes on the frame
    the stock count drops."""

    def __init__(self):
        self.stocks = Stocks()
        self.player_indices: list[int] = []
        self.current: dict[int, StockData | None] = {}

    def setup(self, settings: GameStart) -> None:
        self.stocks = Stocks()
        self.player_indices = [p.player_index for p in settings.players]
        self.current = {i: None for i in self.player_indices}

    def process_frame(self, frame: FrameEntry, all_frames: dict[int, FrameEntry]) -> None:
        for player_index in self.player_indices:
            post = get_post(all_frames, frame.frame, player_index)
            if post is None:
                continue
            prev_post = get_post(all_frames, frame.frame - 1, player_index)
            stock = self.current[player_index]

            if stock is None:
                if post.action_state_id is None or is_dying(post.action_state_id):
                    continue
                stock = StockData(
                    player_index=player_index,
                    start_frame=frame.frame,
                    count=post.stocks_remaining,
                    current_percent=post.percent or 0.0,
                )
                self.current[player_index] = stock
                self.stocks.append(stock)
            elif did_lose_stock(post, prev_post):
                stock.end_frame = frame.frame
                stock.end_percent = prev_post.percent or 0.0
                stock.death_animation = post.action_state_id
                self.current[player_index] = None
            else:
                stock.current_percent = post.percent or 0.0

    def fetch(self) -> Stocks:
        return self.stocks

from __future__ import annotations

from collections import defaultdict

from ..event import GameStart
from .common import get_opponent_indices
from .stat_types import ConversionData, InputCounts, OpeningType, OverallData, Ratio

FRAMES_PER_MINUTE = 3600


def _group_by_attacker_and_opening(
    conversions: list[ConversionData],
) -> dict[int | None, dict[OpeningType, list[ConversionData]]]:
    grouped = defaultdict(lambda: defaultdict(list))
    for conversion in conversions:
        # the player that landed the opening hit
        attacker = conversion.moves[0].player_index if conversion.moves else None
        grouped[attacker][conversion.opening_type].append(conversion)
    return grouped


def _opening_ratio(grouped, player_index: int, opponent_indices: list[int], opening: OpeningType) -> Ratio:
    openings = len(grouped.get(player_index, {}).get(opening, []))
    opponent_openings = sum(len(grouped.get(i, {}).get(opening, [])) for i in opponent_indices)
    return Ratio.of(openings, openings + opponent_openings)


def _beneficial_trade_ratio(grouped, player_index: int, opponent_indices: list[int]) -> Ratio:
    player_trades = grouped.get(player_index, {}).get(OpeningType.TRADE, [])
    # both halves of a trade start on the same frame
    opponent_trades = {}
    for i in opponent_indices:
        for conversion in grouped.get(i, {}).get(OpeningType.TRADE, []):
            opponent_trades.setdefault(conversion.start_frame, conversion)

    benefits = 0
    for player_conversion in player_trades:
        opponent_conversion = opponent_trades.get(player_conversion.start_frame)
        if opponent_conversion is None:
            continue
        if player_conversion.did_kill and not opponent_conversion.did_kill:
            benefits += 1
        elif player_conversion.total_damage() > opponent_conversion.total_damage():
            benefits += 1

    return Ratio.of(benefits, len(player_trades))


def generate_overall_stats(
    settings: GameStart,
    inputs: list[InputCounts],
    conversions: list[ConversionData],
    playable_frame_count: int,
) -> list[OverallData]:
    """Per-player summary ratios. Opponents exclude teammates in team games."""
    inputs_by_player = {counts.player_index: counts for counts in inputs}
    grouped = _group_by_attacker_and_opening(conversions)
    game_minutes = playable_frame_count / FRAMES_PER_MINUTE

    overall = []
    for player in settings.players:
        player_index = player.player_index
        input_counts = inputs_by_player.get(player_index, InputCounts(player_index))
        opponent_indices = get_opponent_indices(settings, player_index)

        conversion_count = 0
        kill_count = 0
        total_damage = 0.0
        for conversion in conversions:
            if conversion.player_index not in opponent_indices:
                continue
            conversion_count += 1
            if conversion.did_kill and conversion.last_hit_by == player_index:
                kill_count += 1
            total_damage += sum(move.damage for move in conversion.moves if move.player_index == player_index)

        overall.append(
            OverallData(
                player_index=player_index,
                input_counts=input_counts,
                conversion_count=conversion_count,
                total_damage=total_damage,
                kill_count=kill_count,
                inputs_per_minute=Ratio.of(input_counts.total, game_minutes),
                openings_per_kill=Ratio.of(conversion_count, kill_count),
                damage_per_opening=Ratio.of(total_damage, conversion_count),
                neutral_win_ratio=_opening_ratio(grouped, player_index, opponent_indices, OpeningType.NEUTRAL_WIN),
                counter_hit_ratio=_opening_ratio(grouped, player_index, opponent_indices, OpeningType.COUNTER_ATTACK),
                beneficial_trade_ratio=_beneficial_trade_ratio(grouped, player_index, opponent_indices),
            )
        )

    return overall

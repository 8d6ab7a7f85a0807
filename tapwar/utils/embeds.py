"""
Shared embed utilities for the TapWar bot.

Provides reusable embed building functions to keep the tap, battle and
leaderboard displays consistent across cogs and views.
"""

from datetime import datetime
from typing import Optional

import discord

from tapwar.config import Config
from tapwar.constants import UIConstants
from tapwar.data_models.battle import BattleWindow
from tapwar.data_models.country import Country
from tapwar.data_models.leaderboard import LeaderboardSnapshot, RankCriterion
from tapwar.utils.battle_clock import BattleClock
from tapwar.utils.ranking import LeaderboardRanker
from tapwar.utils.tap_batch import TapBatchAccumulator


def format_score(value: float, criterion: RankCriterion) -> str:
    if criterion is RankCriterion.INTENSITY:
        return f"{value:,.1f}"
    return f"{int(value):,}"


def build_leaderboard_embed(
    snapshot: LeaderboardSnapshot,
    user_country: Optional[Country] = None,
    limit: Optional[int] = None
) -> discord.Embed:
    """
    Build the leaderboard embed.
    
    Only the top `limit` countries are listed, but the user's rank is looked
    up in the full snapshot so truncation never hides or changes it.
    
    Args:
        snapshot: Ranked leaderboard to display
        user_country: Country to highlight in the footer
        limit: Rows to show (defaults to LEADERBOARD_DISPLAY_LIMIT)
        
    Returns:
        Formatted Discord embed ready for display
    """
    if limit is None:
        limit = Config.LEADERBOARD_DISPLAY_LIMIT
    
    criterion = snapshot.criterion
    embed = discord.Embed(
        title=f"{UIConstants.TROPHY_EMOJI} Global Leaderboard",
        description=f"Sorted by: **{criterion.label}**",
        color=UIConstants.GOLD_RANK_COLOR
    )
    
    if snapshot.error:
        embed.description += f"\n\n{snapshot.error}"
    elif snapshot.is_empty:
        embed.description += "\n\nNo taps yet. Be the first!"
    else:
        score_header = "Taps" if criterion is RankCriterion.TOTAL_TAPS else "Taps/Plyr"
        lines = ["```"]
        lines.append(f"{'#':<4} {'Country':<18} {score_header:>12} {'Players':>8}")
        lines.append("-" * 45)
        for entry in snapshot.top(limit):
            name = entry.country.display_name[:18]
            lines.append(
                f"{entry.rank:<4} {name:<18} "
                f"{format_score(entry.score, criterion):>12} {entry.stats.players:>8,}"
            )
        lines.append("```")
        embed.description += "\n" + "\n".join(lines)
    
    footer = f"Battle {snapshot.battle_id} | Refreshes every {Config.LEADERBOARD_REFRESH_SECONDS}s"
    if user_country:
        rank = LeaderboardRanker.find_rank(snapshot.entries, user_country.code)
        if rank is not None:
            footer = f"{user_country.display_name} is #{rank} | " + footer
        else:
            footer = f"{user_country.display_name} is unranked | " + footer
    embed.set_footer(text=footer)
    embed.timestamp = snapshot.fetched_at
    return embed


def build_tap_embed(accumulator: TapBatchAccumulator, now: Optional[datetime] = None) -> discord.Embed:
    """Build the tap screen: country, batch progress and lifetime taps."""
    now = now or BattleClock.now()
    window = BattleClock.battle_window(now)
    country = accumulator.country
    
    embed = discord.Embed(
        title=f"{country.flag} Tapping for {country.display_name}",
        description=f"Smash the button to push {country.display_name} up the leaderboard!",
        color=UIConstants.LIVE_COLOR if window.is_live(now) else UIConstants.DEFAULT_EMBED_COLOR
    )
    
    filled = accumulator.count
    progress = "🟩" * filled + "⬜" * (accumulator.batch_size - filled)
    embed.add_field(
        name="Next Batch",
        value=f"{progress}\n{filled}/{accumulator.batch_size} taps ({accumulator.remaining} until the next send)",
        inline=False
    )
    embed.add_field(name="Lifetime Taps", value=f"{accumulator.total_taps:,}", inline=True)
    embed.add_field(name="Battle", value=window.battle_id, inline=True)
    return embed


def build_battle_embed(window: BattleWindow, now: datetime) -> discord.Embed:
    """Build the battle status embed."""
    next_boundary = BattleClock.next_battle_boundary(now)
    live = window.is_live(now)
    
    embed = discord.Embed(
        title=f"{UIConstants.SWORDS_EMOJI} Battle {window.battle_id}",
        description=f"{UIConstants.FIRE_EMOJI} **LIVE NOW!**" if live else "Taps count toward this hour's battle.",
        color=UIConstants.LIVE_COLOR if live else UIConstants.DEFAULT_EMBED_COLOR
    )
    embed.add_field(
        name="Started",
        value=discord.utils.format_dt(window.starts_at, style='t'),
        inline=True
    )
    embed.add_field(
        name="Next Battle",
        value=discord.utils.format_dt(next_boundary, style='R'),
        inline=True
    )
    if BattleClock.is_peak_refresh_window(now):
        embed.set_footer(text="Peak time: the hour is turning over, every tap counts!")
    return embed

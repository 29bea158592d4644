"""Percentile and region statistics over team rosters."""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from models import LeagueSummary, Player, Region, Team

ROSTER_COLUMNS = [
    "team_pos",
    "team_id",
    "player_id",
    "region",
    "tranche",
    "points",
    "rank",
    "is_world_champion",
    "is_active",
]


def roster_frame(teams: Sequence[Team]) -> pd.DataFrame:
    """Flatten team rosters into one row per rostered player.

    ``team_pos`` is the team's position in ``teams`` so callers can map rows
    back to their team without relying on ids being unique.
    """

    rows = [
        {
            "team_pos": pos,
            "team_id": team.id,
            "player_id": p.id,
            "region": p.region.value,
            "tranche": p.tranche,
            "points": float(p.points),
            "rank": int(p.rank),
            "is_world_champion": bool(p.is_world_champion),
            "is_active": bool(p.is_active),
        }
        for pos, team in enumerate(teams)
        for p in team.players
    ]
    if not rows:
        return pd.DataFrame(columns=ROSTER_COLUMNS)
    return pd.DataFrame(rows, columns=ROSTER_COLUMNS)


def percentile_threshold(points: Iterable[float], percentile: float) -> Optional[float]:
    """Points needed to sit in the top ``percentile``% of ``points``.

    The threshold is the score at index ``ceil(n * percentile / 100) - 1`` of the
    descending order, clamped into the pool. ``None`` for an empty pool.
    """

    values = np.sort(np.asarray(list(points), dtype=float))[::-1]
    n = len(values)
    if n == 0:
        return None
    idx = math.ceil(n * percentile / 100) - 1
    idx = max(0, min(idx, n - 1))
    return float(values[idx])


def get_top_percentile_count(team: Team, all_teams: Sequence[Team], percentile: float = 10) -> int:
    """Count ``team``'s players inside the global top ``percentile``% of scorers.

    Every player rostered by any team in ``all_teams`` forms the pool. Players
    tied with the threshold score are all counted, so the result can exceed the
    literal share of the pool.
    """

    if not team.players or not all_teams:
        return 0
    threshold = percentile_threshold(
        (p.points for t in all_teams for p in t.players), percentile
    )
    if threshold is None:
        return 0
    return sum(1 for p in team.players if p.points >= threshold)


def get_region_performance_ratio(region_points: float, region_total_available: float) -> float:
    if region_total_available == 0:
        return 0
    return region_points / region_total_available


def region_ratios(team: Team, all_teams: Sequence[Team]) -> Dict[Region, float]:
    """Share of each region's rostered points held by ``team``."""

    frame = roster_frame(all_teams)
    if frame.empty:
        return {}
    available = frame.groupby("region")["points"].sum()
    owned: Dict[Region, float] = {}
    for p in team.players:
        owned[p.region] = owned.get(p.region, 0.0) + p.points
    return {
        region: get_region_performance_ratio(points, float(available.get(region.value, 0.0)))
        for region, points in owned.items()
    }


def summarize_league(teams: Sequence[Team], *, season: Optional[int] = None) -> LeagueSummary:
    if season is not None:
        teams = [t for t in teams if t.season == season]
    frame = roster_frame(teams)
    total_teams = len(teams)
    if frame.empty:
        return LeagueSummary(total_teams=total_teams)

    total_points = float(frame["points"].sum())
    region_points = frame.groupby("region")["points"].sum()
    return LeagueSummary(
        total_teams=total_teams,
        total_players=int(frame["player_id"].nunique()),
        total_points=total_points,
        average_points=total_points / total_teams if total_teams else 0.0,
        region_points={Region(r): float(v) for r, v in region_points.items()},
    )


def region_distribution(players: Iterable[Player]) -> Dict[Region, int]:
    counts = pd.Series([p.region.value for p in players], dtype=object).value_counts()
    return {Region(r): int(c) for r, c in counts.items()}


def tranche_distribution(players: Iterable[Player]) -> Dict[str, int]:
    counts = pd.Series([f"Tranche {p.tranche}" for p in players], dtype=object).value_counts()
    return {str(label): int(c) for label, c in counts.sort_index().items()}


def top_percentile_counts(teams: Sequence[Team], percentile: float = 10) -> List[int]:
    return [get_top_percentile_count(team, teams, percentile) for team in teams]


def format_points(points: float) -> str:
    if points >= 1_000_000:
        return f"{points / 1_000_000:.1f}M"
    if points >= 1_000:
        return f"{points / 1_000:.1f}K"
    if float(points).is_integer():
        return f"{int(points):,}"
    return f"{points:,}"

"""Team leaderboard: per-team aggregates and tie-broken ordering."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from errors import TeamNotFoundError
from league_stats import roster_frame
from models import LeaderboardEntry, PlayerLeaderboardEntry, PronostiqueurEntry, Region, Team, TeamRef

logger = logging.getLogger(__name__)


def _regions_won(frame: pd.DataFrame) -> Counter:
    """Count, per team position, the regions its best player outranks everyone else in."""

    won: Counter = Counter()
    if frame.empty:
        return won
    best = frame.groupby(["region", "team_pos"])["rank"].min()
    for _, ranks in best.groupby(level="region"):
        ranks = ranks.droplevel("region").sort_values()
        if len(ranks) == 1 or ranks.iloc[0] < ranks.iloc[1]:
            won[int(ranks.index[0])] += 1
    return won


def build_entries(
    teams: Sequence[Team],
    *,
    region: Optional[Region] = None,
    season: Optional[int] = None,
) -> List[LeaderboardEntry]:
    """Aggregate each team's roster into an unranked :class:`LeaderboardEntry`.

    With ``region`` set, only players from that region count towards any
    aggregate. With ``season`` set, teams from other seasons are dropped.
    """

    if season is not None:
        teams = [t for t in teams if t.season == season]
    if not teams:
        return []

    frame = roster_frame(teams)
    if region is not None:
        frame = frame[frame["region"] == Region(region).value]

    totals = frame.groupby("team_pos")["points"].sum()
    by_region = frame.groupby(["team_pos", "region"])["points"].sum()
    first_place = frame[frame["rank"] == 1].groupby("team_pos").size()
    champions = frame[frame["is_world_champion"].astype(bool)].groupby("team_pos").size()
    won = _regions_won(frame)

    entries: List[LeaderboardEntry] = []
    for pos, team in enumerate(teams):
        points_by_region: Dict[Region, float] = {}
        if pos in totals.index:
            points_by_region = {
                Region(reg): float(val) for reg, val in by_region.loc[pos].items()
            }
        entries.append(
            LeaderboardEntry(
                user_id=team.owner_id or team.id,
                total_points=float(totals.get(pos, 0.0)),
                points_by_region=points_by_region,
                regions_won=won.get(pos, 0),
                first_place_players=int(first_place.get(pos, 0)),
                world_champions=int(champions.get(pos, 0)),
                team=team,
            )
        )
    return entries


def _sort_key(entry: LeaderboardEntry):
    return (
        -entry.total_points,
        -entry.regions_won,
        -entry.first_place_players,
        -entry.world_champions,
    )


def rank_entries(entries: Iterable[LeaderboardEntry]) -> List[LeaderboardEntry]:
    """Order entries and assign ranks 1..N.

    Points decide first; equal totals fall back to regions won, then
    first-place players, then world champions. Entries equal on all four keep
    their input order.
    """

    ordered = sorted(entries, key=_sort_key)
    return [entry.model_copy(update={"rank": i}) for i, entry in enumerate(ordered, 1)]


def build_leaderboard(
    teams: Sequence[Team],
    *,
    region: Optional[Region] = None,
    season: Optional[int] = None,
) -> List[LeaderboardEntry]:
    board = rank_entries(build_entries(teams, region=region, season=season))
    logger.debug(
        "Built leaderboard with %d teams (region=%s, season=%s)",
        len(board),
        region,
        season,
    )
    return board


def team_standing(entries: Iterable[LeaderboardEntry], team_id: str) -> LeaderboardEntry:
    for entry in entries:
        if entry.team.id == team_id:
            return entry
    raise TeamNotFoundError(team_id)


def build_pronostiqueur_leaderboard(
    teams: Sequence[Team],
    *,
    season: Optional[int] = None,
) -> List[PronostiqueurEntry]:
    """Rank managers by the combined points of every team they own.

    Teams without an owner stand alone under their own id, as on the team
    board. A manager's best team is the first one reaching their highest team
    total. Equal totals keep the order in which managers first appear.
    """

    entries = build_entries(teams, season=season)
    if not entries:
        return []

    frame = pd.DataFrame(
        {
            "user_id": [e.user_id for e in entries],
            "team_name": [e.team.name for e in entries],
            "points": [e.total_points for e in entries],
        }
    )
    standings: List[PronostiqueurEntry] = []
    for user_id, group in frame.groupby("user_id", sort=False):
        best = group.loc[group["points"].idxmax()]
        total = float(group["points"].sum())
        standings.append(
            PronostiqueurEntry(
                user_id=str(user_id),
                total_points=total,
                total_teams=len(group),
                avg_points_per_team=total / len(group),
                best_team_points=float(best["points"]),
                best_team_name=str(best["team_name"]),
            )
        )

    ordered = sorted(standings, key=lambda s: -s.total_points)
    board = [s.model_copy(update={"rank": i}) for i, s in enumerate(ordered, 1)]
    logger.debug("Built pronostiqueur leaderboard with %d managers (season=%s)", len(board), season)
    return board


def build_player_leaderboard(
    teams: Sequence[Team],
    *,
    region: Optional[Region] = None,
    season: Optional[int] = None,
) -> List[PlayerLeaderboardEntry]:
    """Rank rostered players by points, with the teams and managers holding them.

    A player drafted by several teams appears once. Equal points fall back to
    the better regional rank.
    """

    if season is not None:
        teams = [t for t in teams if t.season == season]
    frame = roster_frame(teams)
    if region is not None:
        frame = frame[frame["region"] == Region(region).value]
    if frame.empty:
        return []

    players = {}
    for team in teams:
        for player in team.players:
            players.setdefault(player.id, player)

    rows: List[PlayerLeaderboardEntry] = []
    for player_id, group in frame.groupby("player_id", sort=False):
        player = players[player_id]
        owning = [teams[int(pos)] for pos in group["team_pos"].drop_duplicates()]
        refs = [TeamRef(team_id=t.id, name=t.name, owner_id=t.owner_id or t.id) for t in owning]
        rows.append(
            PlayerLeaderboardEntry(
                player_id=player.id,
                nickname=player.nickname,
                region=player.region,
                tranche=player.tranche,
                total_points=float(player.points),
                teams=refs,
                pronostiqueurs=list(dict.fromkeys(ref.owner_id for ref in refs)),
            )
        )

    ordered = sorted(rows, key=lambda e: (-e.total_points, players[e.player_id].rank))
    board = [e.model_copy(update={"rank": i}) for i, e in enumerate(ordered, 1)]
    logger.debug(
        "Built player leaderboard with %d players (region=%s, season=%s)",
        len(board),
        region,
        season,
    )
    return board

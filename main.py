# main.py  (print-only front end over a league snapshot file)

from __future__ import annotations

import argparse
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from pydantic import ValidationError

from config import EngineConfig
from context import LeagueSnapshot, load_snapshot
from errors import EngineError
from leaderboard import build_leaderboard, build_player_leaderboard, build_pronostiqueur_leaderboard
from league_stats import format_points, summarize_league, top_percentile_counts
from models import LeaderboardEntry, Region
from replacement import find_replacement
from trading import TradeValidator, state_of


def hr(char="─", n=80):  # horizontal rule
    print(char * n)


def print_board(title: str, board: List[LeaderboardEntry]) -> None:
    print(title); hr()
    print(f"{'#':<4}{'Team':<28} {'Points':>10} {'Regions':>8} {'1st':>4} {'WC':>4}")
    hr("—", 80)
    for entry in board:
        print(
            f"{entry.rank:<4}{entry.team.name:<28} {format_points(entry.total_points):>10} "
            f"{entry.regions_won:>8} {entry.first_place_players:>4} {entry.world_champions:>4}"
        )
    print()


def print_kv(title, kvs, key_hdr="Team", val_hdr="Value", fmt=str):
    print(title); hr()
    print(f"{key_hdr:<28} {val_hdr}")
    hr("—", 80)
    for k, v in kvs.items():
        print(f"{k:<28} {fmt(v)}")
    print()


def cmd_leaderboard(snapshot: LeagueSnapshot, args) -> int:
    region = Region(args.region) if args.region else None
    board = build_leaderboard(snapshot.teams, region=region, season=args.season)
    title = "Leaderboard" + (f" — {region.value}" if region else "")
    print_board(title, board)
    return 0


def cmd_pronostiqueurs(snapshot: LeagueSnapshot, args) -> int:
    board = build_pronostiqueur_leaderboard(snapshot.teams, season=args.season)
    print("Pronostiqueurs"); hr()
    print(f"{'#':<4}{'Manager':<24} {'Points':>10} {'Teams':>6}  Best team")
    hr("—", 80)
    for entry in board:
        print(
            f"{entry.rank:<4}{entry.user_id:<24} {format_points(entry.total_points):>10} "
            f"{entry.total_teams:>6}  {entry.best_team_name} ({format_points(entry.best_team_points)})"
        )
    print()
    return 0


def cmd_players(snapshot: LeagueSnapshot, args) -> int:
    region = Region(args.region) if args.region else None
    board = build_player_leaderboard(snapshot.teams, region=region, season=args.season)[: args.top]
    print("Players" + (f" — {region.value}" if region else "")); hr()
    print(f"{'#':<4}{'Player':<20} {'Reg':<5}{'Tr':<5}{'Points':>10}  Managers")
    hr("—", 80)
    for entry in board:
        print(
            f"{entry.rank:<4}{entry.nickname:<20} {entry.region.value:<5}{entry.tranche:<5}"
            f"{format_points(entry.total_points):>10}  {', '.join(entry.pronostiqueurs)}"
        )
    print()
    return 0


def cmd_stats(snapshot: LeagueSnapshot, args) -> int:
    config = EngineConfig.from_settings()
    percentile = args.percentile if args.percentile is not None else config.default_percentile
    summary = summarize_league(snapshot.teams, season=args.season)
    print_kv(
        "League summary",
        {
            "Teams": summary.total_teams,
            "Players": summary.total_players,
            "Total points": format_points(summary.total_points),
            "Average per team": f"{summary.average_points:.1f}",
        },
        key_hdr="Metric",
    )
    print_kv(
        "Points by region",
        {region.value: format_points(points) for region, points in summary.region_points.items()},
        key_hdr="Region",
        val_hdr="Points",
    )
    counts = top_percentile_counts(snapshot.teams, percentile)
    print_kv(
        f"Players in global top {percentile:g}%",
        {team.name: count for team, count in zip(snapshot.teams, counts)},
        val_hdr="Players",
    )
    return 0


def cmd_trade(snapshot: LeagueSnapshot, args) -> int:
    now = (
        datetime.strptime(args.date, "%Y-%m-%d").replace(tzinfo=timezone.utc)
        if args.date
        else datetime.now(timezone.utc)
    )
    team = snapshot.find_team(args.team_id)
    validation = TradeValidator().validate(team, args.out_id, args.in_id, snapshot.pool, now=now)
    print(f"Trade {args.out_id} -> {args.in_id} for {team.name}: {state_of(validation).value}")
    if validation.is_valid and validation.new_team_state is not None:
        print(f"Trades remaining: {validation.new_team_state.trades_remaining}")
        return 0
    print(f"Reason: {validation.reason}")
    return 1


def cmd_replace(snapshot: LeagueSnapshot, args) -> int:
    team, player = snapshot.find_rostered_player(args.player_id)
    result = find_replacement(player, snapshot.pool)
    if not result.found:
        print(f"{player.nickname} ({team.name}): {result.reason}")
        return 1
    best = result.player
    print(
        f"{player.nickname} ({team.name}) -> {best.nickname} "
        f"[{best.region.value}, tranche {best.tranche}, rank {best.rank}, {format_points(best.points)} pts]"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rank pronostiqueur teams and check trades from a league snapshot.")
    parser.add_argument("snapshot", help="JSON file with 'teams' and 'pool' arrays.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    sub = parser.add_subparsers(dest="command", required=True)

    board = sub.add_parser("leaderboard", help="Print the ranked team leaderboard.")
    board.add_argument("--region", choices=[r.value for r in Region], help="Only count players from this region.")
    board.add_argument("--season", type=int, help="Only rank teams from this season.")
    board.set_defaults(func=cmd_leaderboard)

    owners = sub.add_parser("pronostiqueurs", help="Print managers ranked across all their teams.")
    owners.add_argument("--season", type=int, help="Only count teams from this season.")
    owners.set_defaults(func=cmd_pronostiqueurs)

    players = sub.add_parser("players", help="Print rostered players ranked by points.")
    players.add_argument("--region", choices=[r.value for r in Region], help="Only list players from this region.")
    players.add_argument("--season", type=int, help="Only count teams from this season.")
    players.add_argument("--top", type=int, default=25, help="Number of players to show.")
    players.set_defaults(func=cmd_players)

    stats = sub.add_parser("stats", help="Print league summary and top-percentile counts.")
    stats.add_argument("--percentile", type=float, help="Percentile for top-K%% counts (default from settings).")
    stats.add_argument("--season", type=int, help="Only summarize teams from this season.")
    stats.set_defaults(func=cmd_stats)

    trade = sub.add_parser("trade", help="Validate a one-for-one trade.")
    trade.add_argument("team_id")
    trade.add_argument("out_id", help="Rostered player leaving the team.")
    trade.add_argument("in_id", help="Pool player joining the team.")
    trade.add_argument("--date", help="Evaluate as of this date (YYYY-MM-DD, default today).")
    trade.set_defaults(func=cmd_trade)

    replace = sub.add_parser("replace", help="Suggest a replacement for a rostered player.")
    replace.add_argument("player_id")
    replace.set_defaults(func=cmd_replace)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING), format="%(levelname)s - %(message)s")

    try:
        snapshot = load_snapshot(args.snapshot)
        return args.func(snapshot, args)
    except (EngineError, ValidationError, FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import pytest

from config import EngineConfig
from models import Player, PlayerStats, PoolPlayer, Team
from player_pool import InMemoryPlayerPool


@pytest.fixture
def march() -> datetime:
    return datetime(2025, 3, 14, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def january() -> datetime:
    return datetime(2025, 1, 9, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_player() -> Callable[..., Player]:
    def _make(player_id: str, **overrides: Any) -> Player:
        data = {
            "id": player_id,
            "nickname": player_id.upper(),
            "region": "EU",
            "tranche": "2",
            "points": 1000,
            "rank": 5,
        }
        data.update(overrides)
        return Player(**data)

    return _make


@pytest.fixture
def make_pool_player() -> Callable[..., PoolPlayer]:
    def _make(player_id: str, *, win_rate: float = 0.2, tournaments: int = 5, **overrides: Any) -> PoolPlayer:
        data = {
            "id": player_id,
            "nickname": player_id.upper(),
            "region": "EU",
            "tranche": "2",
            "points": 1000,
            "rank": 5,
            "is_available": True,
            "stats": PlayerStats(win_rate=win_rate, tournaments_played=tournaments),
        }
        data.update(overrides)
        return PoolPlayer(**data)

    return _make


@pytest.fixture
def make_team() -> Callable[..., Team]:
    def _make(team_id: str, players: list[Player], **overrides: Any) -> Team:
        data = {
            "id": team_id,
            "name": f"Team {team_id}",
            "season": 2025,
            "trades_remaining": 3,
            "players": players,
        }
        data.update(overrides)
        return Team(**data)

    return _make


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def trade_setup(make_player, make_pool_player, make_team):
    """Team A holding X (tranche 2, rank 15) between two other players, plus a pool."""

    x = make_player("x", tranche="2", rank=15, points=800)
    team = make_team(
        "a",
        [make_player("p1", tranche="1", rank=2), x, make_player("p3", tranche="3", rank=4)],
    )
    pool = InMemoryPlayerPool(
        [
            make_pool_player("y", tranche="2", rank=8, points=1500),
            make_pool_player("rank12", tranche="2", rank=12, points=1500),
            make_pool_player("t1", tranche="1", rank=3, points=2500),
            make_pool_player("t3", tranche="3", rank=3, points=900),
            make_pool_player("gone", tranche="2", rank=1, is_available=False),
        ]
    )
    return team, pool

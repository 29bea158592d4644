"""Read access to the pool of draftable players."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol

from errors import InvalidPointsError
from models import PoolPlayer, Region, SearchCriteria


class PlayerPoolAccessor(Protocol):
    """Query capability the engine needs from whoever owns the player pool."""

    def find_by_id(self, player_id: str) -> Optional[PoolPlayer]:
        ...

    def search(self, criteria: SearchCriteria) -> List[PoolPlayer]:
        ...


def matches(player: PoolPlayer, criteria: SearchCriteria) -> bool:
    if not player.is_available:
        return False
    if criteria.region is not None and player.region != criteria.region:
        return False
    if criteria.tranche is not None and player.tranche != criteria.tranche:
        return False
    if criteria.max_rank is not None and player.rank > criteria.max_rank:
        return False
    if criteria.min_points is not None and player.points < criteria.min_points:
        return False
    return True


class InMemoryPlayerPool:
    """Pool accessor over a snapshot list, keyed by player id."""

    def __init__(self, players: Iterable[PoolPlayer] = ()) -> None:
        self._players: Dict[str, PoolPlayer] = {}
        for player in players:
            self._players[player.id] = player

    def __len__(self) -> int:
        return len(self._players)

    def __iter__(self):
        return iter(self._players.values())

    def find_by_id(self, player_id: str) -> Optional[PoolPlayer]:
        return self._players.get(player_id)

    def search(self, criteria: SearchCriteria) -> List[PoolPlayer]:
        return [p for p in self._players.values() if matches(p, criteria)]

    def region_rankings(self, region: Region) -> List[PoolPlayer]:
        region = Region(region)
        return sorted(
            (p for p in self._players.values() if p.region == region),
            key=lambda p: p.rank,
        )

    def top_performers(self, region: Region, limit: int = 10) -> List[PoolPlayer]:
        return self.region_rankings(region)[: max(0, limit)]


def apply_points_delta(player: PoolPlayer, delta: float) -> PoolPlayer:
    """Return ``player`` with ``delta`` added to its points.

    Raises :class:`InvalidPointsError` when the adjustment would leave the
    player with a negative score.
    """

    new_points = player.points + delta
    if new_points < 0:
        raise InvalidPointsError(
            f"Points cannot be negative (player '{player.id}' has {player.points}, delta {delta})"
        )
    return player.model_copy(update={"points": new_points})

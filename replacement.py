"""Find substitutes for inactive rostered players."""

from __future__ import annotations

import logging
from typing import Optional

from config import EngineConfig
from models import Player, PoolPlayer, ReplacementResult, SearchCriteria
from player_pool import PlayerPoolAccessor, matches

logger = logging.getLogger(__name__)

NO_REPLACEMENT_AVAILABLE = "no replacement available"


def replacement_criteria(inactive_player: Player, config: Optional[EngineConfig] = None) -> SearchCriteria:
    config = config or EngineConfig.from_settings()
    return SearchCriteria(
        region=inactive_player.region,
        tranche=inactive_player.tranche,
        max_rank=config.rank_ceiling,
        min_points=config.min_points_threshold,
    )


def _preference(candidate: PoolPlayer):
    # most points, then best rank, then best win rate
    return (-candidate.points, candidate.rank, -candidate.stats.win_rate)


def find_replacement(
    inactive_player: Player,
    pool: PlayerPoolAccessor,
    config: Optional[EngineConfig] = None,
) -> ReplacementResult:
    """Best available pool player to replace ``inactive_player``.

    An empty search is a normal outcome: the result carries no player and a
    reason, and the caller decides what to do next.
    """

    criteria = replacement_criteria(inactive_player, config)
    # accessors backed by other stores may filter loosely; recheck every criterion
    candidates = [
        p for p in pool.search(criteria) if p.id != inactive_player.id and matches(p, criteria)
    ]
    logger.debug(
        "Replacement search for %s (%s, tranche %s): %d candidates",
        inactive_player.id,
        inactive_player.region.value,
        inactive_player.tranche,
        len(candidates),
    )
    if not candidates:
        return ReplacementResult(reason=NO_REPLACEMENT_AVAILABLE)
    best = min(candidates, key=_preference)
    return ReplacementResult(player=best.to_player())


def is_eligible_for_special(player: PoolPlayer, config: Optional[EngineConfig] = None) -> bool:
    config = config or EngineConfig.from_settings()
    return (
        player.rank <= config.rank_ceiling
        and player.points >= config.min_points_threshold
        and player.stats.tournaments_played >= config.special_min_tournaments
        and player.stats.win_rate >= config.special_min_win_rate
    )

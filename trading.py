"""Trade validation for one-for-one swaps between a roster and the player pool.

A trade request starts ``PROPOSED`` and every validation call moves it straight
to ``APPROVED`` or ``REJECTED``. Nothing is kept between calls: execution
re-validates against the snapshot it is given, so a player drafted elsewhere
since the last check is caught at execution time.
"""

from __future__ import annotations

import calendar
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from config import EngineConfig
from errors import PlayerNotFoundError, PlayerUnavailableError, TradeRejectedError
from models import Player, PoolPlayer, Team, TradeValidation
from player_pool import PlayerPoolAccessor

logger = logging.getLogger(__name__)

NO_TRADES_REMAINING = "no trades remaining"


class TradeState(str, Enum):
    PROPOSED = "PROPOSED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def state_of(validation: Optional[TradeValidation]) -> TradeState:
    if validation is None:
        return TradeState.PROPOSED
    return TradeState.APPROVED if validation.is_valid else TradeState.REJECTED


def simulate_trade(team: Team, player_out: Player, player_in: Player, now: datetime) -> Team:
    """New team value with ``player_in`` in ``player_out``'s roster slot."""

    return team.model_copy(
        update={
            "trades_remaining": team.trades_remaining - 1,
            "last_trade_date": now,
            "players": [player_in if p.id == player_out.id else p for p in team.players],
        }
    )


class TradeValidator:
    """Apply the season's trade rules to team and pool snapshots."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config or EngineConfig.from_settings()
        self.clock = clock

    # ───────────────────────────────────────────── Internal helpers ──
    def _month_name(self) -> str:
        return calendar.month_name[self.config.january_month]

    def _tranche_rejection(self, player_out: Player, player_in: PoolPlayer, now: datetime) -> Optional[str]:
        if now.month == self.config.january_month:
            out_level = player_out.tranche_level
            in_level = player_in.tranche_level
            # NEW has no tier to compare, so it only swaps for another NEW player
            if out_level is None or in_level is None:
                allowed = out_level is None and in_level is None
            else:
                allowed = in_level <= out_level
            if not allowed:
                return f"in {self._month_name()}, trades are limited to a lower or equal tranche"
            return None
        if player_in.tranche != player_out.tranche:
            return f"outside {self._month_name()}, trades must stay within the same tranche"
        return None

    def _resolve(self, team: Team, player_out_id: str, player_in_id: str, pool: PlayerPoolAccessor):
        player_out = team.find_player(player_out_id)
        if player_out is None:
            logger.warning("Outgoing player %s is not on team %s", player_out_id, team.id)
            raise PlayerNotFoundError(player_out_id, f"team '{team.id}'")
        player_in = pool.find_by_id(player_in_id)
        if player_in is None:
            logger.warning("Incoming player %s is not in the pool", player_in_id)
            raise PlayerNotFoundError(player_in_id, "player pool")
        if not player_in.is_available:
            logger.warning("Incoming player %s is not available", player_in_id)
            raise PlayerUnavailableError(player_in_id)
        return player_out, player_in

    # ───────────────────────────────────────────── Public API ──
    def validate(
        self,
        team: Team,
        player_out_id: str,
        player_in_id: str,
        pool: PlayerPoolAccessor,
        *,
        now: Optional[datetime] = None,
    ) -> TradeValidation:
        """Decide whether ``team`` may swap ``player_out_id`` for ``player_in_id``.

        Raises :class:`PlayerNotFoundError` or :class:`PlayerUnavailableError` for
        malformed requests. Rule violations come back as an invalid
        :class:`TradeValidation` carrying the reason.
        """

        now = now or self.clock()
        player_out, player_in = self._resolve(team, player_out_id, player_in_id, pool)

        reason: Optional[str] = None
        if team.trades_remaining <= 0:
            reason = NO_TRADES_REMAINING
        if reason is None:
            reason = self._tranche_rejection(player_out, player_in, now)
        if reason is None and player_in.rank > self.config.rank_ceiling:
            reason = f"incoming player must be in the top {self.config.rank_ceiling} of their region"

        if reason is not None:
            logger.debug(
                "Trade %s -> %s for team %s rejected: %s",
                player_out_id,
                player_in_id,
                team.id,
                reason,
            )
            return TradeValidation(is_valid=False, reason=reason)

        new_state = simulate_trade(team, player_out, player_in.to_player(), now)
        logger.info(
            "Trade %s -> %s approved for team %s (%d trades left)",
            player_out_id,
            player_in_id,
            team.id,
            new_state.trades_remaining,
        )
        return TradeValidation(is_valid=True, new_team_state=new_state)

    def execute(
        self,
        team: Team,
        player_out_id: str,
        player_in_id: str,
        pool: PlayerPoolAccessor,
        *,
        now: Optional[datetime] = None,
    ) -> Team:
        """Validate against the snapshots passed in and return the traded team.

        Callers must fetch ``team`` and ``pool`` right before executing; a
        previous :class:`TradeValidation` is never reused.
        """

        validation = self.validate(team, player_out_id, player_in_id, pool, now=now)
        if not validation.is_valid or validation.new_team_state is None:
            raise TradeRejectedError(validation.reason or "invalid trade")
        return validation.new_team_state


def can_trade(
    team: Team,
    player_out_id: str,
    player_in_id: str,
    pool: PlayerPoolAccessor,
    *,
    now: Optional[datetime] = None,
) -> TradeValidation:
    return TradeValidator().validate(team, player_out_id, player_in_id, pool, now=now)


def execute_trade(
    team: Team,
    player_out_id: str,
    player_in_id: str,
    pool: PlayerPoolAccessor,
    *,
    now: Optional[datetime] = None,
) -> Team:
    return TradeValidator().execute(team, player_out_id, player_in_id, pool, now=now)

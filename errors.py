"""Exceptions raised by the league rules engine.

Only structural problems are raised. Business rejections (a trade that is not
allowed right now, no replacement available) are returned as result values.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for structural errors raised by the engine."""


class PlayerNotFoundError(EngineError, LookupError):
    def __init__(self, player_id: str, where: str) -> None:
        super().__init__(f"Player '{player_id}' not found in {where}")
        self.player_id = player_id
        self.where = where


class TeamNotFoundError(EngineError, LookupError):
    def __init__(self, team_id: str) -> None:
        super().__init__(f"Team '{team_id}' not found")
        self.team_id = team_id


class PlayerUnavailableError(EngineError):
    def __init__(self, player_id: str) -> None:
        super().__init__(f"Player '{player_id}' is not available in the pool")
        self.player_id = player_id


class InvalidPointsError(EngineError, ValueError):
    pass


class TradeRejectedError(EngineError):
    """Raised by trade execution when the fresh validation no longer holds."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

"""Pydantic schemas for league snapshots and engine results."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import get_knob

NEW_TRANCHE = "NEW"

# Labels the original league data used for the mid-season tranche.
_NEW_TRANCHE_ALIASES = {"NEW", "NOUVEAU"}


class Region(str, Enum):
    EU = "EU"
    NAW = "NAW"
    BR = "BR"
    ASIA = "ASIA"
    OCE = "OCE"
    NAC = "NAC"
    ME = "ME"


def normalize_tranche(value) -> str:
    """Return the canonical tranche label for ``value`` (``"1"``..``"7"`` or ``"NEW"``)."""

    if isinstance(value, bool):
        raise ValueError("tranche must be an integer tier or 'NEW'")
    if isinstance(value, int):
        level = value
    else:
        label = str(value).strip().upper()
        if label in _NEW_TRANCHE_ALIASES:
            return NEW_TRANCHE
        try:
            level = int(label)
        except ValueError as exc:
            raise ValueError(f"Unknown tranche '{value}'") from exc
    if not 1 <= level <= 7:
        raise ValueError(f"tranche must be between 1 and 7, got {level}")
    return str(level)


class Player(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    nickname: str
    region: Region
    tranche: str
    points: float = Field(default=0.0, ge=0)
    rank: int = Field(..., ge=1)
    is_world_champion: bool = Field(default=False, alias="isWorldChampion")
    is_active: bool = Field(default=True, alias="isActive")
    last_update: Optional[datetime] = Field(default=None, alias="lastUpdate")

    @field_validator("tranche", mode="before")
    @classmethod
    def _coerce_tranche(cls, value):
        return normalize_tranche(value)

    @property
    def tranche_level(self) -> Optional[int]:
        if self.tranche == NEW_TRANCHE:
            return None
        return int(self.tranche)


class PlayerStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    total_points: float = Field(default=0.0, alias="totalPoints")
    tournaments_played: int = Field(default=0, ge=0, alias="tournamentsPlayed")
    average_placement: float = Field(default=0.0, alias="averagePlacement")
    win_rate: float = Field(default=0.0, alias="winRate")


class PoolPlayer(Player):
    is_available: bool = Field(default=True, alias="isAvailable")
    stats: PlayerStats = Field(default_factory=PlayerStats)

    def to_player(self) -> Player:
        """Rostered view of this pool entry; a drafted player is active."""

        data = self.model_dump(exclude={"is_available", "stats"})
        data["is_active"] = True
        return Player(**data)


class Team(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str
    season: int
    owner_id: Optional[str] = Field(default=None, alias="ownerId")
    trades_remaining: int = Field(default_factory=lambda: get_knob("max_trades"), ge=0, alias="tradesRemaining")
    last_trade_date: Optional[datetime] = Field(default=None, alias="lastTradeDate")
    players: List[Player] = Field(default_factory=list)

    def find_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None


class LeaderboardEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    rank: int = 0
    user_id: str = Field(..., alias="userId")
    total_points: float = Field(default=0.0, alias="totalPoints")
    points_by_region: Dict[Region, float] = Field(default_factory=dict, alias="pointsByRegion")
    regions_won: int = Field(default=0, alias="regionsWon")
    first_place_players: int = Field(default=0, alias="firstPlacePlayers")
    world_champions: int = Field(default=0, alias="worldChampions")
    team: Team


class PronostiqueurEntry(BaseModel):
    """One manager's standing across every team they own in a season."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    rank: int = 0
    user_id: str = Field(..., alias="userId")
    total_points: float = Field(default=0.0, alias="totalPoints")
    total_teams: int = Field(default=0, alias="totalTeams")
    avg_points_per_team: float = Field(default=0.0, alias="avgPointsPerTeam")
    best_team_points: float = Field(default=0.0, alias="bestTeamPoints")
    best_team_name: str = Field(default="", alias="bestTeamName")


class TeamRef(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    team_id: str = Field(..., alias="teamId")
    name: str
    owner_id: str = Field(..., alias="ownerId")


class PlayerLeaderboardEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    rank: int = 0
    player_id: str = Field(..., alias="playerId")
    nickname: str
    region: Region
    tranche: str
    total_points: float = Field(default=0.0, alias="totalPoints")
    teams: List[TeamRef] = Field(default_factory=list)
    pronostiqueurs: List[str] = Field(default_factory=list)

    @property
    def teams_count(self) -> int:
        return len(self.teams)


class TradeValidation(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    is_valid: bool = Field(default=False, alias="isValid")
    reason: Optional[str] = None
    new_team_state: Optional[Team] = Field(default=None, alias="newTeamState")


class SearchCriteria(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    region: Optional[Region] = None
    tranche: Optional[str] = None
    max_rank: Optional[int] = Field(default=None, ge=1, alias="maxRank")
    min_points: Optional[float] = Field(default=None, alias="minPoints")

    @field_validator("tranche", mode="before")
    @classmethod
    def _coerce_tranche(cls, value):
        if value is None:
            return None
        return normalize_tranche(value)


class ReplacementResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    player: Optional[Player] = None
    reason: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.player is not None


class LeagueSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_teams: int = Field(default=0, alias="totalTeams")
    total_players: int = Field(default=0, alias="totalPlayers")
    total_points: float = Field(default=0.0, alias="totalPoints")
    average_points: float = Field(default=0.0, alias="averagePoints")
    region_points: Dict[Region, float] = Field(default_factory=dict, alias="regionPoints")

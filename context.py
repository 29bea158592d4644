"""League snapshot loading for callers outside the rules engine."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from errors import PlayerNotFoundError, TeamNotFoundError
from models import Player, PoolPlayer, Team
from player_pool import InMemoryPlayerPool


class SnapshotPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    teams: List[Team] = Field(default_factory=list)
    pool: List[PoolPlayer] = Field(default_factory=list)


@dataclass(frozen=True)
class LeagueSnapshot:
    """Immutable view of the teams and player pool at one point in time."""

    teams: Tuple[Team, ...]
    pool: InMemoryPlayerPool
    created_at: datetime
    source_path: Optional[Path] = None

    def find_team(self, team_id: str) -> Team:
        for team in self.teams:
            if team.id == team_id:
                return team
        raise TeamNotFoundError(team_id)

    def find_rostered_player(self, player_id: str) -> Tuple[Team, Player]:
        for team in self.teams:
            player = team.find_player(player_id)
            if player is not None:
                return team, player
        raise PlayerNotFoundError(player_id, "any roster")

    def metadata(self) -> Dict[str, Any]:
        return {
            "created_at": self.created_at.isoformat(),
            "source_path": str(self.source_path) if self.source_path else None,
            "team_count": len(self.teams),
            "pool_size": len(self.pool),
        }


def build_snapshot(payload: Dict[str, Any], *, source_path: Optional[Path] = None) -> LeagueSnapshot:
    """Validate a raw ``{"teams": [...], "pool": [...]}`` mapping into a snapshot."""

    parsed = SnapshotPayload.model_validate(payload)
    return LeagueSnapshot(
        teams=tuple(parsed.teams),
        pool=InMemoryPlayerPool(parsed.pool),
        created_at=datetime.now(timezone.utc),
        source_path=source_path,
    )


def load_snapshot(path: Path | str) -> LeagueSnapshot:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")
    payload = json.loads(path.read_text(encoding="utf-8"))
    return build_snapshot(payload, source_path=path)

"""Runtime configuration knobs for the league rules engine.

Season rules used to live as constants next to the code that consulted them.
They are now stored in a thread-safe :class:`SettingsManager` so a season can be
tuned at runtime, and the engine components receive an immutable
:class:`EngineConfig` snapshot taken from it. Components never read the manager
directly while a computation is running.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from threading import RLock
from typing import Any, Dict


class SettingsManager:
    """Thread-safe accessor for mutable season knobs.

    The manager stores a copy of the default settings and exposes ``get``/``set``
    helpers. ``snapshot`` returns a plain dictionary copy that callers can keep
    without risking mid-computation mutation.
    """

    def __init__(self, defaults: Dict[str, Any]) -> None:
        self._defaults = dict(defaults)
        self._settings = dict(defaults)
        self._lock = RLock()

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._settings.keys())

    def get(self, name: str) -> Any:
        with self._lock:
            if name not in self._settings:
                raise KeyError(f"Unknown setting '{name}'")
            return self._settings[name]

    def set(self, name: str, value: Any) -> None:
        with self._lock:
            if name not in self._settings:
                raise KeyError(f"Unknown setting '{name}'")
            self._settings[name] = value

    def reset(self, name: str | None = None) -> None:
        with self._lock:
            if name is None:
                self._settings = dict(self._defaults)
                return
            if name not in self._defaults:
                raise KeyError(f"Unknown setting '{name}'")
            self._settings[name] = self._defaults[name]

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._settings)


_DEFAULT_SETTINGS: Dict[str, Any] = {
    "max_trades": 3,
    "january_month": 1,
    "rank_ceiling": 10,
    "min_points_threshold": 500,
    "default_percentile": 10,
    "special_min_tournaments": 3,
    "special_min_win_rate": 0.1,
}

SETTINGS_HELP: Dict[str, str] = {
    "max_trades": "Number of trades a team may make over a season.",
    "january_month": "Calendar month (1-12) during which trades may move down to a lower or equal tranche.",
    "rank_ceiling": "Worst regional rank an incoming or replacement player may hold (10 = top 10 of the region).",
    "min_points_threshold": "Minimum points for a pool player to be considered active when searching replacements.",
    "default_percentile": "Percentile used when counting a team's players in the global top K%.",
    "special_min_tournaments": "Tournaments a player must have played to be eligible for special picks.",
    "special_min_win_rate": "Win rate a player must reach to be eligible for special picks.",
}

settings = SettingsManager(_DEFAULT_SETTINGS)


def set_knob(name: str, value: Any) -> None:
    settings.set(name, value)


def get_knob(name: str) -> Any:
    return settings.get(name)


def all_knobs() -> Dict[str, Any]:
    return settings.snapshot()


@dataclass(frozen=True)
class EngineConfig:
    """Immutable set of season rules handed to the engine components."""

    max_trades: int = _DEFAULT_SETTINGS["max_trades"]
    january_month: int = _DEFAULT_SETTINGS["january_month"]
    rank_ceiling: int = _DEFAULT_SETTINGS["rank_ceiling"]
    min_points_threshold: float = _DEFAULT_SETTINGS["min_points_threshold"]
    default_percentile: float = _DEFAULT_SETTINGS["default_percentile"]
    special_min_tournaments: int = _DEFAULT_SETTINGS["special_min_tournaments"]
    special_min_win_rate: float = _DEFAULT_SETTINGS["special_min_win_rate"]

    def __post_init__(self) -> None:
        if not 1 <= self.january_month <= 12:
            raise ValueError(f"january_month must be between 1 and 12, got {self.january_month}")
        if self.rank_ceiling < 1:
            raise ValueError(f"rank_ceiling must be at least 1, got {self.rank_ceiling}")
        if self.max_trades < 0:
            raise ValueError(f"max_trades cannot be negative, got {self.max_trades}")

    @classmethod
    def from_settings(cls, manager: SettingsManager | None = None) -> "EngineConfig":
        snapshot = (manager or settings).snapshot()
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in snapshot.items() if k in names})

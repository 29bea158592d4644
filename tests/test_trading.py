from __future__ import annotations

from datetime import datetime, timezone

import pytest

from config import EngineConfig
from errors import PlayerNotFoundError, PlayerUnavailableError, TradeRejectedError
from models import TradeValidation
from player_pool import InMemoryPlayerPool
from trading import NO_TRADES_REMAINING, TradeState, TradeValidator, can_trade, execute_trade, state_of


@pytest.fixture
def validator(config) -> TradeValidator:
    return TradeValidator(config)


def test_march_same_tranche_swap_is_approved(validator, trade_setup, march) -> None:
    team, pool = trade_setup
    result = validator.validate(team, "x", "y", pool, now=march)

    assert result.is_valid
    assert result.reason is None
    new_team = result.new_team_state
    assert new_team is not None
    assert new_team.trades_remaining == 2
    assert new_team.last_trade_date == march
    assert [p.id for p in new_team.players] == ["p1", "y", "p3"]
    assert new_team.players[1].is_active
    # the input snapshot is left untouched
    assert team.trades_remaining == 3
    assert [p.id for p in team.players] == ["p1", "x", "p3"]


def test_incoming_rank_above_ceiling_is_rejected(validator, trade_setup, march) -> None:
    team, pool = trade_setup
    result = validator.validate(team, "x", "rank12", pool, now=march)

    assert not result.is_valid
    assert "top 10" in result.reason
    assert result.new_team_state is None


def test_no_trades_remaining_rejects_any_trade(validator, trade_setup, march) -> None:
    team, pool = trade_setup
    exhausted = team.model_copy(update={"trades_remaining": 0})

    for incoming in ("y", "rank12", "t1"):
        result = validator.validate(exhausted, "x", incoming, pool, now=march)
        assert not result.is_valid
        assert result.reason == NO_TRADES_REMAINING
        assert result.new_team_state is None


def test_outside_january_tranche_must_match(validator, trade_setup, march) -> None:
    team, pool = trade_setup
    for incoming in ("t1", "t3"):
        result = validator.validate(team, "x", incoming, pool, now=march)
        assert not result.is_valid
        assert "same tranche" in result.reason


def test_january_allows_lower_or_equal_tranche(validator, trade_setup, january) -> None:
    team, pool = trade_setup
    down = validator.validate(team, "x", "t1", pool, now=january)
    same = validator.validate(team, "x", "y", pool, now=january)

    assert down.is_valid
    assert same.is_valid
    assert down.new_team_state.players[1].id == "t1"


def test_january_rejects_higher_tranche(validator, trade_setup, january) -> None:
    team, pool = trade_setup
    up_from_two = validator.validate(team, "x", "t3", pool, now=january)
    up_from_one = validator.validate(team, "p1", "y", pool, now=january)

    for result in (up_from_two, up_from_one):
        assert not result.is_valid
        assert "January" in result.reason
        assert "lower or equal tranche" in result.reason


def test_january_still_enforces_rank_ceiling(validator, make_player, make_pool_player, make_team, january) -> None:
    team = make_team("a", [make_player("x", tranche="2", rank=15)])
    pool = InMemoryPlayerPool([make_pool_player("deep", tranche="1", rank=11)])

    result = validator.validate(team, "x", "deep", pool, now=january)
    assert not result.is_valid
    assert "top 10" in result.reason


def test_new_tranche_rules(validator, make_player, make_pool_player, make_team, march, january) -> None:
    team = make_team("a", [make_player("x", tranche="NEW"), make_player("z", tranche="2")])
    pool = InMemoryPlayerPool(
        [
            make_pool_player("new", tranche="NEW", rank=3),
            make_pool_player("two", tranche="2", rank=3),
        ]
    )

    assert validator.validate(team, "x", "new", pool, now=march).is_valid
    assert validator.validate(team, "x", "new", pool, now=january).is_valid
    assert not validator.validate(team, "x", "two", pool, now=march).is_valid
    assert not validator.validate(team, "z", "new", pool, now=january).is_valid
    assert not validator.validate(team, "x", "two", pool, now=january).is_valid


def test_missing_outgoing_player_is_structural(validator, trade_setup, march) -> None:
    team, pool = trade_setup
    exhausted = team.model_copy(update={"trades_remaining": 0})
    with pytest.raises(PlayerNotFoundError):
        validator.validate(exhausted, "nobody", "y", pool, now=march)


def test_missing_incoming_player_is_structural(validator, trade_setup, march) -> None:
    team, pool = trade_setup
    with pytest.raises(PlayerNotFoundError) as excinfo:
        validator.validate(team, "x", "ghost", pool, now=march)
    assert excinfo.value.player_id == "ghost"


def test_unavailable_incoming_player_is_structural(validator, trade_setup, march) -> None:
    team, pool = trade_setup
    with pytest.raises(PlayerUnavailableError):
        validator.validate(team, "x", "gone", pool, now=march)


def test_execute_returns_new_team(validator, trade_setup, march) -> None:
    team, pool = trade_setup
    new_team = validator.execute(team, "x", "y", pool, now=march)
    assert new_team.trades_remaining == 2
    assert new_team.players[1].id == "y"


def test_execute_revalidates_against_fresh_snapshot(validator, trade_setup, make_pool_player, march) -> None:
    team, pool = trade_setup
    assert validator.validate(team, "x", "y", pool, now=march).is_valid

    # another team drafted "y" between validation and execution
    fresh_pool = InMemoryPlayerPool(
        [make_pool_player("y", tranche="2", rank=8, is_available=False)]
    )
    with pytest.raises(PlayerUnavailableError):
        validator.execute(team, "x", "y", fresh_pool, now=march)


def test_execute_raises_rejection_reason(validator, trade_setup, march) -> None:
    team, pool = trade_setup
    with pytest.raises(TradeRejectedError) as excinfo:
        validator.execute(team, "x", "rank12", pool, now=march)
    assert "top 10" in excinfo.value.reason

    spent = team.model_copy(update={"trades_remaining": 0})
    with pytest.raises(TradeRejectedError) as excinfo:
        validator.execute(spent, "x", "y", pool, now=march)
    assert excinfo.value.reason == NO_TRADES_REMAINING


def test_budget_runs_out_after_successive_trades(validator, make_player, make_pool_player, make_team, march) -> None:
    team = make_team("a", [make_player("x", tranche="2")], trades_remaining=2)
    pool = InMemoryPlayerPool(
        [make_pool_player(pid, tranche="2", rank=4) for pid in ("b", "c", "d")]
    )

    team = validator.execute(team, "x", "b", pool, now=march)
    team = validator.execute(team, "b", "c", pool, now=march)
    assert team.trades_remaining == 0
    result = validator.validate(team, "c", "d", pool, now=march)
    assert result.reason == NO_TRADES_REMAINING


def test_state_of() -> None:
    assert state_of(None) is TradeState.PROPOSED
    assert state_of(TradeValidation(is_valid=True)) is TradeState.APPROVED
    assert state_of(TradeValidation(is_valid=False, reason="nope")) is TradeState.REJECTED


def test_clock_is_used_when_now_is_omitted(trade_setup, january) -> None:
    team, pool = trade_setup
    validator = TradeValidator(EngineConfig(), clock=lambda: january)
    result = validator.validate(team, "x", "t1", pool)
    assert result.is_valid
    assert result.new_team_state.last_trade_date == january


def test_season_specific_config(trade_setup) -> None:
    team, pool = trade_setup
    validator = TradeValidator(EngineConfig(january_month=2, rank_ceiling=15))
    february = datetime(2025, 2, 3, tzinfo=timezone.utc)

    assert validator.validate(team, "x", "rank12", pool, now=february).is_valid
    result = validator.validate(team, "x", "t3", pool, now=february)
    assert "February" in result.reason


def test_module_level_helpers(trade_setup, march) -> None:
    team, pool = trade_setup
    assert can_trade(team, "x", "y", pool, now=march).is_valid
    assert execute_trade(team, "x", "y", pool, now=march).players[1].id == "y"

"""Tests for grid parameter validation and ladder construction."""

import pytest
from pydantic import ValidationError

from grid_core.ladder import build_ladder
from grid_core.models.params import GridParams, StrategyType


def make_params(**overrides) -> GridParams:
    """Build GridParams with the 1000–2000 / 10 grid / 10000 defaults."""
    values = dict(min_price=1000, max_price=2000, grid_count=10, investment=10000)
    values.update(overrides)
    return GridParams(**values)


# ---------------------------------------------------------------------------
# Parameter validation
# ---------------------------------------------------------------------------

class TestGridParamsValidation:
    """Configuration errors are raised before any state exists."""

    def test_valid_defaults_to_spot(self):
        params = make_params()
        assert params.strategy_type is StrategyType.SPOT
        assert params.leverage is None

    def test_min_equal_to_max_rejected(self):
        with pytest.raises(ValidationError, match="min_price must be below max_price"):
            make_params(min_price=2000, max_price=2000)

    def test_min_above_max_rejected(self):
        with pytest.raises(ValidationError):
            make_params(min_price=2500, max_price=2000)

    def test_contract_rejected(self):
        with pytest.raises(ValidationError, match="contract grids are not supported"):
            make_params(strategy_type="contract", leverage=5)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("min_price", 0),
            ("max_price", -1),
            ("grid_count", 0),
            ("investment", 0),
            ("investment", -100),
            ("leverage", 0),
            ("leverage", 101),
        ],
    )
    def test_out_of_range_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            make_params(**{field: value})

    def test_params_are_frozen(self):
        params = make_params()
        with pytest.raises(ValidationError):
            params.grid_count = 20


# ---------------------------------------------------------------------------
# Ladder construction
# ---------------------------------------------------------------------------

class TestBuildLadder:

    def test_levels_are_evenly_spaced(self):
        ladder = build_ladder(make_params())
        assert len(ladder) == 11
        assert ladder.levels[0] == pytest.approx(1000)
        assert ladder.levels[-1] == pytest.approx(2000)
        assert ladder.gap == pytest.approx(100)
        for lower, upper in zip(ladder.levels, ladder.levels[1:]):
            assert upper - lower == pytest.approx(100)

    def test_unit_size(self):
        # sum(1000, 1100, ..., 2000) = 16500
        ladder = build_ladder(make_params())
        assert ladder.unit_size == pytest.approx(10000 / 16500)

    @pytest.mark.parametrize(
        "min_price,max_price,grid_count,investment",
        [
            (1000, 2000, 10, 10000),
            (40000, 50000, 10, 10000),
            (0.05, 0.25, 37, 123.45),
            (1.5, 1.6, 1, 1_000_000),
            (20000, 100000, 150, 50000),
        ],
    )
    def test_full_ladder_costs_exactly_the_investment(
        self, min_price, max_price, grid_count, investment
    ):
        ladder = build_ladder(
            make_params(
                min_price=min_price,
                max_price=max_price,
                grid_count=grid_count,
                investment=investment,
            )
        )
        assert ladder.full_cost == pytest.approx(investment, rel=1e-12)

    def test_single_grid_has_two_levels(self):
        ladder = build_ladder(make_params(grid_count=1))
        assert ladder.levels == pytest.approx((1000, 2000))
        assert ladder.unit_size == pytest.approx(10000 / 3000)

    def test_ladder_is_immutable(self):
        ladder = build_ladder(make_params())
        with pytest.raises(AttributeError):
            ladder.unit_size = 1.0

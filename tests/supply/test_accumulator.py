"""
Tests for the Supply Accumulator.

============================================================
TEST SCENARIOS
============================================================
1. Horizon = last unlock event + buffer, never below start
2. First block always queries the unlocked balance
3. Non-event blocks carry the previous values, no queries
4. Vesting and lock heights re-query with the right arguments
5. Estimated times advance by the block interval
6. Pruning keeps only blocks where the total moved

============================================================
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from conftest import ANCHOR
from supply.accumulator import SupplyAccumulator, compute_horizon, prune_unchanged
from supply.models import BlockTotal


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def reader():
    """Reader whose balances follow a tiny fixed schedule."""
    mock = MagicMock()
    mock.net_unlocked_balance_as_of.side_effect = lambda h: 1_000_000 if h < 103 else 1_200_000
    mock.total_vested_as_of.side_effect = lambda h, floor: 500_000 if h >= 105 else 0
    return mock


@pytest.fixture
def accumulator(reader, fixed_clock):
    return SupplyAccumulator(reader, clock=fixed_clock, block_interval_seconds=600)


def entry(height: int, total: int) -> BlockTotal:
    return BlockTotal(
        block_height=height,
        queried_micro_units=total,
        vested_micro_units=0,
        total=total,
        estimated_time=ANCHOR,
    )


# ============================================================
# TEST: HORIZON
# ============================================================

class TestComputeHorizon:
    """Tests for compute_horizon."""

    def test_latest_event_plus_buffer(self):
        assert compute_horizon([100, 120], [105], start_height=90) == 125
        assert compute_horizon([100], [105, 130], start_height=90, buffer_blocks=2) == 132

    def test_empty_schedule(self):
        assert compute_horizon([], [], start_height=90) == 95
        assert compute_horizon([], [97], start_height=90) == 102

    def test_never_below_start(self):
        assert compute_horizon([10], [20], start_height=500) == 500


# ============================================================
# TEST: ACCUMULATION
# ============================================================

class TestAccumulate:
    """Tests for SupplyAccumulator.accumulate."""

    def test_one_entry_per_block(self, accumulator):
        series = accumulator.accumulate(100, 110, vesting_heights=[105], lock_heights=[103])

        assert [e.block_height for e in series] == list(range(100, 111))

    def test_first_block_always_queried(self, accumulator, reader):
        series = accumulator.accumulate(100, 102, vesting_heights=[], lock_heights=[])

        reader.net_unlocked_balance_as_of.assert_called_once_with(100)
        reader.total_vested_as_of.assert_not_called()
        assert [e.total for e in series] == [1_000_000] * 3

    def test_requeries_only_at_event_heights(self, accumulator, reader):
        accumulator.accumulate(100, 110, vesting_heights=[105, 108], lock_heights=[103])

        assert [c.args for c in reader.net_unlocked_balance_as_of.call_args_list] == [(100,), (103,)]
        assert [c.args for c in reader.total_vested_as_of.call_args_list] == [(105, 100), (108, 100)]
        assert accumulator.query_counts == {"unlocked": 2, "vested": 2}

    def test_totals_combine_both_sources(self, accumulator):
        series = accumulator.accumulate(100, 106, vesting_heights=[105], lock_heights=[103])
        by_height = {e.block_height: e for e in series}

        assert by_height[102].total == 1_000_000
        assert by_height[103].queried_micro_units == 1_200_000
        assert by_height[104].total == 1_200_000
        assert by_height[105].vested_micro_units == 500_000
        assert by_height[106].total == 1_700_000

    def test_carry_forward_blocks_equal_previous(self, accumulator):
        events = {100, 103, 105}
        series = accumulator.accumulate(100, 110, vesting_heights=[105], lock_heights=[103])

        for previous, current in zip(series, series[1:]):
            if current.block_height not in events:
                assert current.total == previous.total
                assert current.queried_micro_units == previous.queried_micro_units
                assert current.vested_micro_units == previous.vested_micro_units

    def test_event_heights_before_start_ignored(self, accumulator, reader):
        accumulator.accumulate(100, 101, vesting_heights=[50], lock_heights=[60])

        reader.total_vested_as_of.assert_not_called()
        reader.net_unlocked_balance_as_of.assert_called_once_with(100)

    def test_estimated_time(self, accumulator):
        series = accumulator.accumulate(100, 103, vesting_heights=[], lock_heights=[])

        assert series[0].estimated_time == ANCHOR
        assert series[3].estimated_time == ANCHOR + timedelta(minutes=30)

    def test_explicit_anchor(self, accumulator):
        anchor = ANCHOR + timedelta(days=1)
        series = accumulator.accumulate(100, 100, [], [], anchor=anchor)

        assert series[0].estimated_time == anchor

    def test_single_block_range(self, accumulator):
        assert len(accumulator.accumulate(100, 100, [], [])) == 1

    def test_reversed_range_rejected(self, accumulator):
        with pytest.raises(ValueError):
            accumulator.accumulate(100, 99, [], [])


# ============================================================
# TEST: PRUNING
# ============================================================

class TestPrune:
    """Tests for prune_unchanged."""

    def test_keeps_first_of_each_run(self):
        series = [entry(1, 10), entry(2, 10), entry(3, 15), entry(4, 15), entry(5, 20), entry(6, 20)]

        assert [e.block_height for e in prune_unchanged(series)] == [1, 3, 5]

    def test_no_adjacent_duplicates(self):
        series = [entry(h, t) for h, t in enumerate([5, 5, 5, 7, 7, 9, 9, 9, 12])]
        pruned = prune_unchanged(series)

        assert all(a.total != b.total for a, b in zip(pruned, pruned[1:]))
        assert pruned[0] is series[0]
        assert pruned[-1].total == series[-1].total

    def test_returns_new_list(self):
        series = [entry(1, 10), entry(2, 10)]
        pruned = prune_unchanged(series)

        assert pruned is not series
        assert len(series) == 2

    def test_empty(self):
        assert prune_unchanged([]) == []

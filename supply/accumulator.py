"""
Supply Accumulator.

============================================================
PURPOSE
============================================================
Walks block heights one at a time from the starting height to
the horizon and records the liquid supply at each block.

Per block:
1. Vesting release height  -> re-query total vested in
   (start_height, block]; otherwise carry the previous value.
2. Lock-transfer height, or the first block -> re-query the
   net unlocked balance; otherwise carry the previous value.
3. total = queried + vested
4. estimated_time = anchor + (block - start) * block interval

Balances only move at heights known in advance, so every other
block reuses the previous entry without a store round-trip.

============================================================
"""

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from core.clock import ClockProtocol, SystemClock
from core.constants import DEFAULT_BLOCK_INTERVAL_SECONDS, DEFAULT_HORIZON_BUFFER_BLOCKS

from .models import BlockTotal


logger = logging.getLogger(__name__)


# ============================================================
# HORIZON
# ============================================================

def compute_horizon(
    lock_heights: Iterable[int],
    vesting_heights: Iterable[int],
    start_height: int,
    buffer_blocks: int = DEFAULT_HORIZON_BUFFER_BLOCKS,
) -> int:
    """
    Last block of the series: the last known unlock event plus a buffer.

    Empty schedules are ignored. The horizon never falls below
    `start_height`, so the series always holds at least one entry.
    """
    last_events = [max(heights) for heights in (list(lock_heights), list(vesting_heights)) if heights]
    if not last_events:
        return start_height + buffer_blocks
    return max(max(last_events) + buffer_blocks, start_height)


# ============================================================
# ACCUMULATOR
# ============================================================

class SupplyAccumulator:
    """
    Builds the per-block liquid supply series.

    The reader only needs `net_unlocked_balance_as_of(height)` and
    `total_vested_as_of(height, floor_height)`.
    """

    def __init__(
        self,
        reader,
        clock: Optional[ClockProtocol] = None,
        block_interval_seconds: int = DEFAULT_BLOCK_INTERVAL_SECONDS,
    ):
        self._reader = reader
        self._clock = clock or SystemClock()
        self._block_interval = timedelta(seconds=block_interval_seconds)
        self.query_counts: Counter = Counter()

    def accumulate(
        self,
        start_height: int,
        end_height: int,
        vesting_heights: Iterable[int],
        lock_heights: Iterable[int],
        anchor: Optional[datetime] = None,
    ) -> List[BlockTotal]:
        """
        Produce one BlockTotal per height in [start_height, end_height].

        Args:
            start_height: First block; always re-queried
            end_height: Last block (inclusive)
            vesting_heights: Heights with a vesting release
            lock_heights: Heights where some transfer lock matures
            anchor: Estimated time of `start_height` (default: clock anchor)
        """
        if end_height < start_height:
            raise ValueError(f"end_height {end_height} is below start_height {start_height}")

        vesting_set = set(vesting_heights)
        lock_set = set(lock_heights)
        anchor = anchor or self._clock.anchor()

        logger.info(
            f"Accumulating supply for blocks {start_height}..{end_height} "
            f"({end_height - start_height + 1} blocks)"
        )

        totals: List[BlockTotal] = []
        vested = 0
        queried = 0

        for block_height in range(start_height, end_height + 1):
            if block_height in vesting_set:
                vested = self._reader.total_vested_as_of(block_height, start_height)
                self.query_counts["vested"] += 1

            if block_height in lock_set or block_height == start_height:
                queried = self._reader.net_unlocked_balance_as_of(block_height)
                self.query_counts["unlocked"] += 1

            totals.append(BlockTotal(
                block_height=block_height,
                queried_micro_units=queried,
                vested_micro_units=vested,
                total=queried + vested,
                estimated_time=anchor + (block_height - start_height) * self._block_interval,
            ))

        logger.info(
            f"Accumulated {len(totals)} entries with "
            f"{self.query_counts['unlocked']} balance and "
            f"{self.query_counts['vested']} vesting queries"
        )
        return totals


# ============================================================
# PRUNING
# ============================================================

def prune_unchanged(series: Iterable[BlockTotal]) -> List[BlockTotal]:
    """
    Keep an entry only when its total differs from the last kept entry.

    The first entry is always kept, and the final total is always
    represented by the first block that reached it.
    """
    pruned: List[BlockTotal] = []
    for entry in series:
        if not pruned or entry.total != pruned[-1].total:
            pruned.append(entry)
    return pruned

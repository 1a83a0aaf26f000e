"""
Orchestrator - Supply Pipeline.

============================================================
RESPONSIBILITY
============================================================
Single top-level routine for a supply run:

    connect -> read schedule -> accumulate -> validate
            -> prune -> validate pruned -> write

- Strictly sequential, one ledger connection
- The connection is released on every exit path
- Nothing is written unless every check passed
- Any failure aborts the whole run

============================================================
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from sqlalchemy.engine import Engine

from core.clock import ClockProtocol, SystemClock
from core.config import SupplyConfig
from core.exceptions import InvariantViolationError
from database.engine import ledger_connection, verify_database_connection
from ledger.models import PlaceholderAccount
from ledger.reader import LedgerReader
from reporting.csv_report import (
    ReportBatch,
    write_placeholder_csv,
    write_placeholder_summary_csv,
    write_supply_csv,
)
from reporting.formatters import format_whole_units
from supply.accumulator import SupplyAccumulator, compute_horizon, prune_unchanged
from supply.models import BlockTotal
from supply.validator import ValidationResult, validate_pruned, validate_series


logger = logging.getLogger(__name__)


# ============================================================
# RESULT
# ============================================================

@dataclass
class PipelineResult:
    """Outcome of a completed supply run."""

    start_height: int
    end_height: int
    series: List[BlockTotal]
    """Every block from start to end."""

    report_series: List[BlockTotal]
    """The series as written (pruned unless disabled)."""

    placeholders: List[PlaceholderAccount] = field(default_factory=list)
    placeholder_totals: Dict[str, int] = field(default_factory=dict)
    written_paths: List[Path] = field(default_factory=list)

    @property
    def final_supply(self) -> int:
        """Final unlocked supply in micro units."""
        return self.series[-1].total


def _require(result: ValidationResult) -> None:
    if not result.is_valid:
        logger.critical(f"Invariant violated: {result.error_message}")
        raise InvariantViolationError(
            result.error_code or "INVALID_SERIES",
            result.error_message or "invalid series",
            context={"block_height": result.block_height},
        )


# ============================================================
# RUN
# ============================================================

def run(
    config: SupplyConfig,
    engine: Optional[Engine] = None,
    clock: Optional[ClockProtocol] = None,
) -> PipelineResult:
    """
    Compute, validate and write the liquid supply series.

    Args:
        config: Run configuration
        engine: Ledger engine (default: built from config.database_url)
        clock: Time source for estimated block times

    Returns:
        PipelineResult

    Raises:
        LedgerError, InvariantViolationError, ReportWriteError
    """
    clock = clock or SystemClock()
    anchor = (
        ClockProtocol.parse_iso(config.anchor_time)
        if config.anchor_time
        else clock.anchor()
    )

    logger.info("=" * 60)
    logger.info("LIQUID SUPPLY RUN")
    logger.info("=" * 60)

    placeholders: List[PlaceholderAccount] = []
    placeholder_totals: Dict[str, int] = {}

    with ledger_connection(engine, config.database_url) as conn:
        verify_database_connection(conn)
        reader = LedgerReader(conn, token_type=config.token_type)

        # Step 1: schedule
        start_height = (
            config.start_height
            if config.start_height is not None
            else reader.latest_block_height()
        )
        vesting = reader.vesting_releases()
        vesting_heights = [event.block_height for event in vesting]
        lock_heights = reader.lock_transfer_heights()

        end_height = (
            config.end_height
            if config.end_height is not None
            else compute_horizon(
                lock_heights,
                vesting_heights,
                start_height,
                config.horizon_buffer_blocks,
            )
        )
        logger.info(f"Block range: {start_height}..{end_height}")

        # Step 2: accumulate
        accumulator = SupplyAccumulator(
            reader,
            clock=clock,
            block_interval_seconds=config.block_interval_seconds,
        )
        series = accumulator.accumulate(
            start_height,
            end_height,
            vesting_heights,
            lock_heights,
            anchor=anchor,
        )

        # Step 3: placeholder accounts
        if config.wants_placeholder_reports:
            placeholders = reader.placeholder_accounts(
                end_height, config.allowed_address_versions
            )
            placeholder_totals = reader.placeholder_balances(
                end_height, config.allowed_address_versions
            )

    # Step 4: invariants
    _require(validate_series(
        series,
        start_height,
        expected_final_supply=config.expected_final_supply,
    ))

    report_series = series
    if config.prune:
        report_series = prune_unchanged(series)
        _require(validate_pruned(report_series, start_height))
        logger.info(f"Pruned series from {len(series)} to {len(report_series)} entries")

    logger.info(f"Final supply: {format_whole_units(series[-1].total)}")

    # Step 5: write
    result = PipelineResult(
        start_height=start_height,
        end_height=end_height,
        series=series,
        report_series=report_series,
        placeholders=placeholders,
        placeholder_totals=placeholder_totals,
    )

    # Every artifact is staged before any is published
    with ReportBatch() as batch:
        write_supply_csv(config.output_path, report_series, batch)
        if config.placeholder_report_path:
            write_placeholder_csv(config.placeholder_report_path, placeholders, batch)
        if config.placeholder_summary_path:
            write_placeholder_summary_csv(
                config.placeholder_summary_path, placeholder_totals, batch
            )
        result.written_paths.extend(batch.commit())

    logger.info("=" * 60)
    logger.info("LIQUID SUPPLY RUN COMPLETE")
    logger.info("=" * 60)
    return result

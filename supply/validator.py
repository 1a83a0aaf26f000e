"""
Supply - Invariant Validation.

============================================================
PURPOSE
============================================================
Checks a produced series before anything is written.

VALIDATION STEPS:
1. Series is not empty
2. First entry is the starting block height
3. Heights advance by exactly one (pre-pruning only)
4. Total never decreases
5. Final whole-token total matches the expected supply (when configured)

Validators never raise. They return a ValidationResult and the
orchestrator turns a failure into InvariantViolationError.

============================================================
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from core.constants import MICRO_UNIT_DECIMALS

from .models import BlockTotal


logger = logging.getLogger(__name__)


# ============================================================
# ERROR CODES
# ============================================================

EMPTY_SERIES = "EMPTY_SERIES"
UNEXPECTED_INITIAL_HEIGHT = "UNEXPECTED_INITIAL_HEIGHT"
UNORDERED_BLOCKS = "UNORDERED_BLOCKS"
DECREASING_TOTAL = "DECREASING_TOTAL"
DUPLICATE_TOTAL = "DUPLICATE_TOTAL"
UNEXPECTED_FINAL_SUPPLY = "UNEXPECTED_FINAL_SUPPLY"


# ============================================================
# VALIDATION RESULT
# ============================================================

@dataclass
class ValidationResult:
    """Result of series validation."""

    is_valid: bool
    """Whether validation passed."""

    error_code: Optional[str] = None
    """Error code if invalid."""

    error_message: Optional[str] = None
    """Error message if invalid."""

    block_height: Optional[int] = None
    """Block where the violation was found."""

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def fail(
        cls,
        error_code: str,
        error_message: str,
        block_height: Optional[int] = None,
    ) -> "ValidationResult":
        logger.error(f"Validation failed [{error_code}]: {error_message}")
        return cls(
            is_valid=False,
            error_code=error_code,
            error_message=error_message,
            block_height=block_height,
        )


# ============================================================
# VALIDATORS
# ============================================================

def validate_series(
    series: Sequence[BlockTotal],
    start_height: int,
    contiguous: bool = True,
    expected_final_supply: Optional[int] = None,
) -> ValidationResult:
    """
    Validate a supply series.

    Args:
        series: Entries in production order
        start_height: Height the accumulation was seeded with
        contiguous: Require +1 steps (False for pruned series)
        expected_final_supply: Required final total in whole tokens, if any.
            The fractional part is ignored.

    Returns:
        ValidationResult
    """
    if not series:
        return ValidationResult.fail(EMPTY_SERIES, "series is empty")

    first = series[0]
    if first.block_height != start_height:
        return ValidationResult.fail(
            UNEXPECTED_INITIAL_HEIGHT,
            f"unexpected initial block height {first.block_height}, expected {start_height}",
            first.block_height,
        )

    for previous, current in zip(series, series[1:]):
        if contiguous:
            ordered = current.block_height == previous.block_height + 1
        else:
            ordered = current.block_height > previous.block_height
        if not ordered:
            return ValidationResult.fail(
                UNORDERED_BLOCKS,
                f"unordered blocks: {previous.block_height} followed by {current.block_height}",
                current.block_height,
            )

        if current.total < previous.total:
            return ValidationResult.fail(
                DECREASING_TOTAL,
                f"total balance decreased at block {current.block_height}: "
                f"{previous.total} -> {current.total}",
                current.block_height,
            )

    final_whole_units = series[-1].total // 10 ** MICRO_UNIT_DECIMALS
    if expected_final_supply is not None and final_whole_units != expected_final_supply:
        return ValidationResult.fail(
            UNEXPECTED_FINAL_SUPPLY,
            f"incorrect final unlocked balance {final_whole_units}, "
            f"expected {expected_final_supply}",
            series[-1].block_height,
        )

    return ValidationResult.ok()


def validate_pruned(
    series: Sequence[BlockTotal],
    start_height: int,
) -> ValidationResult:
    """A pruned series must also never repeat a total between neighbours."""
    result = validate_series(series, start_height, contiguous=False)
    if not result.is_valid:
        return result

    for previous, current in zip(series, series[1:]):
        if current.total == previous.total:
            return ValidationResult.fail(
                DUPLICATE_TOTAL,
                f"unchanged total kept at block {current.block_height}",
                current.block_height,
            )

    return ValidationResult.ok()

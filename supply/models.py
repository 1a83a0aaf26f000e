"""
Supply Data Models.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class BlockTotal:
    """
    Unlocked supply at one block height.

    total == queried_micro_units + vested_micro_units, all in micro units.
    """

    block_height: int
    """Block this entry describes."""

    queried_micro_units: int
    """Net unlocked balance of matured transfer-locked accounts."""

    vested_micro_units: int
    """Vesting released after the starting height, up to this block."""

    total: int
    """Liquid supply at this block."""

    estimated_time: datetime
    """Illustrative wall-clock time of the block."""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "block_height": self.block_height,
            "queried_micro_units": self.queried_micro_units,
            "vested_micro_units": self.vested_micro_units,
            "total": self.total,
            "estimated_time": self.estimated_time.isoformat(),
        }

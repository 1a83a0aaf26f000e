"""
Ledger Data Models - Typed rows returned by the Ledger Reader.

All amounts are exact integers in micro units.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class VestingEvent:
    """Total amount released by vesting schedules at one block height."""
    block_height: int
    micro_units: int

    def to_dict(self) -> dict[str, Any]:
        return {"block_height": self.block_height, "micro_units": self.micro_units}


@dataclass(frozen=True)
class PlaceholderAccount:
    """
    A ledger entry whose address is not a canonical destination address.

    Such entries are bookkeeping rows rather than real holders. Their value
    stays in the headline supply; they are reported separately.
    """
    address: str
    amount: int
    block_height: int  # lock-transfer height of the entry

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "amount": self.amount,
            "block_height": self.block_height,
        }

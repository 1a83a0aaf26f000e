"""
Supply Package.

Turns the ledger's unlock schedule into a per-block liquid
supply series and checks it before it is reported.
"""

from .accumulator import SupplyAccumulator, compute_horizon, prune_unchanged
from .models import BlockTotal
from .validator import ValidationResult, validate_pruned, validate_series

__all__ = [
    "BlockTotal",
    "SupplyAccumulator",
    "compute_horizon",
    "prune_unchanged",
    "ValidationResult",
    "validate_series",
    "validate_pruned",
]

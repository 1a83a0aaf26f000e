"""
Ledger Package.

Read side of the supply pipeline: the query catalogue, the
reader that runs it, typed result rows and address checks.
"""

from .addresses import (
    InvalidAddressError,
    decode_address,
    encode_address,
    is_valid_address,
)
from .models import PlaceholderAccount, VestingEvent
from .queries import LedgerQueries
from .reader import LedgerReader

__all__ = [
    "LedgerReader",
    "LedgerQueries",
    "VestingEvent",
    "PlaceholderAccount",
    "InvalidAddressError",
    "decode_address",
    "encode_address",
    "is_valid_address",
]

"""
Core Module Package.

This package contains the infrastructure shared by every
stage of the supply pipeline.

Components:
- config: SupplyConfig and environment loading
- clock: Testable time source for estimated block times
- exceptions: Exception hierarchy and exit codes
- constants: Denomination, cadence and report constants
"""

from .clock import ClockProtocol, MockClock, SystemClock
from .config import SupplyConfig, get_database_url
from .exceptions import (
    ConfigurationError,
    InvariantViolationError,
    LedgerConnectionError,
    LedgerDataError,
    LedgerError,
    LedgerQueryError,
    ReportWriteError,
    SupplyException,
)

__all__ = [
    "ClockProtocol",
    "MockClock",
    "SystemClock",
    "SupplyConfig",
    "get_database_url",
    "SupplyException",
    "ConfigurationError",
    "LedgerError",
    "LedgerConnectionError",
    "LedgerQueryError",
    "LedgerDataError",
    "InvariantViolationError",
    "ReportWriteError",
]

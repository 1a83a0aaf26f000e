"""
Database Package Initialization.

============================================================
LEDGER STORE BOUNDARY
============================================================

Read-only access to the relational ledger snapshot. The
pipeline holds exactly one connection for the whole run and
releases it whether the run succeeds or fails.

============================================================
"""

from .engine import (
    create_database_engine,
    ledger_connection,
    verify_database_connection,
)

__all__ = [
    "create_database_engine",
    "ledger_connection",
    "verify_database_connection",
]

"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines all custom exceptions for the supply pipeline.

- Provides clear exception hierarchy
- Maps each failure class to a process exit code
- Includes context for debugging

============================================================
EXCEPTION HIERARCHY
============================================================
SupplyException (base)
├── ConfigurationError
├── LedgerError
│   ├── LedgerConnectionError
│   ├── LedgerQueryError
│   └── LedgerDataError
├── InvariantViolationError
└── ReportWriteError

No error is recoverable: every run either completes or aborts.

============================================================
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# BASE EXCEPTION
# ============================================================

class SupplyException(Exception):
    """
    Base exception for all supply pipeline errors.

    All exceptions carry:
    - context: for debugging
    - cause: the underlying driver/OS error, if any
    - exit_code: process exit code used by the CLI
    - timestamp: when the error occurred
    """

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)

        self.message = message
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        parts = [self.message]
        if self.context:
            details = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"[{details}]")
        if self.cause:
            parts.append(f"(caused by: {self.cause})")
        return " ".join(parts)


# ============================================================
# CONFIGURATION
# ============================================================

class ConfigurationError(SupplyException):
    """Invalid or inconsistent configuration."""

    exit_code = 1


# ============================================================
# LEDGER STORE
# ============================================================

class LedgerError(SupplyException):
    """Base class for failures at the ledger store boundary."""

    exit_code = 2


class LedgerConnectionError(LedgerError):
    """The ledger store is unreachable."""


class LedgerQueryError(LedgerError):
    """A named read query failed to execute."""

    def __init__(
        self,
        query_name: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        context = dict(context or {})
        context["query"] = query_name
        super().__init__(message, context=context, cause=cause)
        self.query_name = query_name


class LedgerDataError(LedgerError):
    """A query returned a missing or unconvertible value."""


# ============================================================
# INVARIANTS
# ============================================================

class InvariantViolationError(SupplyException):
    """The produced series broke an invariant; no output is valid."""

    exit_code = 3

    def __init__(
        self,
        error_code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context=context)
        self.error_code = error_code


# ============================================================
# REPORTS
# ============================================================

class ReportWriteError(SupplyException):
    """An artifact could not be written atomically."""

    exit_code = 4

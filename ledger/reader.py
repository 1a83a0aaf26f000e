"""
Ledger Reader.

============================================================
PURPOSE
============================================================
Runs the named aggregate queries against the ledger store and
returns typed rows:

- latest_block_height()             -> int
- vesting_releases()                -> [VestingEvent], ascending
- lock_transfer_heights()           -> [int], ascending, distinct
- net_unlocked_balance_as_of(h)     -> int
- total_vested_as_of(h, floor)      -> int, releases in (floor, h]
- placeholder_accounts(h, versions) -> [PlaceholderAccount]
- placeholder_balances(h, versions) -> {address: balance}

============================================================
ERROR HANDLING
============================================================
- Driver errors are wrapped in LedgerConnectionError or
  LedgerQueryError and re-raised. No retries.
- Missing rows or NULL / non-integral aggregates raise
  LedgerDataError.

No caching happens here; the accumulator decides when to ask.

============================================================
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.engine import Connection, Result
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from core.constants import DEFAULT_TOKEN_TYPE
from core.exceptions import LedgerConnectionError, LedgerDataError, LedgerQueryError

from .addresses import is_valid_address
from .models import PlaceholderAccount, VestingEvent
from .queries import LedgerQueries


logger = logging.getLogger(__name__)


def to_int(value: Any, field_name: str, query_name: str) -> int:
    """
    Convert a driver value to an exact integer.

    PostgreSQL returns NUMERIC as Decimal, SQLite as int or str.
    Floats are refused since they may already have lost precision.
    """
    if value is None:
        raise LedgerDataError(
            f"{field_name} is NULL",
            context={"query": query_name},
        )

    if isinstance(value, bool) or isinstance(value, float):
        raise LedgerDataError(
            f"{field_name} has inexact type {type(value).__name__}",
            context={"query": query_name, "value": value},
        )

    if isinstance(value, int):
        return value

    try:
        if isinstance(value, Decimal):
            if value != value.to_integral_value():
                raise ValueError("fractional value")
            return int(value)
        return int(str(value).strip())
    except (ValueError, ArithmeticError) as e:
        raise LedgerDataError(
            f"{field_name} is not an integer: {value!r}",
            context={"query": query_name},
            cause=e,
        ) from e


class LedgerReader:
    """
    Read-only access to the ledger snapshot over one connection.
    """

    def __init__(
        self,
        connection: Connection,
        queries: Optional[LedgerQueries] = None,
        token_type: str = DEFAULT_TOKEN_TYPE,
    ) -> None:
        """
        Args:
            connection: Open SQLAlchemy connection (owned by the caller)
            queries: SQL text to run (default: LedgerQueries())
            token_type: Ledger `type` column filter
        """
        self._conn = connection
        self._queries = queries or LedgerQueries()
        self._token_type = token_type

    @property
    def token_type(self) -> str:
        return self._token_type

    # =========================================================
    # QUERY EXECUTION
    # =========================================================

    def _execute(self, query_name: str, params: Optional[Dict[str, Any]] = None) -> Result:
        sql = getattr(self._queries, query_name)
        params = params or {}
        try:
            return self._conn.execute(text(sql), params)
        except SQLAlchemyError as e:
            if isinstance(e, OperationalError) and e.connection_invalidated:
                logger.error(f"Ledger store unavailable during {query_name}: {e}")
                raise LedgerConnectionError(
                    "Ledger store unavailable",
                    context={"query": query_name, **params},
                    cause=e,
                ) from e
            logger.error(f"Query {query_name} failed: {e}")
            raise LedgerQueryError(
                query_name,
                "Query failed",
                context=params,
                cause=e,
            ) from e

    def _scalar(self, query_name: str, params: Optional[Dict[str, Any]] = None) -> Any:
        row = self._execute(query_name, params).first()
        if row is None:
            raise LedgerDataError(
                "Aggregate query returned no row",
                context={"query": query_name},
            )
        return row[0]

    # =========================================================
    # OPERATIONS
    # =========================================================

    def latest_block_height(self) -> int:
        """Maximum block height recorded in the ledger."""
        value = self._scalar("latest_block_height")
        height = to_int(value, "block_id", "latest_block_height")
        logger.info(f"Latest ledger block height: {height}")
        return height

    def vesting_releases(self) -> List[VestingEvent]:
        """Per-block vesting totals, ascending by block height."""
        rows = self._execute("vested_by_block", {"token_type": self._token_type}).all()
        events = [
            VestingEvent(
                block_height=to_int(row.block_id, "block_id", "vested_by_block"),
                micro_units=to_int(row.micro_units, "micro_units", "vested_by_block"),
            )
            for row in rows
        ]
        logger.info(f"Loaded {len(events)} vesting release heights")
        return events

    def lock_transfer_heights(self) -> List[int]:
        """Distinct heights at which some transfer lock matures, ascending."""
        rows = self._execute("lock_transfer_heights", {"token_type": self._token_type}).all()
        heights = sorted({
            to_int(row.block_id, "block_id", "lock_transfer_heights") for row in rows
        })
        logger.info(f"Loaded {len(heights)} lock-transfer unlock heights")
        return heights

    def net_unlocked_balance_as_of(self, block_height: int) -> int:
        """Net credits minus debits of all matured accounts at `block_height`."""
        value = self._scalar(
            "unlocked_balance_at_block",
            {"token_type": self._token_type, "block_height": block_height},
        )
        balance = to_int(value, "balance", "unlocked_balance_at_block")
        logger.debug(f"Unlocked balance at block {block_height}: {balance}")
        return balance

    def total_vested_as_of(self, block_height: int, floor_height: int) -> int:
        """Vesting released in (floor_height, block_height]."""
        value = self._scalar(
            "total_vested_between",
            {
                "token_type": self._token_type,
                "block_height": block_height,
                "floor_height": floor_height,
            },
        )
        vested = to_int(value, "micro_units", "total_vested_between")
        logger.debug(f"Vested in ({floor_height}, {block_height}]: {vested}")
        return vested

    def placeholder_accounts(
        self,
        block_height: int,
        allowed_versions: Optional[Sequence[str]] = None,
    ) -> List[PlaceholderAccount]:
        """
        Ledger entries up to `block_height` whose address fails validation.

        Every entry is returned (not only the latest per address), in
        address order. Rows without an address are skipped.
        """
        rows = self._execute(
            "account_entries",
            {"token_type": self._token_type, "block_height": block_height},
        ).all()

        placeholders = [
            PlaceholderAccount(
                address=row.address,
                amount=to_int(row.amount, "amount", "account_entries"),
                block_height=to_int(row.block_height, "block_height", "account_entries"),
            )
            for row in rows
            if not is_valid_address(row.address, allowed_versions)
        ]
        logger.info(
            f"Found {len(placeholders)} placeholder entries among {len(rows)} ledger entries"
        )
        return placeholders

    def placeholder_balances(
        self,
        block_height: int,
        allowed_versions: Optional[Sequence[str]] = None,
    ) -> Dict[str, int]:
        """
        Balance each placeholder address contributes to the unlocked
        total at `block_height`, in address order.

        Uses the latest matured entry per address, the same rule as
        net_unlocked_balance_as_of.
        """
        rows = self._execute(
            "account_balances_at_block",
            {"token_type": self._token_type, "block_height": block_height},
        ).all()

        balances = {
            row.address: to_int(row.balance, "balance", "account_balances_at_block")
            for row in rows
            if not is_valid_address(row.address, allowed_versions)
        }
        logger.info(
            f"Placeholder addresses hold {sum(balances.values())} at block {block_height}"
        )
        return balances

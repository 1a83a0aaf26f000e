"""
Ledger Queries - Named, parameterized read statements.

============================================================
LEDGER SCHEMA
============================================================
accounts
    address, type, credit_value, debit_value,
    block_id, vtxindex, lock_transfer_block_id
account_vesting
    address, type, vesting_value, block_id

Values are stored as decimal strings and cast to NUMERIC.

============================================================
PORTABILITY
============================================================
"Latest entry per account" uses ROW_NUMBER() rather than
PostgreSQL's DISTINCT ON so the same text also runs against
SQLite fixtures. Sums are COALESCEd to 0 over empty ranges.

============================================================
"""

from dataclasses import dataclass


LATEST_BLOCK_HEIGHT_QUERY = """
  SELECT MAX(block_id) AS block_id FROM accounts
"""

VESTED_BY_BLOCK_QUERY = """
  SELECT block_id, SUM(CAST(vesting_value AS NUMERIC)) AS micro_units
  FROM account_vesting
  WHERE type = :token_type
  GROUP BY block_id
  ORDER BY block_id ASC
"""

LOCK_TRANSFER_BLOCK_IDS_QUERY = """
  SELECT DISTINCT lock_transfer_block_id AS block_id
  FROM accounts
  WHERE type = :token_type AND lock_transfer_block_id IS NOT NULL
  ORDER BY lock_transfer_block_id ASC
"""

# Last-write-wins per address, ordered by (block_id, vtxindex).
UNLOCKED_BALANCE_AT_BLOCK_QUERY = """
  SELECT COALESCE(SUM(CAST(balances.credit_value AS NUMERIC)
                      - CAST(balances.debit_value AS NUMERIC)), 0) AS balance
  FROM (
    SELECT credit_value, debit_value,
           ROW_NUMBER() OVER (
             PARTITION BY address
             ORDER BY block_id DESC, vtxindex DESC
           ) AS version_rank
    FROM accounts
    WHERE type = :token_type
      AND lock_transfer_block_id <= :block_height
      AND block_id <= :block_height
  ) balances
  WHERE balances.version_rank = 1
"""

TOTAL_VESTED_BETWEEN_QUERY = """
  SELECT COALESCE(SUM(CAST(vesting_value AS NUMERIC)), 0) AS micro_units
  FROM account_vesting
  WHERE type = :token_type AND block_id <= :block_height AND block_id > :floor_height
"""

ACCOUNT_ENTRIES_QUERY = """
  SELECT address,
         CAST(credit_value AS NUMERIC) - CAST(debit_value AS NUMERIC) AS amount,
         lock_transfer_block_id AS block_height
  FROM accounts
  WHERE type = :token_type AND address IS NOT NULL AND block_id <= :block_height
  ORDER BY address ASC, block_id ASC, vtxindex ASC
"""

# Same versioning and maturity rule as UNLOCKED_BALANCE_AT_BLOCK_QUERY, per address.
ACCOUNT_BALANCES_AT_BLOCK_QUERY = """
  SELECT balances.address,
         CAST(balances.credit_value AS NUMERIC)
           - CAST(balances.debit_value AS NUMERIC) AS balance
  FROM (
    SELECT address, credit_value, debit_value,
           ROW_NUMBER() OVER (
             PARTITION BY address
             ORDER BY block_id DESC, vtxindex DESC
           ) AS version_rank
    FROM accounts
    WHERE type = :token_type
      AND address IS NOT NULL
      AND lock_transfer_block_id <= :block_height
      AND block_id <= :block_height
  ) balances
  WHERE balances.version_rank = 1
  ORDER BY balances.address ASC
"""


@dataclass(frozen=True)
class LedgerQueries:
    """The SQL text used by LedgerReader, replaceable per deployment."""

    latest_block_height: str = LATEST_BLOCK_HEIGHT_QUERY
    vested_by_block: str = VESTED_BY_BLOCK_QUERY
    lock_transfer_heights: str = LOCK_TRANSFER_BLOCK_IDS_QUERY
    unlocked_balance_at_block: str = UNLOCKED_BALANCE_AT_BLOCK_QUERY
    total_vested_between: str = TOTAL_VESTED_BETWEEN_QUERY
    account_entries: str = ACCOUNT_ENTRIES_QUERY
    account_balances_at_block: str = ACCOUNT_BALANCES_AT_BLOCK_QUERY

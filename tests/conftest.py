"""
Shared test fixtures.

Store-backed tests run against a throwaway SQLite ledger with the
same tables and column names as the production snapshot.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, Optional

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table, create_engine
from sqlalchemy.engine import Engine

from core.clock import MockClock


# ============================================================
# CONSTANTS
# ============================================================

ANCHOR = datetime(2021, 1, 14, 12, 0, 0, tzinfo=timezone.utc)

# Valid mainnet addresses (version P)
BOOT_ADDRESS = "SP000000000000000000002Q6VF78"
HOLDER_ADDRESS = "SP8H248H248H248H248H248H248H248H24ARTQ82"

# Fails the checksum
PLACEHOLDER_ADDRESS = "SP000000000000000000002Q6VF79"


# ============================================================
# LEDGER SCHEMA
# ============================================================

metadata = MetaData()

accounts = Table(
    "accounts",
    metadata,
    Column("address", String),
    Column("type", String, nullable=False),
    Column("credit_value", String, nullable=False),
    Column("debit_value", String, nullable=False),
    Column("block_id", Integer, nullable=False),
    Column("vtxindex", Integer, nullable=False),
    Column("lock_transfer_block_id", Integer, nullable=False),
)

account_vesting = Table(
    "account_vesting",
    metadata,
    Column("address", String, nullable=False),
    Column("type", String, nullable=False),
    Column("vesting_value", String, nullable=False),
    Column("block_id", Integer, nullable=False),
)


def account_row(
    address: Optional[str],
    credit: int,
    block_id: int,
    lock_transfer_block_id: int,
    debit: int = 0,
    vtxindex: int = 0,
    type: str = "STACKS",
) -> dict:
    return {
        "address": address,
        "type": type,
        "credit_value": str(credit),
        "debit_value": str(debit),
        "block_id": block_id,
        "vtxindex": vtxindex,
        "lock_transfer_block_id": lock_transfer_block_id,
    }


def vesting_row(address: str, value: int, block_id: int, type: str = "STACKS") -> dict:
    return {
        "address": address,
        "type": type,
        "vesting_value": str(value),
        "block_id": block_id,
    }


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def make_ledger(tmp_path: Path) -> Callable[..., Engine]:
    """Factory building a SQLite ledger from account and vesting rows."""
    engines = []

    def _make(
        account_rows: Iterable[dict] = (),
        vesting_rows: Iterable[dict] = (),
        name: str = "ledger.db",
    ) -> Engine:
        engine = create_engine(f"sqlite:///{tmp_path / name}")
        metadata.create_all(engine)
        account_rows = list(account_rows)
        vesting_rows = list(vesting_rows)
        with engine.begin() as conn:
            if account_rows:
                conn.execute(accounts.insert(), account_rows)
            if vesting_rows:
                conn.execute(account_vesting.insert(), vesting_rows)
        engines.append(engine)
        return engine

    yield _make

    for engine in engines:
        engine.dispose()


@pytest.fixture
def scenario_engine(make_ledger) -> Engine:
    """
    One account unlocking 1,000,000 at block 100 and a vesting release
    of 500,000 at block 105. Latest block is 100, horizon is 110.
    """
    return make_ledger(
        account_rows=[account_row(HOLDER_ADDRESS, 1_000_000, block_id=100, lock_transfer_block_id=100)],
        vesting_rows=[vesting_row(HOLDER_ADDRESS, 500_000, block_id=105)],
    )


@pytest.fixture
def fixed_clock() -> MockClock:
    return MockClock(ANCHOR)


@pytest.fixture
def reader_factory():
    """Open a connection on an engine and wrap it in a LedgerReader."""
    from ledger.reader import LedgerReader

    connections = []

    def _make(engine: Engine, token_type: str = "STACKS", queries: Optional[object] = None):
        conn = engine.connect()
        connections.append(conn)
        return LedgerReader(conn, queries=queries, token_type=token_type)

    yield _make

    for conn in connections:
        conn.close()

"""
Core Module - Constants.

============================================================
RESPONSIBILITY
============================================================
Defines the fixed values shared by the supply pipeline.

- Token denomination and ledger column filters
- Block cadence used for estimated timestamps
- Report headers and file defaults

============================================================
DESIGN PRINCIPLES
============================================================
- All constants are immutable
- Tunable values are defaults only; SupplyConfig overrides them
- No business logic here

============================================================
"""

# ============================================================
# SYSTEM IDENTIFICATION
# ============================================================

SYSTEM_NAME = "liquid-supply"
SYSTEM_VERSION = "1.0.0"

# ============================================================
# TOKEN DENOMINATION
# ============================================================

MICRO_UNIT_DECIMALS = 6
"""Number of fractional digits between a whole token and a micro unit."""

DEFAULT_TOKEN_TYPE = "STACKS"
"""Value of the ledger `type` column selecting the token's rows."""

# ============================================================
# BLOCK SCHEDULE
# ============================================================

DEFAULT_BLOCK_INTERVAL_SECONDS = 10 * 60
"""Average block interval used to estimate wall-clock time."""

DEFAULT_HORIZON_BUFFER_BLOCKS = 5
"""Blocks walked past the last known unlock event so the series visibly flattens."""

# ============================================================
# ADDRESS VERSIONS
# ============================================================

MAINNET_ADDRESS_VERSIONS = ("P", "M")
"""Single-sig and multi-sig mainnet version characters."""

# ============================================================
# REPORTS
# ============================================================

DEFAULT_OUTPUT_PATH = "supply.csv"

CSV_LINE_TERMINATOR = "\r\n"

SUPPLY_CSV_HEADER = ("block_height", "unlocked_micro_stx", "unlocked_stx", "estimated_time")
PLACEHOLDER_CSV_HEADER = ("address", "micro_stx", "stx", "block_height")
PLACEHOLDER_SUMMARY_CSV_HEADER = ("address", "micro_stx", "stx")

"""
Orchestrator - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line interface for the liquid supply pipeline.

- Provides argparse-based CLI
- Loads configuration from environment, then applies flags
- Maps every failure class to an exit code

============================================================
USAGE
============================================================
python -m orchestrator.cli
python -m orchestrator.cli --output out/supply.csv --no-prune
python -m orchestrator.cli --placeholder-report placeholders.csv \
    --placeholder-summary placeholders_by_address.csv

============================================================
EXIT CODES
============================================================
- 0: Series computed, validated and written
- 1: Configuration error
- 2: Ledger store error
- 3: Invariant violation
- 4: Report write failure
- 130: Interrupted

============================================================
"""

import argparse
import dataclasses
import json
import logging
import sys
from typing import List, Optional

from core.config import LOG_FORMATS, LOG_LEVELS, SupplyConfig
from core.constants import SYSTEM_NAME, SYSTEM_VERSION
from core.exceptions import SupplyException

from .pipeline import run


# ============================================================
# LOGGING SETUP
# ============================================================

def setup_logging(level: str = "INFO", log_format: str = "text") -> logging.Logger:
    """
    Set up process-wide logging.

    Args:
        level: Log level
        log_format: Output format (json or text)

    Returns:
        Configured logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "message": "%(message)s",
            })
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    return logging.getLogger("orchestrator")


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog=SYSTEM_NAME,
        description="Reconstruct the unlocked token supply by block height from a ledger snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration is read from the environment (and .env) first;
flags override it. See core/config.py for variable names.

Examples:
  %(prog)s                                   # latest block to horizon, pruned
  %(prog)s --no-prune --output full.csv      # every block
  %(prog)s --expected-final-supply 1352464598
        """
    )

    # --------------------------------------------------------
    # Store
    # --------------------------------------------------------
    store_group = parser.add_argument_group("Ledger Store")

    store_group.add_argument(
        "--database-url",
        type=str,
        metavar="URL",
        help="SQLAlchemy URL of the ledger store (default: $LEDGER_DATABASE_URL)",
    )

    # --------------------------------------------------------
    # Block range
    # --------------------------------------------------------
    range_group = parser.add_argument_group("Block Range")

    range_group.add_argument(
        "--start-height",
        type=int,
        metavar="HEIGHT",
        help="First block (default: latest block in the ledger)",
    )

    range_group.add_argument(
        "--end-height",
        type=int,
        metavar="HEIGHT",
        help="Last block (default: last unlock event + horizon buffer)",
    )

    range_group.add_argument(
        "--horizon-buffer",
        type=int,
        metavar="BLOCKS",
        help="Blocks past the last unlock event (default: 5)",
    )

    range_group.add_argument(
        "--block-interval",
        type=int,
        metavar="SECONDS",
        help="Average block interval for estimated times (default: 600)",
    )

    range_group.add_argument(
        "--anchor-time",
        type=str,
        metavar="ISO8601",
        help="Estimated time of the first block (default: now)",
    )

    # --------------------------------------------------------
    # Output
    # --------------------------------------------------------
    output_group = parser.add_argument_group("Output")

    output_group.add_argument(
        "--output", "-o",
        type=str,
        metavar="PATH",
        help="Supply CSV path (default: supply.csv)",
    )

    output_group.add_argument(
        "--no-prune",
        action="store_true",
        help="Write every block, not only blocks where supply changed",
    )

    output_group.add_argument(
        "--placeholder-report",
        type=str,
        metavar="PATH",
        help="Write placeholder-account entries to PATH",
    )

    output_group.add_argument(
        "--placeholder-summary",
        type=str,
        metavar="PATH",
        help="Write placeholder balances aggregated by address to PATH",
    )

    output_group.add_argument(
        "--expected-final-supply",
        type=int,
        metavar="TOKENS",
        help="Fail unless the final supply equals TOKENS whole tokens",
    )

    # --------------------------------------------------------
    # Logging Options
    # --------------------------------------------------------
    logging_group = parser.add_argument_group("Logging Options")

    logging_group.add_argument(
        "--log-level",
        type=str,
        choices=list(LOG_LEVELS),
        help="Logging level (default: INFO)",
    )

    logging_group.add_argument(
        "--log-format",
        type=str,
        choices=list(LOG_FORMATS),
        help="Logging format (default: text)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {SYSTEM_VERSION}",
    )

    return parser


# ============================================================
# CLI CONFIGURATION BUILDER
# ============================================================

def build_config(args: argparse.Namespace, base: Optional[SupplyConfig] = None) -> SupplyConfig:
    """
    Apply CLI arguments on top of the environment configuration.

    Args:
        args: Parsed arguments
        base: Starting configuration (default: SupplyConfig.from_env())

    Returns:
        SupplyConfig instance
    """
    config = base or SupplyConfig.from_env()

    overrides = {
        "database_url": args.database_url,
        "start_height": args.start_height,
        "end_height": args.end_height,
        "horizon_buffer_blocks": args.horizon_buffer,
        "block_interval_seconds": args.block_interval,
        "anchor_time": args.anchor_time,
        "output_path": args.output,
        "placeholder_report_path": args.placeholder_report,
        "placeholder_summary_path": args.placeholder_summary,
        "expected_final_supply": args.expected_final_supply,
        "log_level": args.log_level,
        "log_format": args.log_format,
    }
    changes = {key: value for key, value in overrides.items() if value is not None}
    if args.no_prune:
        changes["prune"] = False

    return dataclasses.replace(config, **changes)


# ============================================================
# MAIN ENTRY POINT
# ============================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"Error: invalid environment configuration: {e}", file=sys.stderr)
        return 1

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    logger = setup_logging(config.log_level, config.log_format)

    try:
        result = run(config)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except SupplyException as e:
        logger.critical(f"Run aborted: {e}", exc_info=config.log_level == "DEBUG")
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code

    for path in result.written_paths:
        logger.info(f"Wrote {path}")
    return 0


# ============================================================
# MODULE EXECUTION
# ============================================================

if __name__ == "__main__":
    sys.exit(main())

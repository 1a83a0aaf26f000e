"""
Reporting - CSV Artifacts.

============================================================
RESPONSIBILITY
============================================================
Writes the supply series and the placeholder-account reports.

- Fixed header row, one row per entry, CRLF line endings
- Every amount as an integer and as a decimal token string
- Files are replaced whole; never merged or appended

============================================================
ATOMIC WRITE PATH
============================================================
stage:   tmp file in the destination directory -> fsync
publish: os.replace, once every staged file is complete

A ReportBatch stages all of a run's artifacts before publishing
any of them. A failed write leaves previous artifacts untouched
and removes every temporary file.

============================================================
"""

import csv
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from core.constants import (
    CSV_LINE_TERMINATOR,
    PLACEHOLDER_CSV_HEADER,
    PLACEHOLDER_SUMMARY_CSV_HEADER,
    SUPPLY_CSV_HEADER,
)
from core.exceptions import ReportWriteError
from ledger.models import PlaceholderAccount
from supply.models import BlockTotal

from .formatters import format_timestamp, render_decimal


logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def _write_error(final_path: Path, e: OSError) -> ReportWriteError:
    logger.error(f"Failed to write {final_path}: {e}")
    return ReportWriteError(
        "Report write failed",
        context={"path": str(final_path)},
        cause=e,
    )


def _remove_quietly(tmp_name: str) -> None:
    try:
        os.unlink(tmp_name)
    except FileNotFoundError:
        pass


# ============================================================
# REPORT BATCH
# ============================================================

class ReportBatch:
    """
    Stages delimited files and publishes them together.

    Usage:
        with ReportBatch() as batch:
            batch.stage("supply.csv", header, rows)
            batch.stage("placeholders.csv", header, rows)
            paths = batch.commit()

    Leaving the block without commit() (or with an exception)
    discards every staged file.
    """

    def __init__(self) -> None:
        self._staged: List[Tuple[str, Path, int]] = []

    def __enter__(self) -> "ReportBatch":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.discard()
        return False

    def stage(
        self,
        path: PathLike,
        header: Sequence[str],
        rows: Iterable[Sequence[object]],
    ) -> Path:
        """
        Write rows to a synced temporary file next to `path`.

        Returns:
            The final path the file is published to on commit()

        Raises:
            ReportWriteError if the file cannot be written
        """
        final_path = Path(path)
        directory = final_path.parent
        tmp_name = None
        complete = False

        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{final_path.name}.", suffix=".tmp", dir=str(directory)
            )
            with os.fdopen(fd, "w", newline="", encoding="utf-8") as fh:
                writer = csv.writer(fh, lineterminator=CSV_LINE_TERMINATOR)
                writer.writerow(header)
                count = 0
                for row in rows:
                    writer.writerow(row)
                    count += 1
                fh.flush()
                os.fsync(fh.fileno())
            os.chmod(tmp_name, 0o644)
            complete = True
        except OSError as e:
            raise _write_error(final_path, e) from e
        finally:
            if tmp_name and not complete:
                _remove_quietly(tmp_name)

        self._staged.append((tmp_name, final_path, count))
        logger.debug(f"Staged {count} rows for {final_path}")
        return final_path

    def commit(self) -> List[Path]:
        """
        Move every staged file into place.

        Raises:
            ReportWriteError if a rename fails; files not yet
            renamed are discarded
        """
        published = []
        while self._staged:
            tmp_name, final_path, count = self._staged[0]
            try:
                os.replace(tmp_name, final_path)
            except OSError as e:
                if published:
                    logger.critical(f"Published {published} before failing on {final_path}")
                raise _write_error(final_path, e) from e
            self._staged.pop(0)
            published.append(final_path)
            logger.info(f"Wrote {count} rows to {final_path}")
        return published

    def discard(self) -> None:
        """Remove every staged file that was not published."""
        for tmp_name, final_path, _ in self._staged:
            _remove_quietly(tmp_name)
            logger.debug(f"Discarded staged file for {final_path}")
        self._staged = []


def write_rows_atomic(
    path: PathLike,
    header: Sequence[str],
    rows: Iterable[Sequence[object]],
) -> Path:
    """Write a single delimited file atomically."""
    with ReportBatch() as batch:
        batch.stage(path, header, rows)
        return batch.commit()[0]


def _write(
    path: PathLike,
    header: Sequence[str],
    rows: Iterable[Sequence[object]],
    batch: Optional[ReportBatch],
) -> Path:
    if batch is None:
        return write_rows_atomic(path, header, rows)
    return batch.stage(path, header, rows)


# ============================================================
# ARTIFACTS
# ============================================================
#
# With `batch` the file is only staged and appears on batch.commit().

def supply_rows(series: Iterable[BlockTotal]) -> List[List[object]]:
    return [
        [
            entry.block_height,
            entry.total,
            render_decimal(entry.total),
            format_timestamp(entry.estimated_time),
        ]
        for entry in series
    ]


def write_supply_csv(
    path: PathLike,
    series: Sequence[BlockTotal],
    batch: Optional[ReportBatch] = None,
) -> Path:
    """Write the (possibly pruned) supply series."""
    return _write(path, SUPPLY_CSV_HEADER, supply_rows(series), batch)


def write_placeholder_csv(
    path: PathLike,
    accounts: Sequence[PlaceholderAccount],
    batch: Optional[ReportBatch] = None,
) -> Path:
    """One row per placeholder ledger entry."""
    rows = (
        [account.address, account.amount, render_decimal(account.amount), account.block_height]
        for account in accounts
    )
    return _write(path, PLACEHOLDER_CSV_HEADER, rows, batch)


def write_placeholder_summary_csv(
    path: PathLike,
    totals: Mapping[str, int],
    batch: Optional[ReportBatch] = None,
) -> Path:
    """One row per placeholder address, sorted by address."""
    rows = (
        [address, totals[address], render_decimal(totals[address])]
        for address in sorted(totals)
    )
    return _write(path, PLACEHOLDER_SUMMARY_CSV_HEADER, rows, batch)

"""
Exporter for bank-statement-ingest.

Writes converted ``Transaction`` records to the output directory in the
configured format (CSV or Parquet).

Output file naming convention:
  {table_name}.{format}  -- e.g., "checking_2024_01.parquet"

Column layout follows ``Transaction`` field order: date, amount, payee,
transaction_type, fitid, status, memo. Amounts stay ``decimal.Decimal``
in the DataFrame; pyarrow stores them as decimal128 in Parquet, so no
float rounding is introduced on the way to disk.

Why Parquet is the default:
- Preserves column dtypes (dates and exact decimals survive a round trip).
- Fast reads for analytical workloads.

CSV is supported for interoperability with spreadsheet tools.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import fields
from pathlib import Path
from typing import Literal

import pandas as pd

from bank_statement_ingest.exceptions import ExportError
from bank_statement_ingest.transaction import Transaction

logger = logging.getLogger(__name__)

_SUPPORTED_FORMATS = {"csv", "parquet"}

TRANSACTION_COLUMNS = [f.name for f in fields(Transaction)]


def transactions_to_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Build a DataFrame with one row per transaction.

    The column set is fixed, so an empty input still yields the full
    header.
    """
    rows = [t.to_dict() for t in transactions]
    return pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)


def _write_dataframe(
    df: pd.DataFrame,
    path: Path,
    output_format: str,
) -> None:
    """Write a single DataFrame to disk in the specified format.

    Raises:
        ExportError: If writing fails for any reason.
    """
    try:
        if output_format == "csv":
            df.to_csv(path, index=False, encoding="utf-8-sig")
        else:  # parquet
            df.to_parquet(path, index=False, engine="pyarrow")
    except Exception as exc:
        raise ExportError(
            f"Failed to write {path.name} as {output_format}: {exc}"
        ) from exc


def export_transactions(
    transactions: Iterable[Transaction],
    output_dir: str | Path,
    output_format: Literal["csv", "parquet"] = "parquet",
    table_name: str = "transactions",
) -> str:
    """Write transactions to ``{output_dir}/{table_name}.{output_format}``.

    The output directory is created recursively if it does not exist.
    CSV files are written with ``utf-8-sig`` encoding (BOM) so that
    non-ASCII payee names display correctly when opened in Excel.

    Args:
        transactions: Records to write.
        output_dir: Directory to write into (created if needed).
        output_format: "csv" or "parquet".
        table_name: Output file stem.

    Returns:
        The path of the written file, as a string.

    Raises:
        ExportError: If *output_format* is unsupported, or if the write fails.
    """
    if output_format not in _SUPPORTED_FORMATS:
        raise ExportError(
            f"Unsupported output format: '{output_format}'. "
            f"Supported formats: {sorted(_SUPPORTED_FORMATS)}"
        )

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    df = transactions_to_frame(transactions)
    file_path = out / f"{table_name}.{output_format}"
    _write_dataframe(df, file_path, output_format)
    logger.info(
        "Exported table '%s' -> %s (%d rows)",
        table_name,
        file_path.name,
        len(df),
    )
    return str(file_path)

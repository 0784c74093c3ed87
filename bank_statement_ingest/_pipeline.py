"""
Internal file-level pipeline for bank-statement-ingest.

The parsing core only ever sees decoded text. This module is the thin
layer that reads a statement file from disk, hands its content (plus the
filename as a format hint) to ``ParserBuilder``, and optionally exports
the resulting ``Transaction`` records.

Kept out of ``__init__.py`` so the public entry points and
``scripts/run_ingest.py`` share one read -> parse -> export sequence.

This module is **not** part of the public API.
"""

from __future__ import annotations

import logging
from pathlib import Path

from bank_statement_ingest.builder import ParserBuilder
from bank_statement_ingest.config import IngestConfig
from bank_statement_ingest.format_registry import FileFormat
from bank_statement_ingest.transaction import Transaction

logger = logging.getLogger(__name__)


def read_statement(path: str | Path, encoding: str = "utf-8") -> str:
    """Read a statement file as text.

    Raises:
        FileNotFoundError: If *path* does not exist.
        UnicodeDecodeError: If the bytes are not valid in *encoding*.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Statement file not found: {path}")
    with open(path, "r", encoding=encoding, newline="") as f:
        return f.read()


def parse_statement_file(
    path: str | Path,
    encoding: str = "utf-8",
    file_format: FileFormat | str | None = None,
) -> list[Transaction]:
    """Read *path* and parse it into ``Transaction`` records."""
    path = Path(path)
    content = read_statement(path, encoding)
    logger.info("Read %s (%d chars, encoding=%s)", path.name, len(content), encoding)

    builder = ParserBuilder().content(content).filename(path.name)
    if file_format is not None:
        builder.format(file_format)
    return builder.parse_transactions()


def run_ingest(config: IngestConfig) -> tuple[list[Transaction], str]:
    """Parse the configured source file and export it.

    Returns:
        ``(transactions, output_path)``.
    """
    # Imported here so that importing the package does not load pandas
    from bank_statement_ingest.export import export_transactions

    transactions = parse_statement_file(
        config.source.input_path,
        encoding=config.source.encoding,
        file_format=config.source.file_format,
    )
    written = export_transactions(
        transactions,
        output_dir=config.output.output_dir,
        output_format=config.output.output_format,
        table_name=config.output.table_name,
    )
    logger.info("Pipeline complete: %d transactions -> %s", len(transactions), written)
    return transactions, written

"""
bank-statement-ingest: parse OFX/QFX bank and credit-card statements.

Public API surface:

- ``parse(content, filename=None, file_format=None)`` -- one-call parse of
  decoded statement text into ``Transaction`` records.

- ``ParserBuilder`` -- fluent, single-use builder for full control:
  explicit format, raw ``ParsedTransaction`` output, or a custom
  converter via ``parse_into()``.

- ``open_statement(path, ...)`` -- read a statement file from disk and
  parse it.

- ``ingest(config_path)`` -- load ``ingest.yaml``, parse the configured
  source file, and export the transactions to CSV or Parquet.

Both OFX dialects are supported: SGML (OFX 1.x, unclosed leaf tags) and
XML (OFX 2.x / Quicken QFX). They produce identical results for the same
logical statement.
"""

from __future__ import annotations

import logging
from pathlib import Path

from bank_statement_ingest._pipeline import parse_statement_file, run_ingest
from bank_statement_ingest.builder import ParserBuilder, parse
from bank_statement_ingest.config import (
    IngestConfig,
    generate_default_config,
    load_config,
    save_config,
)
from bank_statement_ingest.detect import Detection, detect_format
from bank_statement_ingest.exceptions import (
    AmountParseError,
    BankStatementError,
    ConfigError,
    ConversionError,
    DateParseError,
    DuplicateFieldError,
    ExportError,
    FieldError,
    FormatDetectionError,
    MarkupSyntaxError,
    MissingMandatoryFieldError,
    ParseError,
)
from bank_statement_ingest.format_registry import Dialect, FileFormat
from bank_statement_ingest.markup.node import RawNode
from bank_statement_ingest.parsers.qfx import QfxTransaction
from bank_statement_ingest.transaction import ParsedTransaction, Transaction, to_transaction

__all__ = [
    "parse",
    "ParserBuilder",
    "open_statement",
    "ingest",
    "IngestConfig",
    "load_config",
    "save_config",
    "generate_default_config",
    "Detection",
    "detect_format",
    "Dialect",
    "FileFormat",
    "RawNode",
    "QfxTransaction",
    "ParsedTransaction",
    "Transaction",
    "to_transaction",
    "BankStatementError",
    "ConfigError",
    "FormatDetectionError",
    "ParseError",
    "MarkupSyntaxError",
    "FieldError",
    "DateParseError",
    "AmountParseError",
    "MissingMandatoryFieldError",
    "DuplicateFieldError",
    "ConversionError",
    "ExportError",
]

logger = logging.getLogger(__name__)


def open_statement(
    path: str | Path,
    encoding: str = "utf-8",
    file_format: FileFormat | str | None = None,
) -> list[Transaction]:
    """Read a statement file and parse it into ``Transaction`` records.

    The filename is passed to the builder as a format hint.

    Args:
        path: Path to an OFX/QFX file.
        encoding: Text encoding of the file. OFX 1.x exports declaring
            ``CHARSET:1252`` need ``"cp1252"``.
        file_format: Skip detection and use this format.

    Raises:
        FileNotFoundError: If *path* does not exist.
        BankStatementError: If the content cannot be parsed.
    """
    logger.info("open_statement() -- path=%s", path)
    return parse_statement_file(path, encoding=encoding, file_format=file_format)


def ingest(config_path: str | Path = "ingest.yaml") -> str:
    """Load a run configuration, parse its source file, and export it.

    Orchestration:
      1. ``load_config()`` -> ``IngestConfig`` (Pydantic validation on load).
      2. Read the source file with the configured encoding.
      3. ``ParserBuilder`` -> ``list[Transaction]``.
      4. ``export_transactions()`` to the configured output.

    Returns:
        Path of the written output file.

    Raises:
        FileNotFoundError: If the config or source file does not exist.
        pydantic.ValidationError: If the config fails validation.
        BankStatementError: If parsing or export fails.
    """
    logger.info("ingest() -- config_path=%s", config_path)
    config = load_config(config_path)
    _transactions, written = run_ingest(config)
    return written

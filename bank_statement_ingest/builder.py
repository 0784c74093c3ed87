"""
Parser builder: the orchestration layer of bank-statement-ingest.

Usage::

    transactions = (
        ParserBuilder()
        .content(text)
        .filename("statement.qfx")     # optional hint
        .parse_transactions()
    )

Configuration is accumulated through independent setters and consumed by
exactly one terminal call:

- ``parse()`` -> list[ParsedTransaction]
- ``parse_into(convert)`` -> list[T], using a caller-supplied converter
- ``parse_transactions()`` -> list[Transaction] (``to_transaction``)

Format resolution order:
  1. an explicit ``format()`` wins;
  2. otherwise ``detect_format()`` on the content and filename hint;
  3. otherwise each registered parser's ``is_supported()`` in registration
     order, first match wins.

Error policy is fail-fast everywhere: a syntax or field error aborts the
parse, and the first converter failure aborts ``parse_into`` without
returning any of the records already converted. A statement import that
silently drops transactions would be worse than one that fails visibly.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TypeVar

from pydantic import ValidationError

from bank_statement_ingest.config import ParserConfig
from bank_statement_ingest.detect import detect_dialect, detect_format
from bank_statement_ingest.exceptions import (
    ConfigError,
    ConversionError,
    FormatDetectionError,
)
from bank_statement_ingest.format_registry import Dialect, FileFormat, registered_parsers
from bank_statement_ingest.parsers.base import BaseParser
from bank_statement_ingest.transaction import ParsedTransaction, Transaction, to_transaction

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ParserBuilder:
    """Fluent, single-use builder for one parse call.

    Args:
        parsers: Parser instances to resolve formats against, in priority
            order. Defaults to the built-in registry.
    """

    def __init__(self, parsers: Sequence[BaseParser] | None = None) -> None:
        self._config = ParserConfig()
        self._parsers: tuple[BaseParser, ...] = (
            tuple(parsers) if parsers is not None else registered_parsers()
        )
        self._consumed = False

    # -- Setters ----------------------------------------------------------

    def content(self, content: str) -> ParserBuilder:
        """Set the decoded statement text (required)."""
        self._set("content", content)
        return self

    def filename(self, filename: str) -> ParserBuilder:
        """Set the original filename, used as a format hint."""
        self._set("filename", filename)
        return self

    def format(self, file_format: FileFormat | str) -> ParserBuilder:
        """Force a format instead of detecting it.

        Raises:
            ConfigError: If *file_format* is not a known format.
        """
        self._set("file_format", file_format)
        return self

    def _set(self, name: str, value: object) -> None:
        try:
            setattr(self._config, name, value)
        except ValidationError as exc:
            raise ConfigError(f"Invalid {name}: {value!r}") from exc

    # -- Terminal operations ----------------------------------------------

    def parse(self) -> list[ParsedTransaction]:
        """Resolve the format, parse, and wrap each record.

        Raises:
            ConfigError: If no content is set or the builder was already used.
            FormatDetectionError: If the format cannot be resolved.
            ParseError: On malformed markup or fields.
        """
        content = self._consume()
        parser, dialect = self._resolve_parser(content)
        records = parser.parse(content, dialect)
        return [ParsedTransaction(parser.file_format, record) for record in records]

    def parse_into(self, convert: Callable[[ParsedTransaction], T]) -> list[T]:
        """Parse, then convert every record with *convert*.

        *convert* signals rejection by raising ``ConversionError`` (or
        ``ValueError``, which is wrapped). The first rejection aborts the
        call; no converted records are returned.

        Raises:
            ConversionError: If any record fails to convert.
        """
        parsed = self.parse()
        converted: list[T] = []
        for index, record in enumerate(parsed):
            try:
                converted.append(convert(record))
            except ConversionError as exc:
                raise ConversionError(exc.reason, index=index) from exc
            except ValueError as exc:
                raise ConversionError(str(exc), index=index) from exc
        logger.info("Converted %d records", len(converted))
        return converted

    def parse_transactions(self) -> list[Transaction]:
        """Parse into the default ``Transaction`` type."""
        return self.parse_into(to_transaction)

    # -- Internals --------------------------------------------------------

    def _consume(self) -> str:
        if self._consumed:
            raise ConfigError("ParserBuilder has already been used; create a new one")
        content = self._config.content
        if content is None:
            raise ConfigError("Content is required: call .content(...) before parsing")
        self._consumed = True
        return content

    def _parser_for(self, file_format: FileFormat) -> BaseParser:
        for parser in self._parsers:
            if parser.file_format == file_format:
                return parser
        raise ConfigError(f"No parser registered for format '{file_format.value}'")

    def _resolve_parser(self, content: str) -> tuple[BaseParser, Dialect]:
        """Pick the parser for *content* and decide its dialect once."""
        explicit = self._config.file_format
        filename = self._config.filename

        if explicit is not None:
            logger.info("Using explicit format '%s'", explicit.value)
            return self._parser_for(explicit), detect_dialect(content)

        try:
            detection = detect_format(
                content, filename, layouts=tuple(p.layout for p in self._parsers),
            )
        except FormatDetectionError:
            for parser in self._parsers:
                if parser.is_supported(filename, content):
                    logger.info(
                        "Format '%s' accepted by %s",
                        parser.file_format.value, type(parser).__name__,
                    )
                    return parser, detect_dialect(content)
            raise
        return self._parser_for(detection.format), detection.dialect


def parse(
    content: str,
    filename: str | None = None,
    file_format: FileFormat | str | None = None,
) -> list[Transaction]:
    """Parse statement content into ``Transaction`` records in one call."""
    builder = ParserBuilder().content(content)
    if filename is not None:
        builder.filename(filename)
    if file_format is not None:
        builder.format(file_format)
    return builder.parse_transactions()

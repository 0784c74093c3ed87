"""
Custom exception hierarchy for bank-statement-ingest.

Every error the library raises derives from ``BankStatementError`` so a
caller can catch the whole family at once, or a specific failure:

- ``ConfigError``: builder misuse (no content, invalid format, reuse).
- ``FormatDetectionError``: content matches no known format and no
  explicit format was given.
- ``ParseError``: anything that fails while turning content into records.
  - ``MarkupSyntaxError``: malformed SGML/XML markup.
  - ``FieldError``: a malformed or missing field in a specific record.
- ``ConversionError``: the caller's target type rejected a record.
- ``ExportError``: writing converted records to disk failed.

A parse never returns a partial result: the first error aborts the call.
"""

from __future__ import annotations


class BankStatementError(Exception):
    """Base exception for all bank-statement-ingest errors."""


class ConfigError(BankStatementError):
    """Raised when the parser builder is misused.

    For example, calling ``parse()`` without content, passing an unknown
    format name, or calling a terminal operation twice on one builder.
    """


class FormatDetectionError(BankStatementError):
    """Raised when the content does not match any known statement format.

    Typically includes a snippet of the content's first few lines to aid
    debugging.
    """


class ParseError(BankStatementError):
    """Base class for failures while parsing statement content."""


class MarkupSyntaxError(ParseError):
    """Raised when SGML or XML markup is malformed.

    Attributes:
        fragment: The offending piece of markup (tag, text or line).
        offset: UTF-8 byte offset of the fragment in the content, when known.
        line: 1-based line number, when known.
        column: 0-based column, when known.
    """

    def __init__(
        self,
        message: str,
        fragment: str = "",
        offset: int | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.fragment = fragment
        self.offset = offset
        self.line = line
        self.column = column

        details = []
        if fragment:
            details.append(f"fragment={fragment!r}")
        if offset is not None:
            details.append(f"byte offset {offset}")
        if line is not None:
            details.append(f"line {line}, column {column}")
        full_message = f"{message} ({', '.join(details)})" if details else message
        super().__init__(full_message)


class FieldError(ParseError):
    """A field-level failure, positioned by record index.

    Attributes:
        field: The source tag name (e.g. ``"TRNAMT"``).
        index: 0-based index of the record in document order.
    """

    def __init__(self, message: str, field: str, index: int) -> None:
        self.field = field
        self.index = index
        super().__init__(f"Record {index}: {message}")


class DateParseError(FieldError):
    """Raised when a date field is not in a recognized OFX date form."""


class AmountParseError(FieldError):
    """Raised when an amount field is not a plain decimal number."""


class MissingMandatoryFieldError(FieldError):
    """Raised when a record lacks a mandatory field (TRNAMT, DTPOSTED)."""


class DuplicateFieldError(FieldError):
    """Raised when a known field appears more than once in one record."""


class ConversionError(BankStatementError):
    """Raised when a parsed record cannot be converted to the target type.

    Attributes:
        reason: Human-readable reason given by the converter.
        index: 0-based index of the record that failed, when known.
    """

    def __init__(self, reason: str, index: int | None = None) -> None:
        self.reason = reason
        self.index = index
        if index is None:
            super().__init__(f"Conversion failed: {reason}")
        else:
            super().__init__(f"Conversion failed for record {index}: {reason}")


class ExportError(BankStatementError):
    """Raised when the exporter fails to write output files.

    For example, permission errors, disk full, or unsupported format.
    """

"""
Base parser protocol / ABC for bank-statement-ingest.

All format-specific parsers must implement this interface. The contract is:
1. is_supported() takes an optional filename hint and the content and
   answers whether this parser can read it. It never raises; the builder
   uses it as a fallback classifier when detection finds nothing.
2. parse() takes the decoded content (and the dialect, when the caller
   already knows it) and returns the format's raw records
   in document order, or raises a ParseError subclass. It never returns a
   partial list.

Why an ABC:
- Enforces a consistent interface across parsers.
- Makes it easy to add new format parsers without touching the builder.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from bank_statement_ingest.format_registry import Dialect, FileFormat, FormatLayout


class BaseParser(ABC):
    """Abstract base class for statement format parsers.

    Each parser is bound to the ``FormatLayout`` that describes its
    detection markers and tag vocabulary.
    """

    file_format: ClassVar[FileFormat]

    def __init__(self, layout: FormatLayout) -> None:
        self.layout = layout

    @abstractmethod
    def is_supported(self, filename: str | None, content: str) -> bool:
        """Return True if this parser can read *content*.

        Args:
            filename: Optional original filename (hint only).
            content: The decoded statement text.
        """

    @abstractmethod
    def parse(self, content: str, dialect: Dialect | None = None) -> list[Any]:
        """Parse statement content into raw per-format records.

        Args:
            content: The decoded statement text.
            dialect: Markup dialect already decided by the caller; the
                parser detects it itself when ``None``.

        Returns:
            Records in document order.

        Raises:
            ParseError: If the markup or any record is malformed.
        """

"""
Format detection for bank statement content.

Uses the format layouts from the registry (formats/*.yaml) instead of
per-format code. Layouts are tested in priority order:

1. Content: the layout's root tag (``<OFX`` for QFX), matched
   case-insensitively and only as a whole tag name, marks the format.
2. Filename hint: when the content has no root tag, a registered extension
   (``.qfx``, ``.ofx``) still selects the format. The extension is only a
   hint; content always wins over a conflicting extension.
3. Fallback: raise FormatDetectionError.

The dialect is decided separately from the content alone: a leading
``<?xml`` prolog means XML (OFX 2.x), anything else SGML (OFX 1.x).

Detection is pure: no file access, no state.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from bank_statement_ingest.exceptions import FormatDetectionError
from bank_statement_ingest.format_registry import (
    Dialect,
    FileFormat,
    FormatLayout,
    load_all_layouts,
)

logger = logging.getLogger(__name__)

_XML_PROLOG = re.compile(r"\A[\ufeff\s]*<\?xml", re.IGNORECASE)

# Number of content lines quoted in the detection error message
_PREVIEW_LINES = 5


@dataclass(frozen=True)
class Detection:
    """Result of format detection."""
    format: FileFormat
    dialect: Dialect


def detect_dialect(content: str) -> Dialect:
    """Return XML when the content opens with an ``<?xml`` prolog, else SGML."""
    return Dialect.XML if _XML_PROLOG.match(content) else Dialect.SGML


def has_root_tag(content: str, tag: str) -> bool:
    """True when *content* contains an opening ``<tag`` as a whole tag name.

    ``<OFX>`` and ``<OFX `` match; ``<OFXHEADER`` and ``<?OFX`` do not.
    """
    pattern = re.compile(rf"<{re.escape(tag)}(?![A-Za-z0-9._-])", re.IGNORECASE)
    return pattern.search(content) is not None


def _preview(content: str) -> str:
    lines = content.strip().splitlines()[:_PREVIEW_LINES]
    return "\n".join(line[:80] for line in lines)


def detect_format(
    content: str,
    filename: str | None = None,
    layouts: tuple[FormatLayout, ...] | None = None,
) -> Detection:
    """Detect the format and dialect of statement content.

    Args:
        content: The decoded statement text.
        filename: Optional original filename, used as a hint only.
        layouts: Pre-loaded layouts (optional; uses the registry if None).

    Returns:
        Detection with the matched format and the content's dialect.

    Raises:
        FormatDetectionError: If no layout matches.
    """
    if layouts is None:
        layouts = load_all_layouts()

    dialect = detect_dialect(content)

    for layout in layouts:
        if has_root_tag(content, layout.detection.root_tag):
            logger.info(
                "Detected format '%s' (%s) from content",
                layout.format_name.value, dialect.value,
            )
            return Detection(layout.format_name, dialect)

    for layout in layouts:
        if layout.has_extension(filename):
            logger.info(
                "Detected format '%s' (%s) from filename %s",
                layout.format_name.value, dialect.value, filename,
            )
            return Detection(layout.format_name, dialect)

    raise FormatDetectionError(
        f"Could not detect format for: {filename or '<content>'}\n"
        f"Tried {len(layouts)} formats, none matched.\n"
        f"First few lines:\n{_preview(content)}"
    )

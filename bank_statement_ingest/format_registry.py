"""
Format registry for bank-statement-ingest.

Loads format layout YAML files from bank_statement_ingest/formats/ and
provides structured access via Pydantic models. Each layout defines:
- format_name: unique identifier, one of the ``FileFormat`` values
- detection: root tag marker, filename extensions, extra content markers
- record_tag: the tag name of a single transaction record
- leaf_tags: tags that always carry a value, even an empty one
- fields: record attribute -> list of source tag names
- mandatory: attributes a record cannot be built without

The registry is assembled once per process and is read-only afterwards:
``load_all_layouts()`` and ``registered_parsers()`` are cached and return
tuples.

Why YAML instead of hardcoded:
- Tag vocabulary is easily editable when an institution adds a field.
- Separation of structure knowledge (YAML) from parsing logic (Python).
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING

import yaml
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from bank_statement_ingest.parsers.base import BaseParser

logger = logging.getLogger(__name__)

# Directory containing format YAML files (sibling package)
_FORMATS_DIR = Path(__file__).parent / "formats"


class FileFormat(str, Enum):
    """Statement formats the library can parse."""

    QFX = "qfx"


class Dialect(str, Enum):
    """Which markup syntax encodes an OFX/QFX document."""

    SGML = "sgml"
    XML = "xml"


class DetectionRules(BaseModel):
    """Detection rules for a format layout."""
    root_tag: str
    extensions: list[str] = Field(default_factory=list)
    content_markers: list[str] = Field(default_factory=list)


class FormatLayout(BaseModel):
    """A complete format definition loaded from YAML."""
    format_name: FileFormat
    description: str = ""
    priority: int = 99
    detection: DetectionRules
    record_tag: str
    leaf_tags: list[str] = Field(default_factory=list)
    fields: dict[str, list[str]]
    mandatory: list[str] = Field(default_factory=list)

    def tags_for(self, attribute: str) -> list[str]:
        """Return the source tag names mapped to a record attribute."""
        return self.fields.get(attribute, [])

    def has_extension(self, filename: str | None) -> bool:
        """True when *filename* ends with one of this format's extensions."""
        if not filename:
            return False
        lowered = filename.lower()
        return any(lowered.endswith(ext.lower()) for ext in self.detection.extensions)


def load_layout(path: Path) -> FormatLayout:
    """Load a single format layout YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    # Scalars in the field map are shorthand for a one-element alias list
    raw_fields = raw.get("fields", {})
    raw["fields"] = {
        attr: tags if isinstance(tags, list) else [tags]
        for attr, tags in raw_fields.items()
    }
    return FormatLayout.model_validate(raw)


@lru_cache(maxsize=None)
def load_all_layouts(formats_dir: Path | None = None) -> tuple[FormatLayout, ...]:
    """Load all format layout YAML files, sorted by detection priority.

    Args:
        formats_dir: Directory to scan for .yaml files. Defaults to
            the built-in formats/ directory.

    Returns:
        Tuple of FormatLayout objects, lowest priority number first.
    """
    formats_dir = formats_dir or _FORMATS_DIR
    layouts: list[FormatLayout] = []
    for yaml_path in sorted(formats_dir.glob("*.yaml")):
        layout = load_layout(yaml_path)
        layouts.append(layout)
        logger.debug("Loaded format layout: %s from %s", layout.format_name.value, yaml_path)
    layouts.sort(key=lambda l: l.priority)
    logger.info("Loaded %d format layouts", len(layouts))
    return tuple(layouts)


def get_layout(file_format: FileFormat) -> FormatLayout:
    """Return the layout registered for *file_format*.

    Raises:
        KeyError: If no layout file declares that format.
    """
    for layout in load_all_layouts():
        if layout.format_name == file_format:
            return layout
    raise KeyError(f"No format layout registered for '{file_format.value}'")


@lru_cache(maxsize=None)
def registered_parsers() -> tuple[BaseParser, ...]:
    """Build the fixed list of parser instances, in layout priority order.

    Built lazily to avoid circular imports (parsers import this module).
    """
    from bank_statement_ingest.parsers.qfx import QfxParser

    parser_map: dict[FileFormat, type[BaseParser]] = {
        FileFormat.QFX: QfxParser,
    }
    parsers: list[BaseParser] = []
    for layout in load_all_layouts():
        parser_cls = parser_map.get(layout.format_name)
        if parser_cls is None:
            logger.warning("Layout '%s' has no parser class", layout.format_name.value)
            continue
        parsers.append(parser_cls(layout))
    return tuple(parsers)

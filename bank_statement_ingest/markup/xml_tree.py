"""
XML front end for OFX 2.x / QFX documents.

OFX 2.x is well-formed XML, so it is read with the standard library
``xml.etree.ElementTree`` and the resulting elements are copied into the
same ``RawNode`` shape the SGML front end produces:

- tag names are upper-cased and stripped of any namespace;
- an element without children is a leaf whose value is its trimmed text;
- an element with children is an aggregate (value ``None``).

Processing instructions such as ``<?OFX OFXHEADER="200" ...?>`` are
dropped by the parser. Malformed markup raises ``MarkupSyntaxError`` with
the line, column and offending line of input.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

from bank_statement_ingest.exceptions import MarkupSyntaxError
from bank_statement_ingest.markup.node import RawNode

logger = logging.getLogger(__name__)


def _local_name(tag: str) -> str:
    """Strip a ``{namespace}`` prefix and upper-case the tag."""
    if tag.startswith("{"):
        tag = tag.split("}", 1)[1]
    return tag.upper()


def _to_node(element: ET.Element) -> RawNode:
    tag = _local_name(element.tag)
    children = list(element)
    if not children:
        return RawNode(tag, value=(element.text or "").strip())

    stray = (element.text or "").strip() or next(
        ((child.tail or "").strip() for child in children if (child.tail or "").strip()), ""
    )
    if stray:
        raise MarkupSyntaxError(f"Mixed content in <{tag}>", fragment=stray)
    return RawNode(tag, children=[_to_node(child) for child in children])


def parse_xml(content: str) -> RawNode:
    """Parse an OFX 2.x XML document into a ``RawNode`` tree.

    Raises:
        MarkupSyntaxError: If the document is not well-formed XML.
    """
    text = content.lstrip("\ufeff \t\r\n")
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        line, column = exc.position
        lines = text.splitlines()
        fragment = lines[line - 1].strip() if 0 < line <= len(lines) else ""
        raise MarkupSyntaxError(
            f"Malformed XML: {exc}", fragment=fragment, line=line, column=column,
        ) from exc

    node = _to_node(root)
    logger.debug("Parsed XML document with root <%s>", node.tag)
    return node

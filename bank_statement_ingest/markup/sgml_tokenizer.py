"""
SGML tag-soup front end for OFX 1.x documents.

OFX 1.x files look like this::

    OFXHEADER:100
    DATA:OFXSGML
    VERSION:102

    <OFX>
    <BANKMSGSRSV1>
    <STMTTRNRS>
    ...
    <STMTTRN>
    <TRNTYPE>DEBIT
    <DTPOSTED>20230115
    <TRNAMT>-42.50
    </STMTTRN>

Leaf elements are usually left unclosed and aggregates are sometimes left
unclosed too, so nesting has to be inferred. This module works in two
passes:

1. ``tokenize()`` skips the ``KEY:VALUE`` header block and splits the rest
   into open-tag, close-tag and text tokens.
2. ``build_tree()`` turns the token stream into a ``RawNode`` tree:

   - an open tag directly followed by text is a leaf holding that text;
   - an open tag directly followed by another tag is an aggregate;
   - tags listed in *leaf_tags* are leaves even when their text is empty;
   - an aggregate ends at its explicit closing tag (which also closes any
     aggregates still open inside it), when a tag of the same name opens
     again (a sibling), or at end of input;
   - an aggregate that ends without its own closing tag was really an
     empty leaf (``<EXTDNAME>`` with no value): it becomes one and what
     was read as its children moves up to its parent. Tags listed in
     *open_aggregates* (the record tag) are exempt, since records are
     often left unclosed;
   - an explicitly closed aggregate with nothing inside is an empty leaf;
   - a closing tag right after a leaf's text closes that leaf.

Anything else (an orphan closing tag, an illegal tag name, stray text) is a
``MarkupSyntaxError`` pointing at the offending fragment; no field is ever
dropped or duplicated silently.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal
from xml.sax.saxutils import unescape

from bank_statement_ingest.exceptions import MarkupSyntaxError
from bank_statement_ingest.markup.node import RawNode

logger = logging.getLogger(__name__)

_TAG_NAME = re.compile(r"[A-Za-z][A-Za-z0-9._-]*")
_CHAR_REF = re.compile(r"&#(x[0-9A-Fa-f]+|[0-9]+);")
_EXTRA_ENTITIES = {"&quot;": '"', "&apos;": "'"}

# How much of the content to quote in error messages
_FRAGMENT_LEN = 40


@dataclass
class Token:
    """A lexical unit of the tag soup.

    ``offset`` is the character index of the token in the content.
    """
    kind: Literal["open", "close", "text"]
    value: str
    offset: int


def _byte_offset(content: str, pos: int) -> int:
    return len(content[:pos].encode("utf-8"))


def _syntax_error(message: str, content: str, fragment: str, pos: int) -> MarkupSyntaxError:
    return MarkupSyntaxError(message, fragment=fragment, offset=_byte_offset(content, pos))


def _decode_text(text: str, content: str, pos: int) -> str:
    """Decode the predefined XML entities and numeric character references.

    *pos* is the index of *text* within *content*, for error offsets.

    Raises:
        MarkupSyntaxError: On a reference outside the Unicode range or to
            a surrogate.
    """
    def char(m: re.Match[str]) -> str:
        ref = m.group(1)
        code = int(ref[1:], 16) if ref[0] in "xX" else int(ref)
        if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
            raise _syntax_error("Invalid character reference", content, m.group(0), pos + m.start())
        return chr(code)

    return unescape(_CHAR_REF.sub(char, text), _EXTRA_ENTITIES)


def _split_header(content: str) -> tuple[dict[str, str], int]:
    """Parse the ``KEY:VALUE`` header block.

    Returns the header mapping and the index of the first ``<``. Header
    entries may sit on separate lines or share one line separated by
    whitespace.
    """
    header: dict[str, str] = {}
    pos = 1 if content.startswith("\ufeff") else 0
    n = len(content)

    while pos < n:
        end = content.find("\n", pos)
        if end == -1:
            end = n
        line = content[pos:end]
        lt = line.find("<")
        head_part = line if lt == -1 else line[:lt]

        for item in head_part.split():
            if ":" not in item:
                raise _syntax_error(
                    "Expected KEY:VALUE header entry before the first tag",
                    content, item, pos + line.find(item),
                )
            key, _, value = item.partition(":")
            header[key.upper()] = value

        if lt != -1:
            return header, pos + lt
        pos = end + 1

    raise _syntax_error("No tags found in SGML content", content, content.strip()[:_FRAGMENT_LEN], 0)


def parse_sgml_header(content: str) -> dict[str, str]:
    """Return the OFX 1.x header block as an upper-case keyed dict.

    Example: ``{"OFXHEADER": "100", "DATA": "OFXSGML", "VERSION": "102"}``.
    """
    header, _ = _split_header(content)
    return header


def tokenize(content: str, start: int = 0) -> list[Token]:
    """Split the tag soup from *start* onwards into tokens.

    Comments (``<!-- ... -->``) are skipped. Tag names are upper-cased.

    Raises:
        MarkupSyntaxError: On an unterminated tag or an illegal tag name.
    """
    tokens: list[Token] = []
    pos = start
    n = len(content)

    while pos < n:
        lt = content.find("<", pos)
        if lt == -1:
            lt = n
        if lt > pos:
            tokens.append(Token("text", content[pos:lt], pos))
        if lt == n:
            break

        if content.startswith("<!--", lt):
            end = content.find("-->", lt + 4)
            if end == -1:
                raise _syntax_error("Unterminated comment", content, content[lt:lt + _FRAGMENT_LEN], lt)
            pos = end + 3
            continue

        gt = content.find(">", lt + 1)
        next_lt = content.find("<", lt + 1)
        if gt == -1 or (next_lt != -1 and next_lt < gt):
            stop = next_lt if next_lt != -1 else min(n, lt + _FRAGMENT_LEN)
            raise _syntax_error("Unterminated tag", content, content[lt:stop], lt)

        body = content[lt + 1:gt]
        closing = body.startswith("/")
        name = body[1:] if closing else body
        if not _TAG_NAME.fullmatch(name):
            raise _syntax_error("Illegal tag name", content, content[lt:gt + 1], lt)

        tokens.append(Token("close" if closing else "open", name.upper(), lt))
        pos = gt + 1

    return tokens


def _close_implicitly(stack: list[RawNode], keep: frozenset[str]) -> None:
    """Pop the top aggregate, which ended without its own closing tag.

    Unless its tag is in *keep*, the element is taken to be an empty leaf
    that was misread as an aggregate: it gets an empty value and its
    children move up into the parent, after it.
    """
    node = stack.pop()
    if node.tag in keep or not stack:
        return
    parent = stack[-1]
    parent.children.extend(node.children)
    node.children = []
    node.value = ""


def _close_explicitly(node: RawNode) -> None:
    # <TAG></TAG> with nothing inside is an empty value, as in XML
    if not node.children:
        node.value = ""


def build_tree(
    tokens: list[Token],
    content: str,
    leaf_tags: Iterable[str] = (),
    open_aggregates: Iterable[str] = (),
) -> RawNode:
    """Infer the element tree from a token stream.

    Args:
        tokens: Output of ``tokenize()``.
        content: The original content, used for error offsets.
        leaf_tags: Upper-case tag names that are always leaves.
        open_aggregates: Upper-case tag names that stay aggregates even
            when their closing tag is omitted (the record tag).

    Returns:
        The single root ``RawNode`` (normally ``OFX``).

    Raises:
        MarkupSyntaxError: On orphan closing tags, stray text, a second
            root element, an invalid character reference, or when there
            are no tags at all.
    """
    leaf_set = frozenset(leaf_tags)
    keep = frozenset(open_aggregates)
    root: RawNode | None = None
    stack: list[RawNode] = []
    # Name of the leaf emitted by the previous tag token, if any
    open_leaf: str | None = None

    i = 0
    while i < len(tokens):
        tok = tokens[i]

        if tok.kind == "text":
            if tok.value.strip():
                raise _syntax_error(
                    "Unexpected text outside a value element",
                    content, tok.value.strip()[:_FRAGMENT_LEN], tok.offset,
                )
            i += 1
            continue

        if tok.kind == "close":
            if open_leaf == tok.value:
                open_leaf = None
                i += 1
                continue
            if not any(node.tag == tok.value for node in stack):
                raise _syntax_error(
                    "Closing tag without a matching open element",
                    content, f"</{tok.value}>", tok.offset,
                )
            while stack[-1].tag != tok.value:
                _close_implicitly(stack, keep)
            _close_explicitly(stack.pop())
            open_leaf = None
            i += 1
            continue

        # Open tag: a repeated name among the open aggregates is a sibling
        if any(node.tag == tok.value for node in stack):
            while stack[-1].tag != tok.value:
                _close_implicitly(stack, keep)
            _close_implicitly(stack, keep)

        following = tokens[i + 1] if i + 1 < len(tokens) else None
        text = following.value if following is not None and following.kind == "text" else ""
        is_leaf = bool(text.strip()) or tok.value in leaf_set

        value = None
        if is_leaf:
            start = following.offset + len(text) - len(text.lstrip()) if text else tok.offset
            value = _decode_text(text.strip(), content, start)
        node = RawNode(tok.value, value=value)
        if stack:
            stack[-1].children.append(node)
        elif root is None:
            root = node
        else:
            raise _syntax_error(
                "Element found after the root element was closed",
                content, f"<{tok.value}>", tok.offset,
            )

        if is_leaf:
            open_leaf = tok.value
            i += 2 if text else 1
        else:
            stack.append(node)
            open_leaf = None
            i += 1

    if root is None:
        raise _syntax_error("No elements found in SGML content", content, content.strip()[:_FRAGMENT_LEN], 0)
    if stack:
        logger.debug("Implicitly closed %d aggregate(s) at end of input", len(stack))
        while stack:
            _close_implicitly(stack, keep)
    return root


def parse_sgml(
    content: str,
    leaf_tags: Iterable[str] = (),
    open_aggregates: Iterable[str] = (),
) -> RawNode:
    """Parse an OFX 1.x SGML document into a ``RawNode`` tree."""
    _, start = _split_header(content)
    tokens = tokenize(content, start)
    return build_tree(
        tokens, content,
        leaf_tags=[t.upper() for t in leaf_tags],
        open_aggregates=[t.upper() for t in open_aggregates],
    )

"""
QFX / OFX parser for bank-statement-ingest.

Handles both OFX dialects through the markup front ends:
  - SGML (OFX 1.x): colon-separated header block, then tag soup where
    leaf values are usually unclosed.
  - XML (OFX 2.x, Quicken QFX): ``<?xml`` prolog and properly closed tags.

Whichever front end runs, the result is a ``RawNode`` tree. The semantic
extractor then finds every transaction record (``STMTTRN``) anywhere in
that tree (bank statements keep them under BANKMSGSRSV1, credit cards under
CREDITCARDMSGSRSV1; the path is not assumed) and maps their child tags to
typed fields using the layout's field map:

  TRNTYPE  -> transaction_type (raw code, not validated)
  DTPOSTED -> date_posted      (mandatory, datetime.date)
  TRNAMT   -> amount           (mandatory, exact Decimal)
  FITID    -> fit_id
  NAME     -> payee            (or PAYEE, or the NAME inside a PAYEE aggregate)
  MEMO     -> memo
  CHECKNUM -> checknum

Any bad or missing mandatory field fails the whole parse with an error
naming the field and the record index.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from bank_statement_ingest.detect import detect_dialect, has_root_tag
from bank_statement_ingest.exceptions import (
    AmountParseError,
    DateParseError,
    DuplicateFieldError,
    MissingMandatoryFieldError,
)
from bank_statement_ingest.format_registry import Dialect, FileFormat, FormatLayout
from bank_statement_ingest.markup.node import RawNode
from bank_statement_ingest.markup.sgml_tokenizer import parse_sgml, parse_sgml_header
from bank_statement_ingest.markup.xml_tree import parse_xml
from bank_statement_ingest.parsers.base import BaseParser
from bank_statement_ingest.parsers.fields import parse_amount, parse_ofx_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QfxTransaction:
    """One ``STMTTRN`` record, with typed fields.

    Attributes:
        transaction_type: Raw TRNTYPE code (DEBIT, CREDIT, CHECK, ...);
            empty string when the record has none.
        date_posted: Calendar date of DTPOSTED.
        amount: TRNAMT as an exact Decimal (negative = money out).
        fit_id: Institution's transaction id (FITID).
        payee: NAME, or the payee name from a PAYEE aggregate.
        memo: MEMO.
        checknum: CHECKNUM.
    """
    transaction_type: str
    date_posted: date
    amount: Decimal
    fit_id: str | None = None
    payee: str | None = None
    memo: str | None = None
    checknum: str | None = None


def _node_text(node: RawNode) -> str | None:
    """Value of a leaf, or of the NAME child of an aggregate (PAYEE)."""
    if node.is_leaf:
        return node.value
    name = node.find("NAME")
    return name.value if name is not None else None


def _field_text(record: RawNode, layout: FormatLayout, attribute: str, index: int) -> str | None:
    """Look up one attribute's text among a record's direct children.

    Aliases are tried in layout order (NAME before PAYEE). Empty values
    count as absent.

    Raises:
        DuplicateFieldError: If a tag occurs more than once in the record.
    """
    for tag in layout.tags_for(attribute):
        matches = record.find_all(tag)
        if len(matches) > 1:
            raise DuplicateFieldError(f"field {tag} appears {len(matches)} times", field=tag, index=index)
        if matches:
            text = _node_text(matches[0])
            if text:
                return text
    return None


def _primary_tag(layout: FormatLayout, attribute: str) -> str:
    tags = layout.tags_for(attribute)
    return tags[0] if tags else attribute.upper()


def extract_transactions(root: RawNode, layout: FormatLayout) -> list[QfxTransaction]:
    """Walk a ``RawNode`` tree and build one QfxTransaction per record.

    Args:
        root: Tree produced by either markup front end.
        layout: QFX layout providing the record tag and field map.

    Returns:
        Transactions in document (pre-order) order.

    Raises:
        MissingMandatoryFieldError: A record lacks TRNAMT or DTPOSTED.
        AmountParseError: TRNAMT is not a decimal number.
        DateParseError: DTPOSTED is not an OFX date.
        DuplicateFieldError: A mapped tag occurs twice in one record.
    """
    transactions: list[QfxTransaction] = []

    for index, record in enumerate(root.iter(layout.record_tag)):
        values = {
            attribute: _field_text(record, layout, attribute, index)
            for attribute in layout.fields
        }

        for attribute in layout.mandatory:
            if values.get(attribute) is None:
                tag = _primary_tag(layout, attribute)
                raise MissingMandatoryFieldError(
                    f"missing mandatory field {tag}", field=tag, index=index,
                )

        amount_text = values["amount"]
        try:
            amount = parse_amount(amount_text)
        except ValueError as exc:
            tag = _primary_tag(layout, "amount")
            raise AmountParseError(
                f"invalid amount in {tag}: {amount_text!r}", field=tag, index=index,
            ) from exc

        date_text = values["date_posted"]
        try:
            date_posted = parse_ofx_date(date_text)
        except ValueError as exc:
            tag = _primary_tag(layout, "date_posted")
            raise DateParseError(
                f"invalid date in {tag}: {date_text!r}", field=tag, index=index,
            ) from exc

        transactions.append(QfxTransaction(
            transaction_type=values.get("transaction_type") or "",
            date_posted=date_posted,
            amount=amount,
            fit_id=values.get("fit_id"),
            payee=values.get("payee"),
            memo=values.get("memo"),
            checknum=values.get("checknum"),
        ))

    return transactions


class QfxParser(BaseParser):
    """Parser for OFX/QFX statements in either dialect."""

    file_format = FileFormat.QFX

    def is_supported(self, filename: str | None, content: str) -> bool:
        if self.layout.has_extension(filename):
            return True
        if has_root_tag(content, self.layout.detection.root_tag):
            return True
        return any(marker in content for marker in self.layout.detection.content_markers)

    def parse_tree(self, content: str, dialect: Dialect | None = None) -> RawNode:
        """Run the dialect front end matching *content*."""
        if dialect is None:
            dialect = detect_dialect(content)
        if dialect is Dialect.XML:
            return parse_xml(content)

        header = parse_sgml_header(content)
        if header:
            logger.debug(
                "SGML header: version=%s, encoding=%s, charset=%s",
                header.get("VERSION"), header.get("ENCODING"), header.get("CHARSET"),
            )
        return parse_sgml(
            content,
            leaf_tags=self.layout.leaf_tags,
            open_aggregates=[self.layout.record_tag],
        )

    def parse(self, content: str, dialect: Dialect | None = None) -> list[QfxTransaction]:
        if dialect is None:
            dialect = detect_dialect(content)
        logger.info("Parsing QFX content (%s dialect, %d chars)", dialect.value, len(content))

        root = self.parse_tree(content, dialect)
        transactions = extract_transactions(root, self.layout)

        if not transactions:
            logger.warning("No <%s> records found in document", self.layout.record_tag)
        logger.info("Extracted %d transactions", len(transactions))
        return transactions

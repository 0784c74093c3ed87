"""
Output record types and the default conversion.

``ParsedTransaction`` is the tagged union the builder returns: it carries
the format it came from and that format's raw record. Today the only
variant is ``FileFormat.QFX`` with a ``QfxTransaction``.

``Transaction`` is the format-neutral record most callers want. It is
built from a ``ParsedTransaction`` by ``to_transaction()``, the default
converter for ``ParserBuilder.parse_into()``. Callers with their own
target type pass their own converter instead.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from bank_statement_ingest.exceptions import ConversionError
from bank_statement_ingest.format_registry import FileFormat
from bank_statement_ingest.parsers.qfx import QfxTransaction


@dataclass(frozen=True)
class ParsedTransaction:
    """A raw record tagged with the format that produced it."""
    format: FileFormat
    record: QfxTransaction

    @property
    def qfx(self) -> QfxTransaction:
        """The record as a QfxTransaction.

        Raises:
            ConversionError: If this is not a QFX record.
        """
        if self.format is not FileFormat.QFX:
            raise ConversionError(f"expected a QFX record, got {self.format.value}")
        return self.record


@dataclass(frozen=True)
class Transaction:
    """Format-neutral transaction record.

    Attributes:
        date: Posting date.
        amount: Exact signed amount (negative = money out).
        payee: Counterparty name, if the statement gives one.
        transaction_type: Raw type code from the statement.
        fitid: Institution's transaction id, used downstream for dedup.
        status: Clearing status; OFX statements do not carry one.
        memo: Free-text memo.
    """
    date: date
    amount: Decimal
    payee: str | None
    transaction_type: str
    fitid: str | None = None
    status: str | None = None
    memo: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _from_qfx(record: QfxTransaction) -> Transaction:
    return Transaction(
        date=record.date_posted,
        amount=record.amount,
        payee=record.payee,
        transaction_type=record.transaction_type,
        fitid=record.fit_id,
        status=None,
        memo=record.memo,
    )


def to_transaction(parsed: ParsedTransaction) -> Transaction:
    """Convert a ParsedTransaction into a Transaction.

    Raises:
        ConversionError: If the record's format has no conversion.
    """
    if parsed.format is FileFormat.QFX:
        return _from_qfx(parsed.record)
    raise ConversionError(f"no Transaction conversion for format '{parsed.format.value}'")

"""
Integration tests: SGML and XML dialects of the same statement.

The fixture corpus holds one checking-account statement exported twice,
as OFX 1.x SGML (bank_sgml.qfx) and as OFX 2.x XML (bank_xml.qfx). Both
must yield identical records; so must the minimal one-record pair.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from bank_statement_ingest import ParserBuilder, Transaction, parse
from bank_statement_ingest.format_registry import Dialect, FileFormat
from bank_statement_ingest.detect import detect_format
from tests.conftest import (
    BANK_SGML_QFX,
    BANK_XML_QFX,
    CREDITCARD_XML_OFX,
    MINIMAL_SGML_QFX,
    MINIMAL_XML_QFX,
    UNCLOSED_RECORDS_OFX,
    read_fixture,
)


@pytest.mark.integration
class TestBankStatement:
    """bank_sgml.qfx vs bank_xml.qfx."""

    def test_detection(self, bank_sgml, bank_xml):
        assert detect_format(bank_sgml, BANK_SGML_QFX.name).dialect is Dialect.SGML
        assert detect_format(bank_xml, BANK_XML_QFX.name).dialect is Dialect.XML

    def test_same_parsed_records(self, bank_sgml, bank_xml):
        sgml = ParserBuilder().content(bank_sgml).filename(BANK_SGML_QFX.name).parse()
        xml = ParserBuilder().content(bank_xml).filename(BANK_XML_QFX.name).parse()
        assert sgml == xml
        assert all(p.format is FileFormat.QFX for p in sgml)

    def test_expected_transactions(self, bank_sgml):
        transactions = parse(bank_sgml)
        assert transactions == [
            Transaction(
                date=date(2023, 1, 15),
                amount=Decimal("-42.50"),
                payee="COFFEE SHOP",
                transaction_type="DEBIT",
                fitid="1001",
                memo="POS PURCHASE",
            ),
            Transaction(
                date=date(2023, 1, 20),
                amount=Decimal("1500.00"),
                payee="ACME PAYROLL",
                transaction_type="CREDIT",
                fitid="1002",
            ),
            Transaction(
                date=date(2023, 1, 25),
                amount=Decimal("-120.345"),
                payee="J SMITH & SONS",
                transaction_type="CHECK",
                fitid="1003",
            ),
        ]

    def test_checknum_kept_on_raw_record(self, bank_xml):
        parsed = ParserBuilder().content(bank_xml).parse()
        assert [p.qfx.checknum for p in parsed] == [None, None, "0042"]

    def test_ledger_balance_is_not_a_transaction(self, bank_sgml):
        assert len(parse(bank_sgml)) == 3

    def test_deterministic(self, bank_sgml):
        assert parse(bank_sgml) == parse(bank_sgml)


@pytest.mark.integration
class TestMinimalDocuments:

    def test_minimal_sgml_equals_minimal_xml(self):
        a = parse(read_fixture(MINIMAL_SGML_QFX), filename=MINIMAL_SGML_QFX.name)
        b = parse(read_fixture(MINIMAL_XML_QFX), filename=MINIMAL_XML_QFX.name)
        assert a == b
        assert a == [
            Transaction(
                date=date(2023, 1, 15),
                amount=Decimal("-42.50"),
                payee="COFFEE SHOP",
                transaction_type="DEBIT",
                fitid="1001",
            )
        ]


@pytest.mark.integration
class TestOtherExports:

    def test_credit_card_statement(self):
        transactions = parse(read_fixture(CREDITCARD_XML_OFX), filename=CREDITCARD_XML_OFX.name)
        assert [t.fitid for t in transactions] == ["CC-2024-0001", "CC-2024-0002"]
        assert transactions[0].date == date(2024, 2, 3)
        assert transactions[1].payee == "CARD SERVICES"
        assert transactions[1].memo == "THANK YOU"
        assert transactions[1].transaction_type == "PAYMENT"

    def test_unclosed_records_are_siblings(self):
        transactions = parse(read_fixture(UNCLOSED_RECORDS_OFX), filename=UNCLOSED_RECORDS_OFX.name)
        assert [t.fitid for t in transactions] == ["A1", "A2", "A3"]
        assert [t.amount for t in transactions] == [Decimal("-10.00"), Decimal("-20.00"), Decimal("5.00")]
        assert [t.payee for t in transactions] == ["BAKERY", "GROCER", "REFUND"]

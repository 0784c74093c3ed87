"""
Shared test fixtures and path constants for bank-statement-ingest tests.

All fixture statement paths are defined here as module-level constants for
easy discovery and modification. The statements under tests/fixtures/ are
anonymized exports: account numbers, names and FITIDs are made up.
"""

from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Fixture file paths -- edit here if files move or new ones are added
# ---------------------------------------------------------------------------
FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"

BANK_SGML_QFX = FIXTURE_DIR / "bank_sgml.qfx"            # OFX 1.x, header + 3 records
BANK_XML_QFX = FIXTURE_DIR / "bank_xml.qfx"              # same statement as OFX 2.x
CREDITCARD_XML_OFX = FIXTURE_DIR / "creditcard_xml.ofx"  # CREDITCARDMSGSRSV1, PAYEE aggregate
UNCLOSED_RECORDS_OFX = FIXTURE_DIR / "unclosed_records.ofx"  # STMTTRN never closed
CP1252_SGML_QFX = FIXTURE_DIR / "cp1252_sgml.qfx"        # non-UTF-8 payee name
MINIMAL_SGML_QFX = FIXTURE_DIR / "minimal_sgml.qfx"      # minimal SGML, no header
MINIMAL_XML_QFX = FIXTURE_DIR / "minimal_xml.qfx"        # minimal XML

MINIMAL_SGML = (
    "<OFX><BANKTRANLIST><STMTTRN><TRNTYPE>DEBIT<DTPOSTED>20230115"
    "<TRNAMT>-42.50<FITID>1001<NAME>COFFEE SHOP</STMTTRN></BANKTRANLIST></OFX>"
)
MINIMAL_XML = (
    '<?xml version="1.0"?><OFX><BANKTRANLIST><STMTTRN>'
    "<TRNTYPE>DEBIT</TRNTYPE><DTPOSTED>20230115</DTPOSTED>"
    "<TRNAMT>-42.50</TRNAMT><FITID>1001</FITID><NAME>COFFEE SHOP</NAME>"
    "</STMTTRN></BANKTRANLIST></OFX>"
)


def read_fixture(path: Path, encoding: str = "utf-8") -> str:
    with open(path, "r", encoding=encoding, newline="") as f:
        return f.read()


def sgml_record(*fields: str) -> str:
    """Wrap SGML ``<TAG>value`` fields into one STMTTRN inside an OFX document."""
    body = "\n".join(fields)
    return f"<OFX>\n<BANKTRANLIST>\n<STMTTRN>\n{body}\n</STMTTRN>\n</BANKTRANLIST>\n</OFX>\n"


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (runs against fixture statement files)",
    )


@pytest.fixture
def bank_sgml() -> str:
    return read_fixture(BANK_SGML_QFX)


@pytest.fixture
def bank_xml() -> str:
    return read_fixture(BANK_XML_QFX)

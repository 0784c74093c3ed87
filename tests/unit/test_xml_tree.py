"""
Unit tests for the XML front end (bank_statement_ingest.markup.xml_tree).
"""

import pytest

from bank_statement_ingest.exceptions import MarkupSyntaxError
from bank_statement_ingest.markup.xml_tree import parse_xml
from tests.conftest import MINIMAL_XML


class TestParseXml:

    def test_minimal_xml(self):
        root = parse_xml(MINIMAL_XML)
        assert root.tag == "OFX"
        record = next(root.iter("STMTTRN"))
        assert record.find("TRNAMT").value == "-42.50"
        assert record.find("NAME").value == "COFFEE SHOP"

    def test_ofx_processing_instruction_is_ignored(self):
        content = (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<?OFX OFXHEADER="200" VERSION="211"?>\n'
            "<OFX><SIGNONMSGSRSV1/></OFX>"
        )
        root = parse_xml(content)
        assert [c.tag for c in root.children] == ["SIGNONMSGSRSV1"]

    def test_empty_element_is_empty_leaf(self):
        root = parse_xml("<OFX><MEMO></MEMO><NAME/></OFX>")
        assert root.find("MEMO").value == ""
        assert root.find("NAME").value == ""

    def test_text_is_trimmed(self):
        root = parse_xml("<OFX><NAME>\n   COFFEE SHOP \n</NAME></OFX>")
        assert root.find("NAME").value == "COFFEE SHOP"

    def test_tags_are_upper_cased(self):
        root = parse_xml("<ofx><stmttrn><trnamt>1</trnamt></stmttrn></ofx>")
        assert root.tag == "OFX"
        assert root.find("STMTTRN").find("TRNAMT").value == "1"

    def test_namespace_is_stripped(self):
        root = parse_xml('<OFX xmlns="http://ofx.net/ifx/2.0/ofx"><CODE>0</CODE></OFX>')
        assert root.tag == "OFX"
        assert root.find("CODE").value == "0"

    def test_entities_are_decoded(self):
        root = parse_xml("<OFX><NAME>J SMITH &amp; SONS</NAME></OFX>")
        assert root.find("NAME").value == "J SMITH & SONS"

    def test_leading_bom_and_whitespace(self):
        root = parse_xml('\ufeff\n  <?xml version="1.0"?><OFX></OFX>')
        assert root.tag == "OFX"

    def test_aggregates_have_no_value(self):
        root = parse_xml(MINIMAL_XML)
        assert root.value is None
        assert not root.find("BANKTRANLIST").is_leaf


class TestParseXmlErrors:

    def test_mismatched_tag(self):
        content = '<?xml version="1.0"?>\n<OFX>\n<NAME>COFFEE</MEMO>\n</OFX>'
        with pytest.raises(MarkupSyntaxError, match="Malformed XML") as exc_info:
            parse_xml(content)
        assert exc_info.value.line == 3
        assert exc_info.value.fragment == "<NAME>COFFEE</MEMO>"

    def test_unclosed_leaf(self):
        with pytest.raises(MarkupSyntaxError):
            parse_xml('<?xml version="1.0"?><OFX><NAME>COFFEE</OFX>')

    def test_mixed_content(self):
        with pytest.raises(MarkupSyntaxError, match="Mixed content in <STMTTRN>"):
            parse_xml("<OFX><STMTTRN>stray<TRNAMT>1</TRNAMT></STMTTRN></OFX>")

    def test_mixed_content_in_tail(self):
        with pytest.raises(MarkupSyntaxError, match="Mixed content"):
            parse_xml("<OFX><TRNAMT>1</TRNAMT>stray</OFX>")

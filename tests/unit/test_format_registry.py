"""
Unit tests for the format registry (bank_statement_ingest.format_registry).

Verifies the built-in qfx.yaml layout and the cached, read-only parser list.
"""

import pytest
from pydantic import ValidationError

from bank_statement_ingest.format_registry import (
    FileFormat,
    FormatLayout,
    get_layout,
    load_all_layouts,
    load_layout,
    registered_parsers,
)
from bank_statement_ingest.parsers.qfx import QfxParser


class TestBuiltInLayouts:

    def test_qfx_layout_loaded(self):
        layouts = load_all_layouts()
        assert [l.format_name for l in layouts] == [FileFormat.QFX]

    def test_qfx_layout_contents(self):
        layout = get_layout(FileFormat.QFX)
        assert layout.detection.root_tag == "OFX"
        assert layout.record_tag == "STMTTRN"
        assert set(layout.mandatory) == {"amount", "date_posted"}
        assert layout.tags_for("payee") == ["NAME", "PAYEE"]
        assert layout.tags_for("amount") == ["TRNAMT"]
        assert "MEMO" in layout.leaf_tags

    def test_unknown_attribute_has_no_tags(self):
        assert get_layout(FileFormat.QFX).tags_for("balance") == []

    def test_cached(self):
        assert load_all_layouts() is load_all_layouts()


class TestHasExtension:

    @pytest.mark.parametrize("filename", ["a.qfx", "A.QFX", "dir/b.ofx", "statement.Ofx"])
    def test_matches(self, filename):
        assert get_layout(FileFormat.QFX).has_extension(filename)

    @pytest.mark.parametrize("filename", [None, "", "a.csv", "qfx", "a.qfx.bak"])
    def test_no_match(self, filename):
        assert not get_layout(FileFormat.QFX).has_extension(filename)


class TestLoadLayout:

    def test_scalar_field_becomes_list(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(
            "format_name: qfx\n"
            "detection:\n  root_tag: OFX\n"
            "record_tag: STMTTRN\n"
            "fields:\n  amount: TRNAMT\n  payee: [NAME, PAYEE]\n",
            encoding="utf-8",
        )
        layout = load_layout(path)
        assert layout.fields == {"amount": ["TRNAMT"], "payee": ["NAME", "PAYEE"]}
        assert layout.priority == 99

    def test_unknown_format_name_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(
            "format_name: csv\ndetection:\n  root_tag: X\nrecord_tag: R\nfields: {}\n",
            encoding="utf-8",
        )
        with pytest.raises(ValidationError):
            load_layout(path)

    def test_layouts_sorted_by_priority(self, tmp_path):
        for name, priority in [("b.yaml", 5), ("a.yaml", 7)]:
            (tmp_path / name).write_text(
                f"format_name: qfx\npriority: {priority}\n"
                "detection:\n  root_tag: OFX\nrecord_tag: STMTTRN\nfields: {}\n",
                encoding="utf-8",
            )
        layouts = load_all_layouts(tmp_path)
        assert [l.priority for l in layouts] == [5, 7]


class TestRegisteredParsers:

    def test_one_qfx_parser(self):
        parsers = registered_parsers()
        assert isinstance(parsers, tuple)
        assert len(parsers) == 1
        assert isinstance(parsers[0], QfxParser)
        assert parsers[0].layout == get_layout(FileFormat.QFX)

    def test_cached(self):
        assert registered_parsers() is registered_parsers()

    def test_layout_model_requires_record_tag(self):
        with pytest.raises(ValidationError):
            FormatLayout.model_validate({
                "format_name": "qfx",
                "detection": {"root_tag": "OFX"},
                "fields": {},
            })

"""Tests for onboarding.export module.

Tests credential sheet rendering and writing:
- per-student sheet content and escaping
- class sheet count and table
- file naming, duplicates and empty input
"""

from datetime import date

import pytest

from onboarding.export import (
    class_sheet_filename,
    render_class_sheet,
    render_credential_sheet,
    sheet_filename,
    write_credential_sheets,
)
from onboarding.export.credential_sheets import INSTRUCTIONS

DAY = date(2024, 9, 2)


class TestCredentialSheet:
    """Tests for render_credential_sheet."""

    def test_contains_credentials(self, make_record):
        html = render_credential_sheet(make_record("Jane", "D"), DAY)
        assert "<title>Credentials - Jane D.</title>" in html
        assert "Student Account Information" in html
        assert "Jane D." in html
        assert "janed" in html
        assert "sunnyfox07" in html
        assert "Generated on: 2024-09-02" in html

    def test_contains_instructions(self, make_record):
        html = render_credential_sheet(make_record(), DAY)
        for step in INSTRUCTIONS:
            assert step in html

    def test_embeds_stylesheet(self, make_record):
        html = render_credential_sheet(make_record(), DAY)
        assert "<style>" in html
        assert "@media print" in html

    def test_missing_username_is_derived(self, make_record):
        record = make_record("John", "S")
        record.username = None
        assert "johns" in render_credential_sheet(record, DAY)

    def test_escapes_html(self, make_record):
        record = make_record("Jane", "D")
        record.first_name = "<b>Jane</b>"
        html = render_credential_sheet(record, DAY)
        assert "<b>Jane</b>" not in html
        assert "&lt;b&gt;Jane&lt;/b&gt;" in html


class TestClassSheet:
    """Tests for render_class_sheet."""

    def test_count_and_rows(self, sample_roster):
        html = render_class_sheet(sample_roster, DAY)
        assert "3 Student Accounts Created" in html
        assert "Generated: 2024-09-02" in html
        assert html.count("<tr>") == 4  # header + 3 rows
        assert "Anna-Lee K." in html
        assert "brightowl12" in html

    def test_singular(self, make_record):
        html = render_class_sheet([make_record()], DAY)
        assert "1 Student Account Created" in html


class TestFilenames:
    """Tests for sheet file naming."""

    def test_record_filename(self, make_record):
        assert sheet_filename(make_record("Jane", "D")) == "Jane_D_credentials.html"

    def test_nameless_record_uses_id(self, make_record):
        record = make_record("", "")
        assert sheet_filename(record) == f"{record.id}_credentials.html"

    def test_class_filename(self):
        assert class_sheet_filename(DAY) == "class_credentials_2024-09-02.html"


class TestWriteSheets:
    """Tests for write_credential_sheets."""

    def test_writes_one_per_record_plus_class(self, sample_roster, tmp_path):
        paths = write_credential_sheets(sample_roster, tmp_path / "sheets", DAY)
        assert len(paths) == 4
        assert all(p.exists() for p in paths)
        assert paths[-1].name == "class_credentials_2024-09-02.html"
        assert paths[0].name == "Jane_D_credentials.html"
        assert "sunnyfox07" in paths[0].read_text(encoding="utf-8")

    def test_duplicate_names_are_numbered(self, make_record, tmp_path):
        records = [make_record("Jane", "D"), make_record("Jane", "D", password="other1")]
        paths = write_credential_sheets(records, tmp_path, DAY)
        names = [p.name for p in paths[:2]]
        assert names == ["Jane_D_credentials.html", "Jane_D_2_credentials.html"]
        assert "other1" in paths[1].read_text(encoding="utf-8")

    def test_empty_roster_writes_nothing(self, tmp_path):
        out = tmp_path / "sheets"
        assert write_credential_sheets([], out, DAY) == []
        assert not out.exists()

    @pytest.mark.parametrize("names", [["Jane"], ["Jane", "John", "Ana"]])
    def test_file_count(self, make_record, tmp_path, names):
        records = [make_record(name, "X") for name in names]
        assert len(write_credential_sheets(records, tmp_path, DAY)) == len(names) + 1

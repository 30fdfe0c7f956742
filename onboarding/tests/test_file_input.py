"""Tests for onboarding.core.file_input module."""

import pytest

from onboarding.core import FileInputError, check_size, decode_upload, read_upload
from onboarding.core.config import IngestionConfig


class TestCheckSize:
    """Tests for the upload size ceiling."""

    def test_at_limit_is_accepted(self):
        check_size(IngestionConfig.MAX_FILE_BYTES)

    def test_over_limit_is_rejected(self):
        with pytest.raises(FileInputError) as exc_info:
            check_size(IngestionConfig.MAX_FILE_BYTES + 1, "big.pdf")
        assert "maximum size is 5 MB" in str(exc_info.value)
        assert exc_info.value.filename == "big.pdf"


class TestDecodeUpload:
    """Tests for decode_upload."""

    def test_utf8(self):
        assert decode_upload("Zoë Martin".encode("utf-8")) == "Zoë Martin"

    def test_invalid_bytes_are_replaced(self):
        text = decode_upload(b"Jane \xff Doe")
        assert text.startswith("Jane ") and text.endswith(" Doe")


class TestReadUpload:
    """Tests for read_upload."""

    def test_reads_any_extension(self, tmp_path):
        path = tmp_path / "roster.docx"
        path.write_text("Jane Doe\nJohn Smith", encoding="utf-8")
        assert read_upload(path) == "Jane Doe\nJohn Smith"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileInputError, match="File not found"):
            read_upload(tmp_path / "nope.txt")

    def test_too_large_is_rejected_before_reading(self, tmp_path):
        path = tmp_path / "huge.txt"
        with open(path, "wb") as f:
            f.truncate(IngestionConfig.MAX_FILE_BYTES + 1)
        with pytest.raises(FileInputError, match="too large"):
            read_upload(path)

"""File input for the ingestion stage.

Every upload is treated as a plain-text payload whatever its extension
(.csv, .txt, .docx, .pdf, ...): the extraction service is good at finding
names in noisy text, so there is no per-format parsing here. The size
ceiling is checked before the file is read.
"""

from pathlib import Path

from onboarding.core.config import IngestionConfig
from onboarding.core.errors import FileInputError


def check_size(size: int, filename: str | None = None) -> None:
    """Raise FileInputError if ``size`` bytes exceeds the upload ceiling."""
    if size > IngestionConfig.MAX_FILE_BYTES:
        limit_mb = IngestionConfig.MAX_FILE_BYTES / (1024 * 1024)
        raise FileInputError(
            f"File is too large ({size / (1024 * 1024):.1f} MB). "
            f"The maximum size is {limit_mb:.0f} MB.",
            filename=filename,
            size=size,
        )


def decode_upload(data: bytes, filename: str | None = None) -> str:
    """Decode uploaded bytes as text, replacing undecodable sequences."""
    check_size(len(data), filename)
    return data.decode(IngestionConfig.FILE_ENCODING, errors="replace")


def read_upload(path: str | Path) -> str:
    """Read a file from disk as text.

    Args:
        path: Path to the uploaded file.

    Returns:
        File content decoded as text.

    Raises:
        FileInputError: If the file is missing, unreadable or too large.
    """
    path = Path(path)
    if not path.exists():
        raise FileInputError(f"File not found: {path}", filename=path.name)
    try:
        check_size(path.stat().st_size, path.name)
        data = path.read_bytes()
    except OSError as e:
        raise FileInputError(f"Could not read {path.name}: {e}", filename=path.name) from e
    return decode_upload(data, path.name)

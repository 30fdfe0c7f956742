"""Credential sheet export."""

from onboarding.export.credential_sheets import (
    INSTRUCTIONS,
    class_sheet_filename,
    render_class_sheet,
    render_credential_sheet,
    sheet_filename,
    write_credential_sheets,
)

__all__ = [
    "INSTRUCTIONS",
    "render_credential_sheet",
    "render_class_sheet",
    "sheet_filename",
    "class_sheet_filename",
    "write_credential_sheets",
]

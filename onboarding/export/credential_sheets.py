"""Printable credential sheets for accounts that were created.

One sheet per student (name, username, password, login instructions) plus a
class sheet listing everyone in a table. Output is self-contained HTML so a
browser can print or save it as PDF.

Only pass records whose accounts were actually created; see
ProvisioningOrchestrator.completed_records().
"""

import logging
from datetime import date
from html import escape
from pathlib import Path

from onboarding.core import CredentialGenerator
from onboarding.export.html_template import CSS_STYLES
from onboarding.pydantic_models import Record

logger = logging.getLogger(__name__)

INSTRUCTIONS = [
    "Keep this information safe and secure",
    "Use the username and password to log into the classroom",
    "Change password after first login if desired",
]


def _username(record: Record) -> str:
    return record.username or CredentialGenerator.generate_username(
        record.first_name, record.last_initial
    )


def _page(title: str, body: str) -> str:
    return f'''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{escape(title)}</title>
    <style>
{CSS_STYLES}
    </style>
</head>
<body>
{body}
</body>
</html>
'''


def _sheet_body(record: Record, generated_on: date) -> str:
    steps = "\n".join(f"            <li>{escape(step)}</li>" for step in INSTRUCTIONS)
    return f'''    <div class="sheet">
        <h1>Student Account Information</h1>
        <hr class="rule">
        <div class="field">
            <div class="label">Student Name:</div>
            <div class="value">{escape(record.display_name)}</div>
        </div>
        <div class="field">
            <div class="label">Username:</div>
            <div class="value">{escape(_username(record))}</div>
        </div>
        <div class="field">
            <div class="label">Password:</div>
            <div class="value password">{escape(record.password)}</div>
        </div>
        <div class="instructions">
            <strong>Instructions:</strong>
            <ol>
{steps}
            </ol>
        </div>
        <div class="footer">Generated on: {generated_on.isoformat()}</div>
    </div>'''


def render_credential_sheet(record: Record, generated_on: date | None = None) -> str:
    """Render one student's credential sheet as a full HTML page."""
    generated_on = generated_on or date.today()
    return _page(f"Credentials - {record.display_name}", _sheet_body(record, generated_on))


def render_class_sheet(records: list[Record], generated_on: date | None = None) -> str:
    """Render the class overview: a count, the date, and a name/username/password table."""
    generated_on = generated_on or date.today()
    rows = "\n".join(
        f'''            <tr>
                <td>{escape(r.display_name)}</td>
                <td>{escape(_username(r))}</td>
                <td class="password">{escape(r.password)}</td>
            </tr>'''
        for r in records
    )
    count = len(records)
    body = f'''    <div class="sheet">
        <h1>Class Account Information</h1>
        <div class="subtitle">{count} Student Account{'s' if count != 1 else ''} Created</div>
        <div class="subtitle">Generated: {generated_on.isoformat()}</div>
        <table class="roster">
            <thead>
                <tr><th>Name</th><th>Username</th><th>Password</th></tr>
            </thead>
            <tbody>
{rows}
            </tbody>
        </table>
    </div>'''
    return _page("Class Account Information", body)


def sheet_filename(record: Record) -> str:
    """``Jane_D_credentials.html``."""
    stem = "_".join(part for part in (record.first_name, record.last_initial) if part) or record.id
    return f"{stem}_credentials.html"


def class_sheet_filename(generated_on: date | None = None) -> str:
    generated_on = generated_on or date.today()
    return f"class_credentials_{generated_on.isoformat()}.html"


def write_credential_sheets(
    records: list[Record],
    output_dir: str | Path,
    generated_on: date | None = None,
) -> list[Path]:
    """Write one sheet per record and the class sheet.

    Two students with the same name and initial get numbered file names
    rather than overwriting each other.

    Returns:
        Paths written, per-record sheets first. Empty if there are no records.
    """
    if not records:
        return []
    generated_on = generated_on or date.today()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    used: dict[str, int] = {}
    for record in records:
        name = sheet_filename(record)
        seen = used.get(name, 0)
        used[name] = seen + 1
        if seen:
            name = name.replace("_credentials.html", f"_{seen + 1}_credentials.html")
        path = output_dir / name
        path.write_text(render_credential_sheet(record, generated_on), encoding="utf-8")
        written.append(path)

    class_path = output_dir / class_sheet_filename(generated_on)
    class_path.write_text(render_class_sheet(records, generated_on), encoding="utf-8")
    written.append(class_path)

    logger.info("Wrote %d credential sheets to %s", len(records), output_dir)
    return written

"""HTML template assets for printable credential sheets."""

from pathlib import Path

_TEMPLATES_DIR = Path(__file__).parent / "templates"

CSS_STYLES = (_TEMPLATES_DIR / "sheet.css").read_text()

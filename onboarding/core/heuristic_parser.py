"""Local fallback extractor used when the extraction service is unavailable.

Line-based and deliberately strict: one name per non-empty line, in one of
three shapes ("First Last", "Last, First" with an optional middle initial, or
a bare first name). Lines that match none of them are reported, not guessed.
A roster exported as CSV (header row mentioning "first" or "name") is read
column-wise instead.

Records from this parser are lower-trust than service output; the ingestion
stage tags them and always sends them through the confirmation gate.
"""

import csv
import io
import re
from dataclasses import dataclass, field

from onboarding.core.config import RegexPatterns

_FIRST_LAST = re.compile(RegexPatterns.FIRST_LAST)
_LAST_COMMA_FIRST = re.compile(RegexPatterns.LAST_COMMA_FIRST)
_SINGLE_NAME = re.compile(RegexPatterns.SINGLE_NAME)


@dataclass
class ParsedName:
    """A name recovered from one line of input."""
    first_name: str
    last_name: str
    line_number: int


@dataclass
class HeuristicParse:
    """Output of the fallback parser."""
    names: list[ParsedName] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:].lower()


def capitalize_first_name(name: str) -> str:
    """Upper-case the first letter, leave the rest as given ("mcKenzie" -> "McKenzie")."""
    return name[:1].upper() + name[1:]


def parse_line(line: str) -> tuple[str, str] | None:
    """Split one line into (first, last). Returns None if no pattern matches."""
    text = line.strip()
    match = _FIRST_LAST.match(text)
    if match:
        return match.group(1), match.group(2)
    match = _LAST_COMMA_FIRST.match(text)
    if match:
        return match.group(2), match.group(1)
    match = _SINGLE_NAME.match(text)
    if match:
        return match.group(1), ""
    return None


def looks_like_csv(text: str) -> bool:
    """True when the first non-empty line is a header row with 2+ columns."""
    for line in text.splitlines():
        if not line.strip():
            continue
        header = line.lower()
        return "," in header and ("first" in header or "name" in header)
    return False


def parse_lines(text: str) -> HeuristicParse:
    """Parse one name per non-empty line."""
    result = HeuristicParse()
    lines = [line for line in text.splitlines() if line.strip()]
    for number, line in enumerate(lines, start=1):
        parsed = parse_line(line)
        if parsed is None:
            result.errors.append(f'Line {number}: Could not parse "{line.strip()}"')
            continue
        first, last = parsed
        result.names.append(ParsedName(_capitalize(first), last, number))
    return result


def parse_csv(text: str) -> HeuristicParse:
    """Parse a CSV roster: first column first name, second column last name.

    The header row is skipped. Single-column rows go through parse_line.
    """
    result = HeuristicParse()
    rows = [row for row in csv.reader(io.StringIO(text)) if any(c.strip() for c in row)]
    for number, row in enumerate(rows[1:], start=2):
        columns = [c.strip().replace('"', "") for c in row]
        columns = [c for c in columns if c]
        if len(columns) >= 2:
            result.names.append(ParsedName(_capitalize(columns[0]), columns[1], number))
        elif len(columns) == 1:
            parsed = parse_line(columns[0])
            if parsed is None:
                result.errors.append(f'Line {number}: Could not parse "{columns[0]}"')
                continue
            first, last = parsed
            result.names.append(ParsedName(_capitalize(first), last, number))
        else:
            result.errors.append(f"Line {number}: Invalid CSV format")
    return result


def heuristic_extract(text: str) -> HeuristicParse:
    """Pick the CSV or line parser based on the input's shape."""
    if looks_like_csv(text):
        return parse_csv(text)
    return parse_lines(text)

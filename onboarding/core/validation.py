"""Field-level validation for roster records.

Pure functions, no state. The same rules gate the review → provisioning
transition and drive the inline error list on the review screen.
"""

import re
from typing import Iterable, Literal

from onboarding.core.config import RegexPatterns
from onboarding.pydantic_models import Record

FieldError = Literal["required", "invalid"] | None

VALIDATED_FIELDS: tuple[str, ...] = ("first_name", "last_initial", "password")

_FIRST_NAME = re.compile(RegexPatterns.FIRST_NAME)
_LAST_INITIAL = re.compile(RegexPatterns.LAST_INITIAL)
_PASSWORD = re.compile(RegexPatterns.PASSWORD)

_MESSAGES: dict[tuple[str, str], str] = {
    ("first_name", "required"): "First name is required",
    ("first_name", "invalid"): "First names must only contain letters, numbers, and hyphens",
    ("last_initial", "required"): "Last initial is required",
    ("last_initial", "invalid"): "Last initial must be a letter",
    ("password", "required"): "Password is required",
    ("password", "invalid"): "Passwords must only contain letters and numbers",
}


def _check(value: str, pattern: re.Pattern, strip: bool = True) -> FieldError:
    if not (value.strip() if strip else value):
        return "required"
    if not pattern.fullmatch(value):
        return "invalid"
    return None


def validate(record: Record) -> dict[str, FieldError]:
    """Validate one record.

    Returns:
        Mapping of field name to "required", "invalid" or None.
    """
    return {
        "first_name": _check(record.first_name, _FIRST_NAME),
        "last_initial": _check(record.last_initial, _LAST_INITIAL, strip=False),
        "password": _check(record.password, _PASSWORD),
    }


def is_valid(record: Record) -> bool:
    return not any(validate(record).values())


def roster_errors(records: Iterable[Record]) -> list[dict[str, FieldError]]:
    """Per-record error maps, in roster order."""
    return [validate(record) for record in records]


def is_roster_valid(records: list[Record]) -> bool:
    """True iff the roster is non-empty and every record passes validation."""
    return len(records) > 0 and all(is_valid(record) for record in records)


def error_messages(records: Iterable[Record]) -> list[str]:
    """De-duplicated messages for the review screen's error list.

    Ordered by field, then by kind, so the list is stable while the operator
    fixes records one at a time.
    """
    present: set[tuple[str, str]] = set()
    for errors in roster_errors(records):
        for field_name, kind in errors.items():
            if kind:
                present.add((field_name, kind))
    return [message for key, message in _MESSAGES.items() if key in present]


# Input sanitizers (what the review inputs let through)

def sanitize_first_name(value: str) -> str:
    """Drop anything that is not a letter, digit or hyphen."""
    return re.sub(r"[^A-Za-z0-9-]", "", value)


def sanitize_last_initial(value: str) -> str:
    """Keep the first character, upper-cased."""
    return value[:1].upper()


def sanitize_password(value: str) -> str:
    """Drop anything that is not a letter or digit."""
    return re.sub(r"[^A-Za-z0-9]", "", value)

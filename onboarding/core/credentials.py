"""Credential generation for new records.

Passwords are friendly adjective+animal+digits combinations that a young
student can type. Usernames are derived from the name fields and stored on
the record; the review stage recomputes them whenever a name field changes.
Within one roster they are kept unique (see unique_username).

Pass a seed to get reproducible output (tests, demos).
"""

import random
import uuid

from onboarding.core.config import CredentialWords


class CredentialGenerator:
    """Generates ids, passwords, usernames and linking codes."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)
        self._seeded = seed is not None

    def generate_password(self) -> str:
        """Return e.g. "sunnyfox07"."""
        adjective = self._rng.choice(CredentialWords.ADJECTIVES)
        animal = self._rng.choice(CredentialWords.ANIMALS)
        return f"{adjective}{animal}{self._rng.randrange(100):02d}"

    def generate_id(self) -> str:
        """Return an opaque unique token.

        Seeded generators draw the token from their own RNG so runs are
        reproducible; unseeded ones use uuid4.
        """
        if self._seeded:
            return uuid.UUID(int=self._rng.getrandbits(128), version=4).hex
        return uuid.uuid4().hex

    @staticmethod
    def generate_username(first_name: str, last_initial: str) -> str:
        """Lower-cased first name + lower-cased initial ("Jane", "D" -> "janed").

        Returns an empty string when either part is missing.
        """
        first = first_name.strip()
        initial = last_initial.strip()
        if not first or not initial:
            return ""
        return f"{first.lower()}{initial[0].lower()}"

    def unique_username(self, first_name: str, last_initial: str, taken: set[str]) -> str:
        """generate_username, with a 3-digit suffix if the name is already taken.

        ``taken`` holds the usernames of the other records in the roster. Two
        "Jane D." records get "janed" and e.g. "janed417".
        """
        base = self.generate_username(first_name, last_initial)
        if not base or base not in taken:
            return base
        low, high = CredentialWords.USERNAME_SUFFIX_RANGE
        while True:
            candidate = f"{base}{self._rng.randrange(low, high)}"
            if candidate not in taken:
                return candidate

    def generate_linking_code(self) -> str:
        """Six-digit code for linking existing accounts."""
        digits = CredentialWords.LINKING_CODE_DIGITS
        low = 10 ** (digits - 1)
        return str(self._rng.randrange(low, 10 ** digits))

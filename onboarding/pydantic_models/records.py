"""Pydantic model for a roster record (one student account).

Records are mutable: the review stage edits them in place so every holder of
the roster sees the same values. Field rules are not enforced here; a record
may be temporarily invalid while the operator is editing it, and
core/validation.py decides whether it can be provisioned.
"""

from pydantic import BaseModel, Field


class Record(BaseModel):
    """One student's account data.

    Attributes:
        id: Opaque unique token. Immutable, unique within a roster.
        first_name: Letters, digits and hyphens.
        last_initial: A single letter.
        password: Letters and digits.
        username: Derived login name, recomputed when a name field is edited.
        is_existing: True for accounts linked rather than created.
        confidence: Extraction confidence (None for records added by hand).
    """

    id: str = Field(frozen=True, description="Opaque unique token")
    first_name: str = Field(default="", description="Student first name")
    last_initial: str = Field(default="", description="Single letter")
    password: str = Field(default="", description="Login secret")
    username: str | None = Field(default=None, description="Derived login name")
    is_existing: bool = Field(default=False, description="Linked existing account")
    confidence: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Per-record extraction confidence",
    )

    @property
    def display_name(self) -> str:
        """Name as printed on credential sheets: "Jane D."."""
        if self.last_initial:
            return f"{self.first_name} {self.last_initial}."
        return self.first_name

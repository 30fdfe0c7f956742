"""Review stage: operator edits to the roster before provisioning.

The stage works on the wizard's roster list by reference. Edits mutate the
Record objects in place and additions/removals mutate the list in place, so
navigating back to review (or forward to provisioning) always sees the same
data.

Username policy: the username is stored on the record and recomputed once,
here, whenever first name or last initial changes. Nothing else derives it.
A name that collides with another record gets a numeric suffix.
"""

from onboarding.core import (
    CredentialGenerator,
    error_messages,
    is_roster_valid,
    roster_errors,
    sanitize_first_name,
    sanitize_last_initial,
    sanitize_password,
)
from onboarding.core.validation import FieldError
from onboarding.pydantic_models import Record
from onboarding.stages.stage_base import StageRunner


class ReviewStage(StageRunner):
    """Edit operations on a shared roster."""

    name = "review"

    def __init__(self, roster: list[Record], credentials: CredentialGenerator | None = None, **kwargs):
        super().__init__(**kwargs)
        self.roster = roster
        self.credentials = credentials or CredentialGenerator()

    def find(self, record_id: str) -> Record:
        """Return the record with ``record_id``.

        Raises:
            KeyError: If no record has that id.
        """
        for record in self.roster:
            if record.id == record_id:
                return record
        raise KeyError(record_id)

    def add_record(self) -> Record:
        """Append a blank record with a fresh id and a generated password."""
        record = Record(
            id=self.credentials.generate_id(),
            password=self.credentials.generate_password(),
            username="",
        )
        self.roster.append(record)
        self.log("Added blank record", level="debug", total=len(self.roster))
        return record

    def update_record(
        self,
        record_id: str,
        first_name: str | None = None,
        last_initial: str | None = None,
        password: str | None = None,
    ) -> Record:
        """Apply field edits, filtered the way the review inputs filter keystrokes."""
        record = self.find(record_id)
        name_changed = False

        if first_name is not None:
            record.first_name = sanitize_first_name(first_name)
            name_changed = True
        if last_initial is not None:
            record.last_initial = sanitize_last_initial(last_initial)
            name_changed = True
        if password is not None:
            record.password = sanitize_password(password)

        if name_changed:
            taken = {r.username for r in self.roster if r is not record and r.username}
            record.username = self.credentials.unique_username(
                record.first_name, record.last_initial, taken
            )
        return record

    def regenerate_password(self, record_id: str) -> str:
        record = self.find(record_id)
        record.password = self.credentials.generate_password()
        return record.password

    def remove_record(self, record_id: str) -> Record:
        """Remove a record from the roster (in place)."""
        record = self.find(record_id)
        index = next(i for i, r in enumerate(self.roster) if r is record)
        del self.roster[index]
        self.log("Removed record", level="debug", remaining=len(self.roster))
        return record

    # Validation views

    def field_errors(self) -> list[dict[str, FieldError]]:
        return roster_errors(self.roster)

    def messages(self) -> list[str]:
        return error_messages(self.roster)

    @property
    def can_proceed(self) -> bool:
        return is_roster_valid(self.roster)

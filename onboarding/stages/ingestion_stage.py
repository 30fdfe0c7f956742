"""Ingestion stage: pasted text or an uploaded file → candidate records.

Steps:
1. Strip and truncate the input to the service limit (with a visible marker).
2. Ask the extraction service for students, per-record confidences, an
   overall confidence and a content classification.
3. Drop records below the acceptance threshold, give the survivors ids and
   credentials.
4. Decide whether the operator must confirm before the records go to review.

If the service fails, the local heuristic parser takes over and its records
always go through the confirmation gate. ``extract`` never raises: every
failure comes back as an ExtractionResult with errors and no records.
"""

from pathlib import Path

from onboarding.core import (
    ConfidenceThresholds,
    CredentialGenerator,
    ExtractionServiceError,
    FileInputError,
    IngestionConfig,
    ServiceFailureKind,
    capitalize_first_name,
    decode_upload,
    file_input_error,
    heuristic_extract,
    llm_api_error,
    read_upload,
    validation_error,
)
from onboarding.pydantic_models import (
    ContentType,
    ExtractionResponse,
    ExtractionResult,
    Record,
    ResultSource,
)
from onboarding.services import ExtractionService
from onboarding.stages.stage_base import StageRunner

NO_RECORDS_MESSAGE = "No student names found in the input text"
FALLBACK_WARNING = "AI parsing unavailable, using basic parsing"


def truncate_input(text: str, limit: int = IngestionConfig.MAX_INPUT_CHARS) -> tuple[str, bool]:
    """Cut ``text`` so that text + marker fits in ``limit`` characters.

    Returns:
        Tuple of (payload, was_truncated).
    """
    if len(text) <= limit:
        return text, False
    marker = IngestionConfig.TRUNCATION_MARKER
    return text[: max(limit - len(marker), 0)] + marker, True


def gate_reasons(
    content_type: ContentType,
    confidence: float,
    records: list[Record],
) -> list[str]:
    """Reasons the operator must confirm this result before review.

    An empty list means the result can go straight to review.
    """
    reasons = []
    if content_type != ContentType.STUDENT_LIST:
        reasons.append(f"The text does not look like a plain student list ({content_type.value})")
    if confidence < ConfidenceThresholds.OVERALL_REVIEW:
        reasons.append(f"Low overall confidence ({confidence:.2f})")
    if not records:
        reasons.append("No records were extracted")
    elif len(records) > IngestionConfig.MAX_PLAUSIBLE_RECORDS:
        reasons.append(
            f"{len(records)} names found, more than a typical class "
            f"({IngestionConfig.MAX_PLAUSIBLE_RECORDS})"
        )
    uncertain = [
        r for r in records
        if r.confidence is not None and r.confidence < ConfidenceThresholds.RECORD_REVIEW
    ]
    if uncertain:
        names = ", ".join(r.first_name for r in uncertain[:5])
        reasons.append(f"{len(uncertain)} uncertain name{'s' if len(uncertain) != 1 else ''}: {names}")
    return reasons


class IngestionPipeline(StageRunner):
    """Turns unstructured input into a confidence-scored ExtractionResult."""

    name = "ingestion"

    def __init__(
        self,
        service: ExtractionService,
        credentials: CredentialGenerator | None = None,
        use_fallback: bool = True,
        max_input_chars: int = IngestionConfig.MAX_INPUT_CHARS,
        **kwargs,
    ):
        """Initialize the stage.

        Args:
            service: Extraction service (LLM-backed or a stub).
            credentials: Generator for ids and passwords.
            use_fallback: Run the heuristic parser when the service fails.
            max_input_chars: Service input limit.
            **kwargs: logger / errors, passed to StageRunner.
        """
        super().__init__(**kwargs)
        self.service = service
        self.credentials = credentials or CredentialGenerator()
        self.use_fallback = use_fallback
        self.max_input_chars = max_input_chars

    async def extract(self, raw_text: str) -> ExtractionResult:
        """Run one ingestion attempt. Never raises."""
        text = raw_text.strip()
        if not text:
            return ExtractionResult(
                errors=[NO_RECORDS_MESSAGE],
                confidence=ConfidenceThresholds.FAILED,
                needs_validation=True,
            )

        payload, truncated = truncate_input(text, self.max_input_chars)
        warnings = []
        if truncated:
            warnings.append(
                f"The input was longer than {self.max_input_chars} characters and was "
                f"truncated; some names may be missing."
            )
            self.log("Input truncated", level="warning", original=len(text), sent=len(payload))

        self.start()
        try:
            response = await self.service.extract(payload, truncated=truncated)
        except ExtractionServiceError as e:
            self.record(llm_api_error(e, self.name))
            return self._fallback(text, e)
        except Exception as e:
            self.logger.error(f"[{self.name}] Extraction service raised unexpectedly", exc=e)
            failure = ExtractionServiceError(ServiceFailureKind.OTHER, str(e))
            self.record(llm_api_error(failure, self.name))
            return self._fallback(text, failure)
        finally:
            self.end()

        return self._from_response(response, warnings, truncated)

    async def extract_file(self, path: str | Path) -> ExtractionResult:
        """Read an uploaded file as text and extract from it. Never raises."""
        try:
            content = read_upload(path)
        except FileInputError as e:
            self.record(file_input_error(e, self.name))
            return ExtractionResult(errors=[str(e)], needs_validation=True)
        return await self.extract(content)

    async def extract_bytes(self, data: bytes, filename: str | None = None) -> ExtractionResult:
        """Same as extract_file for an in-memory upload."""
        try:
            content = decode_upload(data, filename)
        except FileInputError as e:
            self.record(file_input_error(e, self.name))
            return ExtractionResult(errors=[str(e)], needs_validation=True)
        return await self.extract(content)

    def new_record(
        self,
        first_name: str,
        last_name: str,
        confidence: float | None,
        taken: set[str] | None = None,
    ) -> Record:
        """Build a record with a fresh id and generated credentials.

        ``taken`` collects the usernames already handed out for this result;
        the new username is added to it.
        """
        first = capitalize_first_name(first_name.strip())
        initial = last_name.strip()[:1].upper()
        taken = taken if taken is not None else set()
        username = self.credentials.unique_username(first, initial, taken)
        if username:
            taken.add(username)
        return Record(
            id=self.credentials.generate_id(),
            first_name=first,
            last_initial=initial,
            password=self.credentials.generate_password(),
            username=username,
            confidence=confidence,
        )

    def _from_response(
        self,
        response: ExtractionResponse,
        warnings: list[str],
        truncated: bool,
    ) -> ExtractionResult:
        records: list[Record] = []
        usernames: set[str] = set()
        low_confidence = 0
        unnamed = 0
        for student in response.students:
            if student.confidence < ConfidenceThresholds.MIN_RECORD:
                low_confidence += 1
                continue
            first = student.first_name.strip()
            if not first:
                unnamed += 1
                continue
            records.append(self.new_record(first, student.last_name, student.confidence, usernames))

        warnings = warnings + list(response.warnings)
        if low_confidence:
            warnings.append(
                f"Skipped {low_confidence} low-confidence entr{'ies' if low_confidence != 1 else 'y'}"
            )
            self.record(validation_error(
                f"Dropped {low_confidence} records below confidence {ConfidenceThresholds.MIN_RECORD}",
                self.name,
            ))
        if unnamed:
            warnings.append(f"Skipped {unnamed} entr{'ies' if unnamed != 1 else 'y'} without a first name")

        errors = list(response.errors)
        if not records:
            errors.append(NO_RECORDS_MESSAGE)

        reasons = gate_reasons(response.content_type, response.confidence, records)
        if reasons and records:
            warnings.extend(reasons)

        self.logger.stage_result(
            f"{len(records)} records",
            confidence=f"{response.confidence:.2f}",
            content=response.content_type.value,
            gate="confirm" if reasons else "pass",
        )

        return ExtractionResult(
            records=records,
            errors=errors,
            warnings=warnings,
            content_type=response.content_type,
            confidence=response.confidence,
            needs_validation=bool(reasons),
            source=ResultSource.SERVICE,
            truncated=truncated,
        )

    def _fallback(self, text: str, failure: ExtractionServiceError) -> ExtractionResult:
        """Heuristic parse after a service failure, or a plain error result."""
        if not self.use_fallback:
            return ExtractionResult(
                errors=[failure.user_message],
                confidence=ConfidenceThresholds.FAILED,
                needs_validation=True,
            )

        parsed = heuristic_extract(text)
        usernames: set[str] = set()
        records = [
            self.new_record(name.first_name, name.last_name, ConfidenceThresholds.HEURISTIC_RECORD, usernames)
            for name in parsed.names
        ]
        self.log(
            "Fallback parsing",
            level="warning",
            records=len(records),
            unparsed=len(parsed.errors),
        )

        if not records:
            return ExtractionResult(
                errors=[failure.user_message, *parsed.errors, NO_RECORDS_MESSAGE],
                warnings=[FALLBACK_WARNING],
                confidence=ConfidenceThresholds.FAILED,
                needs_validation=True,
            )

        return ExtractionResult(
            records=records,
            errors=parsed.errors,
            warnings=[FALLBACK_WARNING, failure.user_message],
            content_type=ContentType.STUDENT_LIST,
            confidence=ConfidenceThresholds.FAILED,
            needs_validation=True,
            source=ResultSource.HEURISTIC,
        )

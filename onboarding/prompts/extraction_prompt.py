"""Extraction prompts: turn free-form text into a student list.

The response contract mirrors pydantic_models.ExtractionResponse. Every
student carries its own confidence and the whole response carries a content
classification, so the ingestion stage can gate low-quality results behind
operator confirmation instead of silently accepting them.
"""

EXTRACTION_SYSTEM_PROMPT = """You are a helpful assistant that extracts student names from text.
Always respond with valid JSON only."""


RESPONSE_FORMAT_EXAMPLE = """
{{
  "contentType": "student_list",
  "confidence": 0.95,
  "students": [
    {{"firstName": "John", "lastName": "Smith", "confidence": 0.98}},
    {{"firstName": "Jane", "lastName": "Doe", "confidence": 0.9}}
  ],
  "warnings": [],
  "errors": []
}}
"""


EXTRACTION_PROMPT_TEMPLATE = """Extract all student names from the text below. Be flexible - the input could be:
- A simple list of names
- Names in a table or structured format (class rosters, spreadsheets)
- Names mixed with other text (emails, notes)
- Different name formats ("John Smith", "Smith, John", "John")
- Names with titles, grades, or other information

Input text:
\"\"\"
{text}
\"\"\"

Return ONLY a JSON object in this exact format:
{response_format}

Rules:
- Extract only actual student names; ignore titles, grades, teacher names and other text
- If you can't determine a last name, use an empty string
- confidence (per student): 0.0-1.0, how sure you are this is a student's name
- confidence (overall): 0.0-1.0, how sure you are the list is complete and correct
- contentType:
  - "student_list": the text is mainly a list of student names
  - "mixed_content": student names mixed with substantial other content
  - "unlikely_student_content": the text does not look like it contains student names
- warnings: anything the teacher should double-check (ambiguous names, possible duplicates)
- errors: lines or fragments you could not interpret
- Do NOT merge duplicate names; two students can share a name
{truncation_note}"""


TRUNCATION_NOTE = """- The input was cut at a length limit; the list may be incomplete. Mention this in warnings."""


def build_extraction_prompt(text: str, truncated: bool = False) -> str:
    """Build the user prompt for one extraction call.

    Args:
        text: Input text, already truncated to the service limit.
        truncated: Whether the text was cut.

    Returns:
        Formatted prompt string.
    """
    return EXTRACTION_PROMPT_TEMPLATE.format(
        text=text,
        response_format=RESPONSE_FORMAT_EXAMPLE.format().strip(),
        truncation_note=TRUNCATION_NOTE if truncated else "",
    )

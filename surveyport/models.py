"""Canonical record shapes for surveys and questions.

Records are plain dicts keyed by camelCase field names, exactly as they are
persisted in the store document. This module names the fields and builds the
empty structures; it holds no behaviour beyond that.
"""

from __future__ import annotations

from typing import Any


# Fields shared by every translation of a question, seeded from the first row
QUESTION_SHARED_FIELDS = [
    "surveyId",
    "questionId",
    "questionType",
    "isDynamic",
    "isMandatory",
    "sourceQuestion",
    "textInputType",
    "textLimitCharacters",
    "maxValue",
    "minValue",
    "tableHeaderValue",
    "tableQuestionValue",
    "questionMediaLink",
    "questionMediaType",
    "mode",
]

# Defaults used when the seeding row leaves a shared field empty
QUESTION_DEFAULTS = {
    "sourceQuestion": "",
    "textInputType": "None",
    "textLimitCharacters": "",
    "maxValue": "",
    "minValue": "",
    "tableHeaderValue": "",
    "tableQuestionValue": "",
    "questionMediaLink": "",
    "questionMediaType": "None",
    "mode": "None",
}

TRANSLATION_FIELDS = [
    "questionDescription",
    "questionDescriptionOptional",
    "tableHeaderValue",
    "tableQuestionValue",
]

DEFAULT_LANGUAGE = "English"

MAX_OPTIONS = 20


def empty_snapshot() -> dict[str, list]:
    """Return a fresh, empty store snapshot."""
    return {"surveys": [], "questions": []}


def question_key(record: dict[str, Any]) -> tuple[str, str, str]:
    """Composite identity of a question: (surveyId, questionId, questionType)."""
    return (
        _key_part(record.get("surveyId")),
        _key_part(record.get("questionId")),
        _key_part(record.get("questionType")),
    )


def _key_part(value: Any) -> str:
    return "" if value is None else str(value)


def is_blank(value: Any) -> bool:
    """True for None and for strings that are empty after trimming."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


# Record identity fields, always stored as text (a numeric cell 101 is "101")
IDENTIFIER_FIELDS = ("surveyId", "questionId", "questionType", "sourceQuestion")


def as_identifier(value: Any) -> Any:
    """Text form of an identifier cell (101 -> "101"); blanks pass through."""
    if is_blank(value):
        return value
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def normalize_identifiers(record: dict[str, Any]) -> dict[str, Any]:
    """Coerce the identifier fields of ``record`` to text, in place."""
    for field_name in IDENTIFIER_FIELDS:
        if field_name in record:
            record[field_name] = as_identifier(record[field_name])
    return record

"""Column vocabulary and header mapping for Survey Master / Question Master data.

One ordered vocabulary of (field, display header) pairs per record kind drives
both directions: imports normalize arbitrary header spellings and look them up
here, exports write the display headers back out.
"""

from __future__ import annotations

import re
from typing import Any

from surveyport.models import MAX_OPTIONS, is_blank


SURVEY = "survey"
QUESTION = "question"

SURVEY_COLUMNS: list[tuple[str, str]] = [
    ("surveyId", "Survey ID"),
    ("surveyName", "Survey Name"),
    ("surveyDescription", "Survey Description"),
    ("availableMediums", "Available Mediums"),
    ("hierarchicalAccessLevel", "Hierarchical Access Level"),
    ("public", "Public"),
    ("inSchool", "In School"),
    ("acceptMultipleEntries", "Accept Multiple Entries"),
    ("launchDate", "Launch Date"),
    ("closeDate", "Close Date"),
    ("mode", "Mode"),
    ("visibleOnReportBot", "Visible on Report Bot"),
    ("isActive", "Is Active?"),
    ("downloadResponse", "Download Response"),
    ("geoFencing", "Geo Fencing"),
    ("geoTagging", "Geo Tagging"),
    ("testSurvey", "Test Survey"),
]

QUESTION_COLUMNS: list[tuple[str, str]] = [
    ("surveyId", "Survey ID"),
    ("medium", "Medium"),
    ("mediumInEnglish", "Medium in English"),
    ("questionId", "Question ID"),
    ("questionType", "Question Type"),
    ("isDynamic", "IsDynamic"),
    ("questionDescription", "Question Description"),
    ("questionDescriptionOptional", "Question Description Optional"),
    ("maxValue", "Max Value"),
    ("minValue", "Min Value"),
    ("isMandatory", "Is Mandatory"),
    ("tableHeaderValue", "Table Header Value"),
    ("tableQuestionValue", "Table Question Value"),
    ("sourceQuestion", "Source Question"),
    ("textInputType", "Text Input Type"),
    ("textLimitCharacters", "Text Limit Characters"),
    ("mode", "Mode"),
    ("questionMediaLink", "Question Media Link"),
    ("questionMediaType", "Question Media Type"),
]

# Legacy spellings seen in older templates (normalized form -> field)
_EXTRA_SURVEY_ALIASES = {
    "surveytitle": "surveyName",
    "mediums": "availableMediums",
    "active": "isActive",
}
_EXTRA_QUESTION_ALIASES = {
    "language": "medium",
    "languageinenglish": "mediumInEnglish",
    "parentquestion": "sourceQuestion",
    "mandatory": "isMandatory",
    "dynamic": "isDynamic",
}

_OPTION_RE = re.compile(r"^option(\d+)(inenglish|children)?$")
_DESCRIPTION_PREFIX = "questiondescription"
_DESCRIPTION_OPTIONAL = "questiondescriptionoptional"


def normalize_header_key(value: Any) -> str:
    """Normalize a header for lookup (lowercase, no spaces/underscores/punctuation)."""
    if value is None:
        return ""
    s = re.sub(r"[\s_]+", "", str(value).strip().lower())
    return re.sub(r"[^a-z0-9]", "", s)


def _build_lookup(columns: list[tuple[str, str]], extra: dict[str, str]) -> dict[str, str]:
    lookup = {normalize_header_key(field): field for field, _ in columns}
    lookup.update({normalize_header_key(header): field for field, header in columns})
    lookup.update(extra)
    return lookup


SURVEY_LOOKUP = _build_lookup(SURVEY_COLUMNS, _EXTRA_SURVEY_ALIASES)
QUESTION_LOOKUP = _build_lookup(QUESTION_COLUMNS, _EXTRA_QUESTION_ALIASES)


def map_survey_column(column_name: Any) -> str:
    """Map a Survey Master header to its canonical field name."""
    return SURVEY_LOOKUP.get(normalize_header_key(column_name), column_name)


def map_question_column(column_name: Any) -> str:
    """Map a Question Master header to its canonical field name.

    ``Option_3``, ``option 3 in English`` and ``Option3Children`` map to the
    indexed option fields for indices 1..MAX_OPTIONS. Any header starting with
    "question description" other than the optional one maps to
    ``questionDescription``.
    """
    normalized = normalize_header_key(column_name)

    m = _OPTION_RE.match(normalized)
    if m and 1 <= int(m.group(1)) <= MAX_OPTIONS:
        index = int(m.group(1))
        suffix = m.group(2)
        if suffix == "inenglish":
            return f"option{index}InEnglish"
        if suffix == "children":
            return f"option{index}Children"
        return f"option{index}"

    if normalized.startswith(_DESCRIPTION_PREFIX) and normalized != _DESCRIPTION_OPTIONAL:
        return "questionDescription"

    return QUESTION_LOOKUP.get(normalized, column_name)


def map_row(row: dict[str, Any], kind: str) -> dict[str, Any]:
    """
    Rename the headers of one raw row to canonical field names.

    When several headers land on the same field, an empty value never clears
    a value already taken from an earlier column.
    """
    mapper = map_survey_column if kind == SURVEY else map_question_column
    mapped: dict[str, Any] = {}
    for header, value in row.items():
        field = mapper(header)
        if field in mapped and is_blank(value):
            continue
        mapped[field] = value
    return mapped


def option_columns() -> list[tuple[str, str]]:
    """Display headers for the indexed option columns, in export order."""
    columns: list[tuple[str, str]] = []
    for i in range(1, MAX_OPTIONS + 1):
        columns.append((f"option{i}", f"Option_{i}"))
        columns.append((f"option{i}InEnglish", f"Option_{i}_in_English"))
        columns.append((f"option{i}Children", f"Option_{i}Children"))
    return columns

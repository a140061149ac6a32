"""Turn mapped rows into canonical survey and question records.

Question Master data has one row per question per language medium. Rows that
share (surveyId, questionId, questionType) become one record whose
``translations`` maps each language to its own bundle; the primary language's
bundle is then copied onto the record's top-level fields.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

from surveyport.models import (
    DEFAULT_LANGUAGE,
    MAX_OPTIONS,
    QUESTION_DEFAULTS,
    QUESTION_SHARED_FIELDS,
    TRANSLATION_FIELDS,
    is_blank,
    normalize_identifiers,
    question_key,
)

from .columns import QUESTION, SURVEY, map_row
from .excel_base import normalize_cell_value

_MEDIUM_SPLIT_RE = re.compile(r"[,;|\n]")


def _first_present(row: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = normalize_cell_value(row.get(key))
        if not is_blank(value):
            return value
    return None


def split_mediums(value: Any) -> list[str]:
    """'English, Hindi' -> ['English', 'Hindi'] (order kept, blanks dropped)."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [str(v).strip() for v in value]
    else:
        items = [part.strip() for part in _MEDIUM_SPLIT_RE.split(str(value))]
    return [item for item in items if item]


def build_surveys(rows: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """One survey record per row; rows without a surveyId are skipped.

    Identifier fields are stored as text whatever the cell type was.
    """
    surveys = []
    for raw in rows:
        survey = normalize_identifiers(map_row(raw, SURVEY))
        if is_blank(survey.get("surveyId")):
            continue
        if "availableMediums" in survey:
            survey["availableMediums"] = split_mediums(survey["availableMediums"])
        surveys.append(survey)
    return surveys


def parse_options(row: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Collect the indexed option columns of one row, in index order.

    An option exists only when its text column is non-empty, so gaps in the
    numbering do not produce blank entries.
    """
    options = []
    for i in range(1, MAX_OPTIONS + 1):
        text = _first_present(row, f"option{i}", f"Option_{i}")
        if text is None:
            continue
        in_english = _first_present(row, f"option{i}InEnglish", f"Option_{i}_in_English")
        children = _first_present(row, f"option{i}Children", f"Option_{i}Children")
        options.append(
            {
                "text": text,
                "textInEnglish": in_english if in_english is not None else text,
                "children": children if children is not None else "",
            }
        )
    return options


def row_language(row: dict[str, Any]) -> str:
    """Language of a question row: mediumInEnglish, else medium, else English."""
    language = _first_present(row, "mediumInEnglish", "medium")
    return str(language) if language is not None else DEFAULT_LANGUAGE


def translation_bundle(row: dict[str, Any]) -> dict[str, Any]:
    bundle: dict[str, Any] = {}
    for field_name in TRANSLATION_FIELDS:
        value = row.get(field_name)
        bundle[field_name] = "" if is_blank(value) else value
    bundle["options"] = parse_options(row)
    return bundle


def upsert_translation(
    translations: dict[str, dict[str, Any]], language: str, bundle: dict[str, Any]
) -> None:
    """Set the bundle for ``language``.

    A bundle already present for the same language is replaced as a whole,
    not merged: within one import the last row for a language wins. A new
    language is appended after the existing ones.
    """
    translations[language] = bundle


def _seed_question(row: dict[str, Any]) -> dict[str, Any]:
    question: dict[str, Any] = {}
    for field_name in QUESTION_SHARED_FIELDS:
        value = row.get(field_name)
        if is_blank(value) and field_name in QUESTION_DEFAULTS:
            value = QUESTION_DEFAULTS[field_name]
        question[field_name] = value
    question["translations"] = {}
    return question


def primary_language(translations: dict[str, Any]) -> str:
    """English when present, else the first language seen."""
    if DEFAULT_LANGUAGE in translations:
        return DEFAULT_LANGUAGE
    return next(iter(translations), DEFAULT_LANGUAGE)


def apply_primary_translation(question: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``question`` with the primary bundle on its top level."""
    translations = question.get("translations") or {}
    language = primary_language(translations)
    primary = translations.get(language) or {}

    projected = dict(question)
    projected["medium"] = question.get("medium") or language
    for field_name in TRANSLATION_FIELDS:
        projected[field_name] = primary.get(field_name) or question.get(field_name) or ""
    projected["options"] = primary.get("options") or question.get("options") or []
    return projected


def build_questions(rows: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Consolidate question rows into canonical multi-translation records.

    Rows missing surveyId or questionId are skipped. Identifier fields
    (surveyId, questionId, questionType, sourceQuestion) are stored as text.
    The first row seen for a key seeds the shared fields; every row adds or
    replaces the translation for its language. Records come out in
    first-seen order.
    """
    by_key: dict[tuple[str, str, str], dict[str, Any]] = {}
    for raw in rows:
        row = normalize_identifiers(map_row(raw, QUESTION))
        if is_blank(row.get("surveyId")) or is_blank(row.get("questionId")):
            continue

        key = question_key(row)
        if key not in by_key:
            by_key[key] = _seed_question(row)

        upsert_translation(by_key[key]["translations"], row_language(row), translation_bundle(row))

    return [apply_primary_translation(q) for q in by_key.values()]

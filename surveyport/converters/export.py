"""Render stored records back into a Survey Master / Question Master workbook.

The inverse of the import direction: one survey row, and one question row per
question per translation, written under the same display headers the column
mapper accepts.
"""

from __future__ import annotations

import io
from typing import Any

import pandas as pd

from .columns import QUESTION_COLUMNS, SURVEY_COLUMNS, option_columns
from .workbook import QUESTION_SHEET, SURVEY_SHEET


def _cell(value: Any) -> Any:
    return "" if value is None else value


def survey_row(survey: dict[str, Any]) -> dict[str, Any]:
    row = {}
    for field_name, header in SURVEY_COLUMNS:
        value = survey.get(field_name)
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        row[header] = _cell(value)
    return row


def question_rows(question: dict[str, Any]) -> list[dict[str, Any]]:
    """One row per translation; a record without translations yields one row."""
    translations = question.get("translations") or {
        question.get("medium") or "English": question
    }

    rows = []
    for language, bundle in translations.items():
        values = dict(question)
        values.update(bundle)
        values["medium"] = language
        values["mediumInEnglish"] = language

        row = {header: _cell(values.get(field_name)) for field_name, header in QUESTION_COLUMNS}

        options = bundle.get("options") or []
        for _, header in option_columns():
            row[header] = ""
        for i, option in enumerate(options, start=1):
            row[f"Option_{i}"] = _cell(option.get("text"))
            row[f"Option_{i}_in_English"] = _cell(option.get("textInEnglish"))
            row[f"Option_{i}Children"] = _cell(option.get("children"))
        rows.append(row)
    return rows


def render_workbook(survey: dict[str, Any], questions: list[dict[str, Any]]) -> bytes:
    """
    Build the export workbook for one survey.

    Args:
        survey: Stored survey record
        questions: Stored question records of that survey

    Returns:
        The .xlsx file content
    """
    survey_df = pd.DataFrame([survey_row(survey)], columns=[h for _, h in SURVEY_COLUMNS])

    q_headers = [h for _, h in QUESTION_COLUMNS] + [h for _, h in option_columns()]
    q_rows = [row for q in questions for row in question_rows(q)]
    question_df = pd.DataFrame(q_rows, columns=q_headers)

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        survey_df.to_excel(writer, sheet_name=SURVEY_SHEET, index=False)
        question_df.to_excel(writer, sheet_name=QUESTION_SHEET, index=False)
    return buffer.getvalue()

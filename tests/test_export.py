"""Tests for rendering stored records back into a workbook."""

import io

from openpyxl import load_workbook

from builders import question_row, survey_row
from surveyport.converters.consolidate import build_questions, build_surveys
from surveyport.converters.export import question_rows, render_workbook, survey_row as export_survey_row
from surveyport.converters.workbook import read_sheet_rows


def _bilingual_question():
    rows = [
        question_row("S1", "Q1", "English"),
        question_row(
            "S1",
            "Q1",
            "Hindi",
            **{
                "Question Description": "क्या स्कूल में पुस्तकालय है?",
                "Option_1": "हाँ",
                "Option_1_in_English": "Yes",
                "Option_2": "नहीं",
                "Option_2_in_English": "No",
            },
        ),
    ]
    return build_questions(rows)[0]


def test_survey_row_joins_mediums():
    survey = build_surveys([survey_row("S1")])[0]
    row = export_survey_row(survey)
    assert row["Survey ID"] == "S1"
    assert row["Available Mediums"] == "English, Hindi"
    assert row["Geo Fencing"] == ""


def test_one_row_per_translation():
    rows = question_rows(_bilingual_question())
    assert [r["Medium"] for r in rows] == ["English", "Hindi"]
    assert rows[1]["Option_1"] == "हाँ"
    assert rows[1]["Option_1_in_English"] == "Yes"
    assert rows[1]["Option_3"] == ""


def test_question_without_translations_yields_one_row():
    question = {
        "surveyId": "S1",
        "questionId": "Q1",
        "questionType": "Text Response",
        "questionDescription": "Name?",
        "options": [],
    }
    rows = question_rows(question)
    assert len(rows) == 1
    assert rows[0]["Medium"] == "English"
    assert rows[0]["Question Description"] == "Name?"


def test_rendered_workbook_reimports_to_same_translations():
    survey = build_surveys([survey_row("S1")])[0]
    question = _bilingual_question()

    wb = load_workbook(io.BytesIO(render_workbook(survey, [question])), rich_text=True)
    survey_rows = read_sheet_rows(wb["Survey Master"])
    q_rows = read_sheet_rows(wb["Question Master"])

    assert build_surveys(survey_rows)[0]["availableMediums"] == ["English", "Hindi"]
    reimported = build_questions(q_rows)
    assert len(reimported) == 1
    assert reimported[0]["translations"] == question["translations"]

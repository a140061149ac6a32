"""
Validation rule tables for surveys and questions.

Everything the validator knows about question types lives in
``QUESTION_TYPE_RULES``: adding a question type means adding an entry here.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern, Tuple


YES_NO_VALUES = ("Yes", "No")

MODES = ("None", "New Data", "Correction", "Delete Data")

TEXT_INPUT_TYPES = ("None", "Numeric", "Alphanumeric", "Alphabets")

QUESTION_MEDIA_TYPES = ("None", "Image", "Video", "Audio")

SURVEY_YES_NO_FIELDS = (
    "public",
    "inSchool",
    "acceptMultipleEntries",
    "visibleOnReportBot",
    "isActive",
    "downloadResponse",
    "geoFencing",
    "geoTagging",
    "testSurvey",
)

SURVEY_ID_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
SURVEY_NAME_MAX_LENGTH = 99
SURVEY_DESCRIPTION_MAX_LENGTH = 256

# DD/MM/YYYY HH:MM:SS
DATE_TIME_PATTERN = re.compile(r"^(\d{2})/(\d{2})/(\d{4}) (\d{2}):(\d{2}):(\d{2})$")

# Q1.1, Q1.2, Q12.3.1 ...
CHILD_QUESTION_PATTERN = re.compile(r"^Q\d+(\.\d+)+$")


@dataclass(frozen=True)
class TableValueRule:
    """Grammar and size limits for tableQuestionValue ("key:text" per line)."""
    pattern: Pattern = re.compile(r"^[A-Za-z0-9]+:[^\n]+(\n[A-Za-z0-9]+:[^\n]+)*$")
    max_questions: int = 20
    max_chars_per_question: int = 100


@dataclass(frozen=True)
class QuestionTypeRule:
    """Constraints attached to one question type.

    ``required`` lists record fields that must be non-empty; the pseudo-field
    "options" means at least one option. ``text_input_type`` and
    ``question_media_type`` pin those fields to one value when set.
    """
    required: Tuple[str, ...] = ()
    text_input_type: Optional[str] = None
    question_media_type: Optional[str] = None
    min_options: Optional[int] = None
    max_options: Optional[int] = None
    table_value: Optional[TableValueRule] = None


_TABLE = TableValueRule()

QUESTION_TYPE_RULES: Dict[str, QuestionTypeRule] = {
    "Multiple Choice Single Select": QuestionTypeRule(
        required=("options",), text_input_type="None", min_options=2, max_options=20,
    ),
    "Multiple Choice Multi Select": QuestionTypeRule(
        required=("options",), text_input_type="None", min_options=2, max_options=20,
    ),
    "Drop Down": QuestionTypeRule(
        required=("options",), text_input_type="None", min_options=1, max_options=20,
    ),
    "Likert Scale": QuestionTypeRule(
        required=("options",), text_input_type="None", min_options=3, max_options=10,
    ),
    "Text Response": QuestionTypeRule(),
    "Numeric Response": QuestionTypeRule(
        required=("maxValue", "minValue"), text_input_type="Numeric",
    ),
    "Calendar": QuestionTypeRule(text_input_type="None"),
    "Image Upload": QuestionTypeRule(text_input_type="None"),
    "Video Upload": QuestionTypeRule(text_input_type="None"),
    "Voice Response": QuestionTypeRule(text_input_type="None"),
    "Tabular Text Input": QuestionTypeRule(
        required=("tableHeaderValue", "tableQuestionValue"),
        question_media_type="None",
        table_value=_TABLE,
    ),
    "Tabular Drop Down": QuestionTypeRule(
        required=("tableHeaderValue", "tableQuestionValue", "options"),
        text_input_type="None",
        question_media_type="None",
        min_options=1,
        max_options=20,
        table_value=_TABLE,
    ),
    "Tabular Check Box": QuestionTypeRule(
        required=("tableHeaderValue", "tableQuestionValue", "options"),
        text_input_type="None",
        question_media_type="None",
        min_options=1,
        max_options=20,
        table_value=_TABLE,
    ),
}

QUESTION_TYPES = tuple(QUESTION_TYPE_RULES)

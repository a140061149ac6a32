"""
Record validation for surveys and questions.

Both entry points are pure: they never mutate their input and report every
violated rule, not just the first, as a list of human-readable messages.
"""

from typing import Any, Dict, List, Optional, Sequence

from surveyport.models import is_blank
from surveyport.rules import (
    CHILD_QUESTION_PATTERN,
    DATE_TIME_PATTERN,
    MODES,
    QUESTION_MEDIA_TYPES,
    QUESTION_TYPE_RULES,
    QUESTION_TYPES,
    SURVEY_DESCRIPTION_MAX_LENGTH,
    SURVEY_ID_PATTERN,
    SURVEY_NAME_MAX_LENGTH,
    SURVEY_YES_NO_FIELDS,
    TEXT_INPUT_TYPES,
    YES_NO_VALUES,
    QuestionTypeRule,
    TableValueRule,
)


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def is_valid_date(value: Any) -> bool:
    """
    Check a DD/MM/YYYY HH:MM:SS timestamp.

    Only field ranges are checked (month 1-12, day 1-31, hour 0-23,
    minute/second 0-59), so 31/02/2024 is accepted.
    """
    m = DATE_TIME_PATTERN.match(_text(value))
    if not m:
        return False
    day, month, _year, hours, minutes, seconds = (int(g) for g in m.groups())
    if month < 1 or month > 12:
        return False
    if day < 1 or day > 31:
        return False
    if hours > 23 or minutes > 59 or seconds > 59:
        return False
    return True


def validate_survey(survey: Dict[str, Any]) -> List[str]:
    """
    Validate one survey record.

    Args:
        survey: Canonical survey record

    Returns:
        List of error messages (empty when valid)
    """
    errors: List[str] = []

    survey_id = _text(survey.get("surveyId"))
    if not survey_id:
        errors.append("Survey ID is required")
    elif not SURVEY_ID_PATTERN.match(survey_id):
        errors.append(
            "Survey ID must contain only alphanumeric characters and underscores (no spaces)"
        )

    name = _text(survey.get("surveyName"))
    if not name:
        errors.append("Survey Name is required")
    elif len(name) > SURVEY_NAME_MAX_LENGTH:
        errors.append(f"Survey Name must not exceed {SURVEY_NAME_MAX_LENGTH} characters")

    description = _text(survey.get("surveyDescription"))
    if not description:
        errors.append("Survey Description is required")
    elif len(description) > SURVEY_DESCRIPTION_MAX_LENGTH:
        errors.append(
            f"Survey Description must not exceed {SURVEY_DESCRIPTION_MAX_LENGTH} characters"
        )

    for field_name in SURVEY_YES_NO_FIELDS:
        value = survey.get(field_name)
        if not is_blank(value) and value not in YES_NO_VALUES:
            errors.append(f"{field_name} must be 'Yes' or 'No'")

    mode = survey.get("mode")
    if not is_blank(mode) and mode not in MODES:
        errors.append(f"Mode must be one of: {', '.join(MODES)}")

    if not is_blank(survey.get("launchDate")) and not is_valid_date(survey.get("launchDate")):
        errors.append("Launch Date must be in DD/MM/YYYY HH:MM:SS format")
    if not is_blank(survey.get("closeDate")) and not is_valid_date(survey.get("closeDate")):
        errors.append("Close Date must be in DD/MM/YYYY HH:MM:SS format")

    return errors


def _check_table_value(value: str, rule: TableValueRule) -> List[str]:
    errors = []
    value = value.replace("\r\n", "\n")
    if not rule.pattern.match(value):
        errors.append("tableQuestionValue must be in format: a:Question 1\\nb:Question 2")

    lines = value.split("\n")
    if len(lines) > rule.max_questions:
        errors.append(
            f"Maximum {rule.max_questions} questions allowed in tableQuestionValue"
        )

    for idx, line in enumerate(lines, start=1):
        _key, sep, text = line.partition(":")
        if sep and len(text.strip()) > rule.max_chars_per_question:
            errors.append(
                f"Question {idx} in tableQuestionValue exceeds "
                f"{rule.max_chars_per_question} characters"
            )
    return errors


def _check_type_rule(question: Dict[str, Any], question_type: str, rule: QuestionTypeRule) -> List[str]:
    errors = []
    options = question.get("options") or []

    for field_name in rule.required:
        if field_name == "options":
            if not options:
                errors.append(f"{question_type} requires at least one option")
        elif is_blank(question.get(field_name)):
            errors.append(f"{field_name} is required for {question_type}")

    if rule.text_input_type is not None and question.get("textInputType") != rule.text_input_type:
        errors.append(f"textInputType must be '{rule.text_input_type}' for {question_type}")

    if (
        rule.question_media_type is not None
        and question.get("questionMediaType") != rule.question_media_type
    ):
        errors.append(
            f"questionMediaType must be '{rule.question_media_type}' for {question_type}"
        )

    if options:
        if rule.max_options is not None and len(options) > rule.max_options:
            errors.append(f"Maximum {rule.max_options} options allowed for {question_type}")
        if rule.min_options is not None and len(options) < rule.min_options:
            errors.append(f"Minimum {rule.min_options} options required for {question_type}")

    table_value = _text(question.get("tableQuestionValue"))
    if rule.table_value is not None and table_value:
        errors.extend(_check_table_value(table_value, rule.table_value))

    return errors


def _source_question_exists(
    question: Dict[str, Any], all_questions: Sequence[Dict[str, Any]]
) -> bool:
    survey_id = _text(question.get("surveyId"))
    source = _text(question.get("sourceQuestion"))
    return any(
        _text(q.get("surveyId")) == survey_id and _text(q.get("questionId")) == source
        for q in all_questions
    )


def validate_question(
    question: Dict[str, Any],
    all_surveys: Optional[Sequence[Dict[str, Any]]] = None,
    all_questions: Optional[Sequence[Dict[str, Any]]] = None,
    verify_source_questions: bool = False,
) -> List[str]:
    """
    Validate one canonical question record.

    Type-specific constraints come from QUESTION_TYPE_RULES; the enums for
    textInputType, questionMediaType, isMandatory and isDynamic are checked
    for every type.

    Args:
        question: Canonical question record (primary projection applied)
        all_surveys: Persisted plus incoming surveys
        all_questions: Persisted plus incoming questions
        verify_source_questions: Also require a child's sourceQuestion to
            exist among ``all_questions`` of the same survey

    Returns:
        List of error messages (empty when valid)
    """
    errors: List[str] = []
    question_type = question.get("questionType")
    question_id = _text(question.get("questionId"))

    if not question_id:
        errors.append("Question ID is required")
    if question_type not in QUESTION_TYPES:
        errors.append(f"Question Type must be one of: {', '.join(QUESTION_TYPES)}")
    if is_blank(question.get("questionDescription")):
        errors.append("Question Description is required")

    if "." in question_id:
        if not CHILD_QUESTION_PATTERN.match(question_id):
            errors.append("Child Question ID must be in format Q1.1, Q1.2, etc.")
        if is_blank(question.get("sourceQuestion")):
            errors.append("Child questions must have a Source Question")
        elif verify_source_questions and not _source_question_exists(question, all_questions or []):
            errors.append(
                f"Source Question '{_text(question.get('sourceQuestion'))}' does not exist in survey "
                f"'{_text(question.get('surveyId'))}'"
            )

    rule = QUESTION_TYPE_RULES.get(question_type)
    if rule is not None:
        errors.extend(_check_type_rule(question, question_type, rule))

    text_input_type = question.get("textInputType")
    if not is_blank(text_input_type) and text_input_type not in TEXT_INPUT_TYPES:
        errors.append(f"Text_input_type must be one of: {', '.join(TEXT_INPUT_TYPES)}")

    media_type = question.get("questionMediaType")
    if not is_blank(media_type) and media_type not in QUESTION_MEDIA_TYPES:
        errors.append(f"Question_Media_Type must be one of: {', '.join(QUESTION_MEDIA_TYPES)}")

    if not is_blank(question.get("isMandatory")) and question.get("isMandatory") not in YES_NO_VALUES:
        errors.append("Is Mandatory must be 'Yes' or 'No'")
    if not is_blank(question.get("isDynamic")) and question.get("isDynamic") not in YES_NO_VALUES:
        errors.append("IsDynamic must be 'Yes' or 'No'")

    return errors

"""
Import transaction for Survey Master / Question Master files.

One call runs the whole pipeline for one uploaded file:

    parse -> duplicate check -> validate -> commit

and either commits every incoming record with a single store write or raises
ImportRejected without touching the store. The uploaded file is deleted on
every exit path.

Usage:
    service = ImportService(JsonStore("data/store.json"))
    result = service.import_file("uploads/batch.xlsx", overwrite=True)
"""

import copy
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from surveyport.config import SurveyportConfig
from surveyport.converters.columns import QUESTION, SURVEY
from surveyport.converters.consolidate import build_questions, build_surveys
from surveyport.converters.csv import TEXT_EXTENSIONS, infer_sheet_type, read_delimited
from surveyport.converters.workbook import WORKBOOK_EXTENSIONS, read_workbook
from surveyport.issues import ImportRejected, RecordError, error, summarize_record_errors
from surveyport.store import JsonStore
from surveyport.validator import validate_question, validate_survey

logger = logging.getLogger(__name__)

DUPLICATE_SURVEY_MESSAGE = "Survey ID already exists in the system"
REPEATED_SURVEY_MESSAGE = "Survey ID appears more than once in this import"


@dataclass
class ParsedImport:
    """Candidate records parsed from one file."""
    surveys: List[Dict[str, Any]] = field(default_factory=list)
    questions: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class ImportResult:
    surveys: List[Dict[str, Any]]
    questions_imported: int
    overwrite: bool

    @property
    def surveys_imported(self) -> int:
        return len(self.surveys)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": "Import successful",
            "overwrite": self.overwrite,
            "surveysImported": self.surveys_imported,
            "questionsImported": self.questions_imported,
            "surveys": self.surveys,
        }


def parse_import_file(
    path, filename: Optional[str] = None, sheet_type: Optional[str] = None
) -> ParsedImport:
    """
    Parse a workbook or delimited text file into candidate records.

    Args:
        path: File on disk
        filename: Original upload name (decides the format); defaults to path
        sheet_type: For text files, "survey", "question" or "both"/None to infer

    Raises:
        ImportRejected: Unsupported format, missing sheets, or unknown text kind
    """
    name = filename or os.path.basename(str(path))
    ext = Path(name).suffix.lower()

    if ext in WORKBOOK_EXTENSIONS:
        try:
            rows = read_workbook(path)
        except ValueError as e:
            raise ImportRejected(error("IMPORT001", message=str(e))) from e
        parsed = ParsedImport(
            surveys=build_surveys(rows.survey_rows),
            questions=build_questions(rows.question_rows),
        )
        if not parsed.surveys or not parsed.questions:
            raise ImportRejected(
                error(
                    "IMPORT002",
                    details={
                        "hasSurveyMaster": bool(parsed.surveys),
                        "hasQuestionMaster": bool(parsed.questions),
                    },
                )
            )
        return parsed

    if ext in TEXT_EXTENSIONS:
        try:
            rows = read_delimited(path, sep=TEXT_EXTENSIONS[ext])
        except ValueError as e:
            raise ImportRejected(error("IMPORT003", message=str(e))) from e
        kind = infer_sheet_type(rows, sheet_type)
        parsed = ParsedImport()
        if kind == SURVEY:
            parsed.surveys = build_surveys(rows)
        elif kind == QUESTION:
            parsed.questions = build_questions(rows)
        if not parsed.surveys and not parsed.questions:
            raise ImportRejected(error("IMPORT003"))
        return parsed

    raise ImportRejected(error("IMPORT001", details={"extension": ext or None}))


def _survey_ids(records: List[Dict[str, Any]]) -> Set[Any]:
    return {r.get("surveyId") for r in records}


class ImportService:
    """Runs import transactions against one store."""

    def __init__(self, store: JsonStore, config: Optional[SurveyportConfig] = None):
        self.store = store
        self.config = config or SurveyportConfig()

    def import_file(
        self,
        path,
        filename: Optional[str] = None,
        overwrite: bool = False,
        sheet_type: Optional[str] = None,
    ) -> ImportResult:
        """
        Import one uploaded file; the file is deleted afterwards in all cases.

        Args:
            path: Staged upload on disk
            filename: Original upload name
            overwrite: Replace surveys (and all their questions) whose IDs
                already exist instead of rejecting the import
            sheet_type: Declared kind for text files

        Returns:
            ImportResult describing the committed records

        Raises:
            ImportRejected: The file or its records were refused
            StoreError: The store could not be read or written
        """
        try:
            parsed = parse_import_file(path, filename=filename, sheet_type=sheet_type)
            return self.commit(parsed, overwrite=overwrite)
        finally:
            self._discard_upload(path)

    def commit(self, parsed: ParsedImport, overwrite: bool = False) -> ImportResult:
        """Duplicate-check, validate and persist parsed records."""
        snapshot = self.store.read()
        working = copy.deepcopy(snapshot)

        incoming_ids = _survey_ids(parsed.surveys)
        existing_ids = _survey_ids(working["surveys"])
        overlap = incoming_ids & existing_ids

        if overlap and not overwrite:
            logger.info("Import rejected: duplicate survey IDs %s", sorted(overlap, key=str))
            raise ImportRejected(
                error(
                    "IMPORT101",
                    details=[{"field": "surveyId", "duplicates": sorted(overlap, key=str)}],
                ),
                record_errors=[
                    RecordError("survey", idx, s.get("surveyId"), [DUPLICATE_SURVEY_MESSAGE])
                    for idx, s in enumerate(parsed.surveys, start=1)
                    if s.get("surveyId") in overlap
                ],
                surveys_count=len(parsed.surveys),
                questions_count=len(parsed.questions),
            )

        if overlap:
            working["surveys"] = [s for s in working["surveys"] if s.get("surveyId") not in overlap]
            working["questions"] = [
                q for q in working["questions"] if q.get("surveyId") not in overlap
            ]

        record_errors = self.validate(parsed, working)
        if record_errors:
            summary = summarize_record_errors(record_errors)
            logger.info(
                "Import rejected: %d survey(s) and %d question(s) failed validation",
                summary["surveys"],
                summary["questions"],
            )
            raise ImportRejected(
                error("IMPORT201", details=summary),
                record_errors=record_errors,
                surveys_count=len(parsed.surveys),
                questions_count=len(parsed.questions),
            )

        working["surveys"].extend(parsed.surveys)
        working["questions"].extend(parsed.questions)
        self.store.write(working)

        logger.info(
            "Imported %d survey(s) and %d question(s)%s",
            len(parsed.surveys),
            len(parsed.questions),
            " (overwrite)" if overlap else "",
        )
        return ImportResult(
            surveys=parsed.surveys,
            questions_imported=len(parsed.questions),
            overwrite=overwrite,
        )

    def validate(self, parsed: ParsedImport, working: Dict[str, Any]) -> List[RecordError]:
        """Validate incoming records against the working store plus the batch."""
        all_surveys = working["surveys"] + parsed.surveys
        all_questions = working["questions"] + parsed.questions
        record_errors: List[RecordError] = []

        seen: Set[Any] = set()
        for idx, survey in enumerate(parsed.surveys, start=1):
            errors = validate_survey(survey)
            survey_id = survey.get("surveyId")
            if survey_id in seen:
                errors.append(REPEATED_SURVEY_MESSAGE)
            seen.add(survey_id)
            if errors:
                record_errors.append(RecordError("survey", idx, survey_id, errors))

        for idx, question in enumerate(parsed.questions, start=1):
            errors = validate_question(
                question,
                all_surveys,
                all_questions,
                verify_source_questions=self.config.verify_source_questions,
            )
            if errors:
                record_errors.append(
                    RecordError("question", idx, question.get("questionId"), errors)
                )

        return record_errors

    @staticmethod
    def _discard_upload(path) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error("Failed to delete uploaded file %s: %s", path, e)

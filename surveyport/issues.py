"""
Structured issue/error handling for surveyport imports.

This module provides:
- Issue dataclass for structured error reporting
- Error code definitions with fix hints
- RecordError for per-record validation failures
- ImportRejected, raised when an import batch is refused
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any


class Severity(Enum):
    """Issue severity levels"""
    ERROR = "ERROR"


@dataclass
class Issue:
    """
    Structured import issue.

    Attributes:
        code: Unique error code (e.g., "IMPORT001")
        severity: Issue severity
        message: Human-readable error message
        fix_hint: Suggestion for how to fix the issue (optional)
        details: Additional context (optional)
    """
    code: str
    severity: Severity
    message: str
    fix_hint: Optional[str] = None
    details: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
            "fix_hint": self.fix_hint,
            "details": self.details,
        }

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.severity.value}: {self.message}"]
        if self.fix_hint:
            parts.append(f"  Fix: {self.fix_hint}")
        return "\n".join(parts)


# =============================================================================
# ERROR CODE DEFINITIONS
# =============================================================================
# Format: CODE -> (default_message, fix_hint)
#   IMPORT0xx: Malformed input (rejected before row data is used)
#   IMPORT1xx: Duplicate-key conflicts
#   IMPORT2xx: Record validation failures
#   STORE9xx:  Persistence errors

ERROR_CODES: Dict[str, Dict[str, str]] = {
    "IMPORT001": {
        "message": "Unsupported file format. Please upload XLSX or CSV file.",
        "fix_hint": "Save the data as .xlsx (with Survey Master and Question Master sheets) or as .csv/.tsv",
    },
    "IMPORT002": {
        "message": "Survey Master and Question Master sheets are required for Excel imports.",
        "fix_hint": "Name the sheets exactly 'Survey Master' and 'Question Master' and fill in at least one row each",
    },
    "IMPORT003": {
        "message": "Could not detect CSV type. Please upload a Survey Master or Question Master CSV.",
        "fix_hint": "Include a 'Survey ID' or 'Question ID' column, or pass sheetType=survey|question",
    },
    "IMPORT004": {
        "message": "No file uploaded",
        "fix_hint": "Send the file as multipart form field 'file'",
    },
    "IMPORT005": {
        "message": "Unsupported sheetType",
        "fix_hint": "Use sheetType=survey, question or both",
    },
    "IMPORT101": {
        "message": "Duplicate survey IDs found",
        "fix_hint": "Retry with overwrite=true to replace existing surveys",
    },
    "IMPORT201": {
        "message": "Validation failed",
        "fix_hint": "Correct every listed record and re-import the whole batch",
    },
    "STORE901": {
        "message": "Failed to persist store",
        "fix_hint": "Check that the store directory exists and is writable",
    },
    "STORE902": {
        "message": "Store document is corrupt",
        "fix_hint": "Restore the store file from a backup; it is never repaired automatically",
    },
}


def create_issue(
    code: str,
    severity: Severity = Severity.ERROR,
    message: Optional[str] = None,
    fix_hint: Optional[str] = None,
    details: Optional[Any] = None,
) -> Issue:
    """
    Create an Issue with defaults from ERROR_CODES.

    Args:
        code: Error code (e.g., "IMPORT001")
        severity: Override default severity
        message: Override default message
        fix_hint: Override default fix hint
        details: Additional context

    Returns:
        Issue instance
    """
    defaults = ERROR_CODES.get(code, {})
    return Issue(
        code=code,
        severity=severity,
        message=message or defaults.get("message", f"Unknown error: {code}"),
        fix_hint=fix_hint or defaults.get("fix_hint"),
        details=details,
    )


def error(code: str, message: Optional[str] = None, **kwargs) -> Issue:
    """Shorthand for creating an ERROR issue"""
    return create_issue(code, Severity.ERROR, message=message, **kwargs)


# =============================================================================
# RECORD ERRORS
# =============================================================================

@dataclass
class RecordError:
    """All rule violations for one incoming record.

    ``index`` is the 1-based position of the record in its batch list and
    ``key`` is its surveyId (surveys) or questionId (questions).
    """
    record_type: str
    index: int
    key: Any
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        key_name = "surveyId" if self.record_type == "survey" else "questionId"
        return {
            "type": self.record_type,
            "index": self.index,
            key_name: self.key,
            "errors": list(self.errors),
        }


class ImportRejected(Exception):
    """Raised when an import is refused; the store is left unchanged."""

    def __init__(
        self,
        issue: Issue,
        record_errors: Optional[List[RecordError]] = None,
        surveys_count: int = 0,
        questions_count: int = 0,
    ):
        super().__init__(issue.message)
        self.issue = issue
        self.record_errors = record_errors or []
        self.surveys_count = surveys_count
        self.questions_count = questions_count

    @property
    def code(self) -> str:
        return self.issue.code

    def to_dict(self) -> Dict[str, Any]:
        """JSON body reported to the caller."""
        payload: Dict[str, Any] = {
            "error": self.issue.message,
            "code": self.issue.code,
            "fixHint": self.issue.fix_hint,
        }
        if self.issue.details is not None:
            payload["details"] = self.issue.details
        if self.record_errors:
            payload["validationErrors"] = [e.to_dict() for e in self.record_errors]
            payload["surveysCount"] = self.surveys_count
            payload["questionsCount"] = self.questions_count
        return payload


def summarize_record_errors(record_errors: List[RecordError]) -> Dict[str, Any]:
    """
    Count rejected records by type.

    Returns:
        Dict with total, surveys, questions and violations counts
    """
    summary = {"total": len(record_errors), "surveys": 0, "questions": 0, "violations": 0}
    for rec in record_errors:
        if rec.record_type == "survey":
            summary["surveys"] += 1
        else:
            summary["questions"] += 1
        summary["violations"] += len(rec.errors)
    return summary

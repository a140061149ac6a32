"""Delimited-text adapter: one Survey Master or Question Master file at a time.

A text file carries a single record kind. When the caller does not declare it,
``infer_sheet_type`` decides from the header row and fails closed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from .columns import QUESTION, SURVEY, normalize_header_key
from .excel_base import clean_header, normalize_row

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".csv": ",", ".tsv": "\t"}

SHEET_TYPES = {SURVEY, QUESTION, "both"}


def read_delimited(path: str | Path, sep: Optional[str] = None) -> list[dict[str, Any]]:
    """
    Read a delimited text file into header -> value rows.

    Every cell is read as text (no numeric or NA coercion) and trimmed;
    empty cells stay empty strings. Blank lines are skipped.

    Args:
        path: Path to the .csv/.tsv file
        sep: Delimiter; defaults from the file extension

    Returns:
        List of rows keyed by the original header text

    Raises:
        ValueError: If the file cannot be parsed
    """
    input_path = Path(path)
    if sep is None:
        sep = TEXT_EXTENSIONS.get(input_path.suffix.lower(), ",")

    try:
        df = pd.read_csv(
            input_path,
            sep=sep,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError:
        return []
    except Exception as e:
        raise ValueError(f"Failed to read CSV: {e}") from e

    df = df.rename(columns={c: clean_header(c) for c in df.columns})
    rows = [normalize_row(record) for record in df.to_dict(orient="records")]
    rows = [r for r in rows if any(v not in (None, "") for v in r.values())]

    logger.debug("Read %d rows from %s", len(rows), input_path.name)
    return rows


def infer_sheet_type(rows: list[dict[str, Any]], declared: Optional[str] = None) -> Optional[str]:
    """
    Decide whether text rows hold survey or question records.

    A declared "survey"/"question" wins. Otherwise a question-id column means
    question data, else a survey-id column means survey data, else the kind
    is unknown and None is returned. A file with both id columns counts as
    question data.
    """
    if declared in (SURVEY, QUESTION):
        return declared

    if not rows:
        return None

    normalized = {normalize_header_key(k) for k in rows[0].keys()}
    if "questionid" in normalized:
        return QUESTION
    if "surveyid" in normalized:
        return SURVEY
    return None

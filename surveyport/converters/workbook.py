"""Workbook adapter: reads the Survey Master and Question Master sheets.

Each sheet is read independently with the first row as header. Output rows map
the original header text to the normalized cell value; no column mapping
happens here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from openpyxl import load_workbook

from .excel_base import clean_header, is_empty_row, normalize_cell_value

logger = logging.getLogger(__name__)

SURVEY_SHEET = "Survey Master"
QUESTION_SHEET = "Question Master"

WORKBOOK_EXTENSIONS = {".xlsx", ".xlsm"}


@dataclass
class WorkbookRows:
    survey_rows: list[dict[str, Any]] = field(default_factory=list)
    question_rows: list[dict[str, Any]] = field(default_factory=list)
    has_survey_master: bool = False
    has_question_master: bool = False


def _cell_value(cell) -> Any:
    hyperlink = cell.hyperlink.target if cell.hyperlink is not None else None
    return normalize_cell_value(cell.value, hyperlink=hyperlink)


def read_sheet_rows(worksheet) -> list[dict[str, Any]]:
    """Read one worksheet into header -> value rows.

    Columns with an empty header cell are ignored, as are rows whose cells
    are all empty.
    """
    rows_iter = worksheet.iter_rows()
    try:
        header_cells = next(rows_iter)
    except StopIteration:
        return []

    headers: list[str | None] = []
    for cell in header_cells:
        value = _cell_value(cell)
        headers.append(clean_header(value) if value not in (None, "") else None)

    rows: list[dict[str, Any]] = []
    for cells in rows_iter:
        values = [_cell_value(c) for c in cells]
        if is_empty_row(values):
            continue
        row: dict[str, Any] = {}
        for header, value in zip(headers, values):
            if header is None:
                continue
            row[header] = value
        rows.append(row)
    return rows


def read_workbook(path: str | Path) -> WorkbookRows:
    """
    Read the two master sheets of a workbook.

    Formula cells are read as their cached results; styled text is read as
    rich text and flattened to plain text.

    Args:
        path: Path to an .xlsx/.xlsm file

    Returns:
        WorkbookRows with raw rows per sheet and sheet presence flags

    Raises:
        ValueError: If the file cannot be opened as a workbook
    """
    try:
        wb = load_workbook(filename=str(path), data_only=True, rich_text=True)
    except Exception as e:
        raise ValueError(f"Failed to read Excel: {e}") from e

    result = WorkbookRows()
    try:
        if SURVEY_SHEET in wb.sheetnames:
            result.has_survey_master = True
            result.survey_rows = read_sheet_rows(wb[SURVEY_SHEET])
        if QUESTION_SHEET in wb.sheetnames:
            result.has_question_master = True
            result.question_rows = read_sheet_rows(wb[QUESTION_SHEET])
    finally:
        wb.close()

    logger.debug(
        "Read workbook %s: %d survey rows, %d question rows",
        Path(path).name,
        len(result.survey_rows),
        len(result.question_rows),
    )
    return result

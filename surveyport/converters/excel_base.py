"""
Base utilities for spreadsheet-to-record conversion in surveyport.
Shared cell normalization for the workbook and delimited-text adapters.
"""

import datetime
import math
from typing import Any, Dict, List, Optional

from openpyxl.cell.rich_text import CellRichText


DATE_FORMAT = "%d/%m/%Y"


def format_date(value: datetime.date) -> str:
    """Render a date (or datetime) as DD/MM/YYYY."""
    return value.strftime(DATE_FORMAT)


def normalize_cell_value(value: Any, hyperlink: Optional[str] = None) -> Any:
    """
    Reduce a raw cell value to the canonical scalar stored on a record.

    Empty stays empty: None/NaN become None, an empty string stays "".
    Dates become DD/MM/YYYY, rich text runs become their plain text,
    a hyperlink cell yields its display text (or the link target when the
    cell shows nothing), strings are trimmed. Formula cells are expected to
    arrive as their cached result.
    """
    if value is None:
        return hyperlink.strip() if hyperlink else None

    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return int(value)
        return value

    if isinstance(value, (datetime.datetime, datetime.date)):
        return format_date(value)

    if isinstance(value, datetime.time):
        return value.strftime("%H:%M:%S")

    if isinstance(value, datetime.timedelta):
        return str(value)

    if isinstance(value, CellRichText):
        value = "".join(
            part if isinstance(part, str) else part.text for part in value
        )

    if isinstance(value, str):
        text = value.strip()
        if not text and hyperlink:
            return hyperlink.strip()
        return text

    return value


def normalize_row(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize every value of a header -> value row."""
    return {header: normalize_cell_value(value) for header, value in raw.items()}


def is_empty_row(values: List[Any]) -> bool:
    """True when every cell of a row is None or blank."""
    for v in values:
        if v is None:
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return False
    return True


def clean_header(name: Any) -> str:
    """Header text as read from the sheet, trimmed."""
    return str(name).strip()

import re
import json
import logging
from typing import Any, List

from dashlens.core.performance import track_performance
from dashlens.core.schemas import Row
from dashlens.services.detector import parse_number

logger = logging.getLogger(__name__)

# One leading and one trailing quote character
_QUOTE_RE = re.compile(r'^["\']|["\']$')

JSON_EXTENSION = '.json'
CSV_EXTENSION = '.csv'


def _clean_cell(value: str) -> str:
    return _QUOTE_RE.sub('', value.strip())


@track_performance("parse_csv")
def parse_csv(text: str) -> List[Row]:
    """
    Parse comma-delimited text with a header row into records.

    Cells are split on every comma; quoted cells containing commas are not
    supported. A non-empty cell that reads as a number is stored as one.
    A row shorter than the header gets None for the missing cells.

    Returns:
        List of row dicts, or an empty list when there is no data row
    """
    lines = text.strip().split('\n')
    if len(lines) < 2:
        return []

    headers = [_clean_cell(h) for h in lines[0].split(',')]
    rows: List[Row] = []

    for line in lines[1:]:
        values = [_clean_cell(v) for v in line.split(',')]
        row: Row = {}
        for index, header in enumerate(headers):
            value: Any = values[index] if index < len(values) else None
            if value:
                number = parse_number(value)
                if number is not None:
                    value = number
            row[header] = value
        rows.append(row)

    logger.debug(f"Parsed CSV: {len(rows)} rows, {len(headers)} columns")
    return rows


def parse_json_text(text: str) -> Any:
    """
    Parse JSON text.

    Raises:
        ValueError: If the text is not valid JSON
        RecursionError: If the text nests deeper than the decoder allows
    """
    return json.loads(text)


def decode_content(content: bytes) -> str:
    """Decode uploaded bytes, trying UTF-8 (with or without BOM) then latin-1."""
    try:
        return content.decode('utf-8-sig')
    except UnicodeDecodeError:
        logger.info("Content is not valid UTF-8, falling back to latin-1")
        return content.decode('latin1')


def detect_format(filename: str) -> str:
    """Return '.json', '.csv' or '' when the extension does not decide."""
    name = (filename or '').lower()
    if name.endswith(JSON_EXTENSION):
        return JSON_EXTENSION
    if name.endswith(CSV_EXTENSION):
        return CSV_EXTENSION
    return ''

import math
import logging
from typing import Any, Dict, Iterable, List, Optional

from dashlens.core.schemas import FieldProfile, FieldType, Row
from dashlens.services.detector import detect_value_type, is_missing, is_number, to_number

logger = logging.getLogger(__name__)

MAX_SAMPLE_VALUES = 5

# Tie-break order for the dominant type: earlier wins on equal counts
TYPE_PRIORITY = (FieldType.NUMERICAL, FieldType.CATEGORICAL, FieldType.TEMPORAL)


def normalize_value(value: Any) -> str:
    """
    String form used for uniqueness counting.
    Integral floats print without a fractional part so 1 and 1.0 collapse.
    """
    if is_number(value):
        number = to_number(value)
        if number is None:
            return str(value)
        if math.isinf(number):
            return "Infinity" if number > 0 else "-Infinity"
        if isinstance(number, float) and number.is_integer():
            return str(int(number))
        return repr(number) if isinstance(number, float) else str(number)
    return str(value)


def get_cell(row: Any, name: str) -> Any:
    """Read a cell; a missing key or a non-mapping row reads as None."""
    if isinstance(row, dict):
        return row.get(name)
    return None


def analyze_field(name: str, values: Iterable[Any]) -> FieldProfile:
    """
    Profile one column.

    Null cells only bump null_count. Every other cell is classified and
    tallied; the dominant type is the non-unknown type with the most votes,
    ties going to the earlier entry of TYPE_PRIORITY.
    """
    type_count: Dict[FieldType, int] = {t: 0 for t in FieldType}
    valid_values: List[Any] = []
    null_count = 0

    for value in values:
        if is_missing(value):
            null_count += 1
            continue

        value_type = detect_value_type(value)
        type_count[value_type] += 1

        if value_type != FieldType.UNKNOWN:
            valid_values.append(value)

    dominant_type = FieldType.UNKNOWN
    max_count = 0
    for field_type in TYPE_PRIORITY:
        if type_count[field_type] > max_count:
            max_count = type_count[field_type]
            dominant_type = field_type

    unique_count = len({normalize_value(v) for v in valid_values})

    min_val: Optional[float] = None
    max_val: Optional[float] = None
    is_percentage = False

    if dominant_type == FieldType.NUMERICAL:
        numbers = [n for n in (to_number(v) for v in valid_values) if n is not None]
        if numbers:
            min_val = min(numbers)
            max_val = max(numbers)
            is_percentage = (min_val >= 0 and max_val <= 100) or (min_val >= 0 and max_val <= 1)

    return FieldProfile(
        name=name,
        type=dominant_type,
        sample_values=valid_values[:MAX_SAMPLE_VALUES],
        unique_count=unique_count,
        null_count=null_count,
        min=min_val,
        max=max_val,
        is_percentage=is_percentage,
    )


def field_names(rows: List[Row]) -> List[str]:
    """Column names in first-row key order."""
    if not rows or not isinstance(rows[0], dict):
        return []
    return [str(key) for key in rows[0].keys()]


def profile_rows(rows: List[Row]) -> List[FieldProfile]:
    profiles = []
    for name in field_names(rows):
        profiles.append(analyze_field(name, (get_cell(row, name) for row in rows)))

    logger.debug(f"Profiled {len(profiles)} fields over {len(rows)} rows")
    return profiles

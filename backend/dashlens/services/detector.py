"""
Single-value type detection.

Classifies one scalar cell as numerical, temporal, categorical or unknown.
Numeric parsing runs before any date check, so digit-only strings such as
"20240115" are always numerical.
"""
import math
import re
import warnings
from datetime import date
from functools import lru_cache
from typing import Any, Optional, Union

import numpy as np
import pandas as pd

from dashlens.core.schemas import FieldType

Number = Union[int, float]

_DECIMAL_RE = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')
_RADIX_RE = re.compile(r'0([xXoObB])([0-9a-fA-F]+)')
_RADIX_BASES = {'x': 16, 'o': 8, 'b': 2}
_INFINITY = {'Infinity': math.inf, '+Infinity': math.inf, '-Infinity': -math.inf}

# Checked in order, first match wins
TEMPORAL_PATTERNS = [
    re.compile(r'^\d{4}-\d{2}-\d{2}$'),                 # 2024-01-15
    re.compile(r'^\d{4}/\d{2}/\d{2}$'),                 # 2024/01/15
    re.compile(r'^\d{2}:\d{2}(:\d{2})?$'),              # 14:30 or 14:30:00
    re.compile(r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}'),      # ISO datetime
    re.compile(r'^\d{4}-\d{2}-\d{2}\s\d{2}:\d{2}'),     # 2024-01-15 14:30
    re.compile(r'^(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)', re.IGNORECASE),
]

_DIGITS_RE = re.compile(r'^\d+$')

# Strings shorter than this never go through the general date parser
MIN_FREEFORM_DATE_LENGTH = 7


def parse_number(text: str) -> Optional[Number]:
    """
    Parse a whole string as a number, or return None.

    Accepts signed decimals with an optional exponent, ``Infinity`` and
    unsigned hex/octal/binary literals. Words like "nan" or "inf" and
    underscore-grouped digits are not numbers. Integral results come back
    as ``int`` so that "1" and "1.0" read as the same value.
    """
    s = text.strip()
    if not s:
        return None

    if _DECIMAL_RE.fullmatch(s):
        value = float(s)
        if value.is_integer():
            return int(value)
        return value

    if s in _INFINITY:
        return _INFINITY[s]

    match = _RADIX_RE.fullmatch(s)
    if match:
        try:
            return int(match.group(2), _RADIX_BASES[match.group(1).lower()])
        except ValueError:
            return None

    return None


def is_missing(value: Any) -> bool:
    """Null cells: None or the empty string."""
    return value is None or (isinstance(value, str) and value == '')


def is_number(value: Any) -> bool:
    """True for real numeric scalars (booleans excluded)."""
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def _is_nan(value: Any) -> bool:
    return isinstance(value, (float, np.floating)) and math.isnan(value)


@lru_cache(maxsize=4096)
def _parses_as_date(text: str) -> bool:
    # pandas warns when it has to guess a format; the guess is what we want
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text)
        except (ValueError, TypeError, OverflowError):
            return False
    return not pd.isna(parsed)


def detect_value_type(value: Any) -> FieldType:
    if is_missing(value):
        return FieldType.UNKNOWN

    if is_number(value):
        if _is_nan(value):
            return FieldType.UNKNOWN
        return FieldType.NUMERICAL

    if isinstance(value, str):
        trimmed = value.strip()

        if parse_number(trimmed) is not None:
            return FieldType.NUMERICAL

        for pattern in TEMPORAL_PATTERNS:
            if pattern.search(trimmed):
                return FieldType.TEMPORAL

        if len(trimmed) >= MIN_FREEFORM_DATE_LENGTH and not _DIGITS_RE.match(trimmed):
            if _parses_as_date(trimmed):
                return FieldType.TEMPORAL

        return FieldType.CATEGORICAL

    if isinstance(value, (date, np.datetime64)):
        # NaT is a datetime subclass too
        if pd.isna(value):
            return FieldType.UNKNOWN
        return FieldType.TEMPORAL

    return FieldType.UNKNOWN


def to_number(value: Any) -> Optional[Number]:
    """Coerce a cell to a number for min/max statistics, or None."""
    if is_number(value):
        if _is_nan(value):
            return None
        return value.item() if isinstance(value, np.generic) else value
    if isinstance(value, str):
        return parse_number(value)
    return None

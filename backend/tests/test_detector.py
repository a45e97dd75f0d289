"""
Unit tests for single-value type detection.
"""
import math
import pytest
import numpy as np
import pandas as pd
from datetime import date, datetime
from dashlens.core.schemas import FieldType
from dashlens.services.detector import detect_value_type, parse_number, is_missing, to_number


@pytest.mark.unit
@pytest.mark.parametrize("value", [None, ""])
def test_missing_values_are_unknown(value):
    """None and empty strings are missing."""
    assert detect_value_type(value) == FieldType.UNKNOWN
    assert is_missing(value)


@pytest.mark.unit
@pytest.mark.parametrize("value", [42, 3.5, -1, 0, np.int64(7), np.float64(2.5), "42", " 3.14 ", "-7", "1e3", "0x1F"])
def test_numerical_values(value):
    """Numbers and numeric strings are numerical."""
    assert detect_value_type(value) == FieldType.NUMERICAL


@pytest.mark.unit
def test_digit_strings_are_numerical_not_temporal():
    """Numeric parsing wins over date detection for digit-only strings."""
    assert detect_value_type("20240115") == FieldType.NUMERICAL
    assert detect_value_type("42") != FieldType.TEMPORAL


@pytest.mark.unit
@pytest.mark.parametrize("value", [
    "2024-01-15",
    "2024/01/15",
    "14:30",
    "14:30:00",
    "2024-01-15T10:00:00Z",
    "2024-01-15 14:30",
    "Jan 2024",
    "march 5",
    "12/25/2024",
])
def test_temporal_strings(value):
    """Date and time strings are temporal."""
    assert detect_value_type(value) == FieldType.TEMPORAL


@pytest.mark.unit
@pytest.mark.parametrize("value", ["hello", "apple pie", "hello world", "A", "nan", "inf", "1_000", "   "])
def test_categorical_strings(value):
    """Other strings are categorical."""
    assert detect_value_type(value) == FieldType.CATEGORICAL


@pytest.mark.unit
def test_date_objects_are_temporal():
    """Date and timestamp objects are temporal."""
    assert detect_value_type(datetime(2024, 1, 1, 12, 0)) == FieldType.TEMPORAL
    assert detect_value_type(date(2024, 1, 1)) == FieldType.TEMPORAL
    assert detect_value_type(pd.Timestamp("2024-01-01")) == FieldType.TEMPORAL


@pytest.mark.unit
@pytest.mark.parametrize("value", [float("nan"), np.float64("nan"), pd.NaT, True, False, {"a": 1}, [1, 2]])
def test_unclassifiable_values_are_unknown(value):
    """NaN, NaT, booleans and containers are unknown."""
    assert detect_value_type(value) == FieldType.UNKNOWN


@pytest.mark.unit
def test_parse_number():
    """Decimals, radix literals and Infinity parse as numbers."""
    assert parse_number("1.0") == 1
    assert isinstance(parse_number("1.0"), int)
    assert parse_number("-2.5") == -2.5
    assert parse_number(" 7 ") == 7
    assert parse_number(".5") == 0.5
    assert parse_number("+3") == 3
    assert parse_number("0b101") == 5
    assert parse_number("0o17") == 15
    assert parse_number("Infinity") == math.inf
    assert parse_number("-Infinity") == -math.inf


@pytest.mark.unit
@pytest.mark.parametrize("text", ["", "  ", "abc", "nan", "inf", "1_000", "1,000", "12px", "0xZZ", "--1"])
def test_parse_number_rejects(text):
    """Strings that are not whole numbers give None."""
    assert parse_number(text) is None


@pytest.mark.unit
def test_to_number():
    """Cells coerce to plain Python numbers."""
    assert to_number(5) == 5
    assert to_number(np.int64(5)) == 5
    assert isinstance(to_number(np.int64(5)), int)
    assert to_number("2.5") == 2.5
    assert to_number("abc") is None
    assert to_number(float("nan")) is None
    assert to_number(True) is None

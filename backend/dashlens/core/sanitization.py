"""
Input sanitization utilities for user-provided names.
"""
import re

_CONTROL_CHARS_RE = re.compile(r'[\x00-\x1f\x7f-\x9f]')


def sanitize_filename(filename: str, max_length: int = 255) -> str:
    """
    Sanitize an uploaded filename to prevent path traversal and log injection.

    Args:
        filename: Original filename
        max_length: Maximum length of sanitized filename

    Returns:
        Sanitized filename safe for logging and extension checks
    """
    if not filename:
        return "unknown"

    # Remove path components
    filename = filename.split('/')[-1].split('\\')[-1]

    filename = _CONTROL_CHARS_RE.sub('', filename)

    # Remove leading/trailing dots and spaces
    filename = filename.strip('. ')

    if len(filename) > max_length:
        filename = filename[:max_length]

    return filename or "unknown"


def sanitize_source_name(name: str, max_length: int = 200) -> str:
    """Clean a data-source display name: no control characters, collapsed whitespace."""
    if not name:
        return "Untitled"

    name = _CONTROL_CHARS_RE.sub(' ', name)
    name = ' '.join(name.split())

    if len(name) > max_length:
        name = name[:max_length]

    return name or "Untitled"


def sanitize_for_logging(value: str, max_length: int = 500) -> str:
    """
    Sanitize value for safe logging (prevents log injection).

    Args:
        value: Value to sanitize
        max_length: Maximum length

    Returns:
        Sanitized value safe for logging
    """
    if not value:
        return ""

    value = re.sub(r'[\r\n]', ' ', value)
    value = _CONTROL_CHARS_RE.sub('', value)

    if len(value) > max_length:
        value = value[:max_length] + "..."

    return value

"""
Error codes and user-facing messages for the HTTP layer.
"""
from typing import Dict, Optional


class ErrorCodes:
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    FILE_EMPTY = "FILE_EMPTY"
    DATA_SOURCE_NOT_FOUND = "DATA_SOURCE_NOT_FOUND"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    TIMEOUT = "TIMEOUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    ErrorCodes.FILE_TOO_LARGE: {
        "message": "File is too large",
        "detail": "The uploaded file exceeds the upload size limit.",
        "suggestion": "Upload a smaller sample of the data, or only the columns you want to chart."
    },
    ErrorCodes.FILE_EMPTY: {
        "message": "File is empty",
        "detail": "The uploaded file contains no data.",
        "suggestion": "Check that the file was saved correctly and upload it again."
    },
    ErrorCodes.DATA_SOURCE_NOT_FOUND: {
        "message": "Data source not found",
        "detail": "No data source exists with this id.",
        "suggestion": "Register the data again, then use the id that is returned."
    },
    ErrorCodes.RATE_LIMIT_EXCEEDED: {
        "message": "Too many requests",
        "detail": "Uploads are rate limited per client.",
        "suggestion": "Wait a minute and try again."
    },
    ErrorCodes.TIMEOUT: {
        "message": "Request timed out",
        "detail": "The data took too long to analyze.",
        "suggestion": "Try again with a smaller dataset."
    },
    ErrorCodes.UNKNOWN_ERROR: {
        "message": "Something unexpected happened",
        "detail": "The request could not be completed.",
        "suggestion": "Try again in a moment."
    }
}


def get_error_response(error_code: str, additional_detail: Optional[str] = None) -> Dict[str, str]:
    """
    Build a structured error body for an error code.

    Args:
        error_code: One of the ErrorCodes constants
        additional_detail: Optional text appended to the detail

    Returns:
        Dictionary with code, message, detail and suggestion
    """
    error_info = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCodes.UNKNOWN_ERROR])

    response = {
        "code": error_code,
        "message": error_info["message"],
        "detail": error_info["detail"],
        "suggestion": error_info["suggestion"]
    }

    if additional_detail:
        response["detail"] = f"{response['detail']} {additional_detail}"

    return response

# orayata/utils/errors.py
"""
Standardized API error responses.

All errors follow the format: {"error": "error_code", "detail": "optional message"}
Error codes are snake_case and machine-parseable.
"""

from flask import jsonify
from typing import Optional


def error_response(
    code: str,
    status: int = 400,
    detail: Optional[str] = None,
    **extra
):
    """
    Create a standardized error response.

    Args:
        code: Machine-readable error code (snake_case)
        status: HTTP status code
        detail: Human-readable explanation (optional)
        **extra: Additional fields to include in response

    Returns:
        Tuple of (jsonify response, status code)
    """
    payload = {"error": code}
    if detail:
        payload["detail"] = detail
    payload.update(extra)
    return jsonify(payload), status


# Validation (400)
def missing_field(field: str):
    """Required field is missing."""
    return error_response(f"{field}_required", 400, f"Missing required field: {field}")


def invalid_field(field: str, detail: str = None):
    """Field value is invalid."""
    return error_response(f"invalid_{field}", 400, detail)


# Server Error (500)
def server_error(code: str = "internal_error", detail: str = None):
    """Internal server error."""
    return error_response(code, 500, detail)


# -----------------------------------------------------------------------------
# Source Generation Errors
# -----------------------------------------------------------------------------

def malformed_reference(detail: str = None):
    """A link or citation could not be turned into a Sefaria reference."""
    return error_response("malformed_reference", 400, detail)


def unrepairable_reference(detail: str = None):
    """The generated source's link stayed invalid after repair."""
    return error_response("unrepairable_reference", 422, detail)


def generator_unavailable(detail: str = None):
    """The AI generator failed or returned an incomplete source."""
    return error_response("generator_unavailable", 502, detail)

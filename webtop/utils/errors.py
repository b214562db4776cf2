from __future__ import annotations

import logging
import re
from typing import Optional

from fastapi import HTTPException, status

logger = logging.getLogger("webtop.errors")

# Patterns that might leak sensitive information
SENSITIVE_PATTERNS = [
    r"api[_-]?key[=:\s]+\S+",
    r"password[=:\s]+\S+",
    r"token[=:\s]+\S+",
    r"secret[=:\s]+\S+",
    r"bearer\s+\S+",
    r"/home/\S+",
    r"/var/\S+",
    r"/etc/\S+",
    r"traceback",
]


def _sanitize_error_message(message: str) -> str:
    """Remove potentially sensitive information from error messages.

    Backend error texts are relayed into panels and API responses, so
    credentials, file paths and stack traces are redacted first.
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, "[REDACTED]", sanitized, flags=re.IGNORECASE)

    if len(sanitized) > 500:
        sanitized = sanitized[:500] + "... [truncated]"

    return sanitized


def api_error(
    message: str,
    *,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    code: str = "bad_request",
    internal_message: Optional[str] = None,
    sanitize: bool = True,
) -> HTTPException:
    """Create an API error with optional message sanitization.

    Args:
        message: The error message to show to users
        status_code: HTTP status code
        code: Error code for programmatic handling
        internal_message: Optional detailed message for logging only
        sanitize: Whether to sanitize the message (default True)

    Returns:
        HTTPException with sanitized error details
    """
    if internal_message:
        logger.error(f"[{code}] Internal: {internal_message}")

    user_message = _sanitize_error_message(message) if sanitize else message

    return HTTPException(
        status_code=status_code,
        detail={"error": {"message": user_message, "code": code}}
    )


def not_found(message: str, code: str = "not_found") -> HTTPException:
    return api_error(message, status_code=status.HTTP_404_NOT_FOUND, code=code, sanitize=False)


"""
Request correlation IDs.

A correlation ID ties together the log lines, Sentry events and error
responses produced while serving one forum request. Clients may send their
own ID in the X-Correlation-ID header so a failed vote or report can be
traced from the browser console to the server log.
"""

import re
import uuid
from contextvars import ContextVar

# Request-scoped correlation ID (empty outside of a request)
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

# Client-supplied IDs end up in logs and response headers
_CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9-]{1,64}")


def generate_correlation_id() -> str:
    """
    Create a new correlation ID.

    Format: 8 lowercase hex characters (e.g. "3f9a0c1e"). That is short
    enough for a user to quote when reporting a problem, and with about
    4 billion values collisions between concurrent requests are unlikely.

    Returns:
        8-character hexadecimal string.
    """
    return uuid.uuid4().hex[:8]


def correlation_id_from_header(header_value: str | None) -> str:
    """
    Pick the correlation ID for an incoming request.

    Args:
        header_value: Raw X-Correlation-ID header, None if absent.

    Returns:
        The client's ID when it is 1-64 letters, digits or dashes,
        otherwise a freshly generated one.
    """
    if header_value and _CLIENT_ID_PATTERN.fullmatch(header_value):
        return header_value
    return generate_correlation_id()


def get_correlation_id() -> str:
    """
    Get the correlation ID of the request being served.

    Returns:
        The ID bound to the current context, or an empty string outside a
        request (startup, background work, tests calling services directly).
    """
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """
    Bind a correlation ID to the current context.

    Domain exceptions raised later in the same request pick it up.

    Args:
        correlation_id: The ID to bind.
    """
    correlation_id_var.set(correlation_id)

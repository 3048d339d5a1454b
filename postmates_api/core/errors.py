"""
Errors — Exception types raised by the Postmates client and the error
classifier that turns non-2xx responses into them.

The classifier is the only place an HTTP status is inspected. It never looks
inside a successful body for platform business errors (e.g. "store closed");
those stay in the returned data for the caller to interpret.

Network-level failures (DNS, connection reset, timeout) are not classified
here and surface as requests exceptions.
"""

from typing import Any, Optional


class PostmatesError(Exception):
    """Base class for all errors raised by this package."""


class RemoteAPIError(PostmatesError):
    """The Postmates API answered with a status outside 200-299.

    Attributes:
        status: Numeric HTTP status code.
        status_text: HTTP reason phrase (may be empty).
        body: Parsed JSON body, or the raw text when it is not JSON.
        response: The underlying requests.Response, for callers that need headers.
    """

    def __init__(self, status: int, status_text: str = "", body: Any = None, response=None):
        self.status = status
        self.status_text = status_text or ""
        self.body = body
        self.response = response
        super().__init__(f"HTTP Error Response: {status} {self.status_text}".rstrip())


class MalformedCookieError(PostmatesError, ValueError):
    """A Set-Cookie line could not be split into a name and a value."""

    def __init__(self, line: str):
        self.line = line
        super().__init__(f"Malformed Set-Cookie line (no '='): {line!r}")


class WorkflowError(PostmatesError):
    """A workflow transition could not be performed."""


class WorkflowStateError(WorkflowError):
    """A cart step was requested on a session that has no draft order yet."""


class LocationNotFoundError(WorkflowError):
    """Location autocomplete returned no candidates for a query."""


def _read_body(response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def classify_response(response) -> None:
    """Raise RemoteAPIError when a response is not a 2xx success.

    Args:
        response: A requests.Response (or anything with status_code, reason,
                  json() and text).

    Raises:
        RemoteAPIError: If status_code is outside 200-299.
    """
    status = response.status_code
    if 200 <= status <= 299:
        return
    raise RemoteAPIError(
        status=status,
        status_text=getattr(response, "reason", "") or "",
        body=_read_body(response),
        response=response,
    )


def error_payload(error: RemoteAPIError) -> dict:
    """Render a RemoteAPIError as a JSON-serializable dict."""
    body: Optional[Any] = error.body
    return {
        "error": str(error),
        "status": error.status,
        "statusText": error.status_text,
        "body": body,
    }

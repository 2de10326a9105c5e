"""HTTP error taxonomy for the catalog API.

Every error is an ``HTTPException`` so handlers raise them directly and the
app renders them as ``{"error": message}``.
"""
from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Bad or missing input."""

    def __init__(self, detail: str = "Invalid request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(HTTPException):
    """Singular lookup found nothing."""

    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class MethodNotAllowed(HTTPException):
    """Non-GET request on a read-only route."""

    def __init__(self, detail: str = "Method not allowed", allow: str = "GET"):
        super().__init__(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            detail=detail,
            headers={"Allow": allow},
        )


class InternalError(HTTPException):
    """Store or unexpected failure. The detail never carries internals."""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)

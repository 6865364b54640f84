"""Typed API errors.

Each error is an ``HTTPException`` so services can raise it directly and
FastAPI renders it as ``{"detail": ...}`` with the matching status code.
"""
from typing import Any, Optional

from fastapi import HTTPException, status


class NotFound(HTTPException):
    def __init__(self, entity: str = "Event"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} not found")


class CapacityExceeded(HTTPException):
    def __init__(self, ceiling: int):
        self.ceiling = ceiling
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"System limit exceeded. Current maximum event capacity: {ceiling}",
        )


class ConfigurationError(HTTPException):
    def __init__(self, detail: str = "Event settings not configured"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


class UploadError(HTTPException):
    """Media upload failed; always raised before any database mutation."""

    def __init__(self, detail: str = "Failed to upload media"):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


class InvalidPayload(HTTPException):
    def __init__(self, detail: Any):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class PersistError(HTTPException):
    def __init__(self, detail: str, errors: Optional[list] = None):
        body: Any = {"message": detail, "errors": errors} if errors else detail
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=body)


class ConflictError(HTTPException):
    def __init__(self, detail: str = "Event was modified concurrently. Re-fetch and retry."):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class NotificationInsertError(HTTPException):
    def __init__(self, detail: str = "Failed to create participant notifications"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)

"""Application exception types."""

from app.schemas.error import ErrorResponse

NOT_FOUND_MESSAGE = "Resource not found"


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    def __init__(self, status_code: int, code: str, message: str, details: dict | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)


def no_leak_not_found() -> ApiError:
    """Not-found error shared by every surface that must not confirm existence."""
    return ApiError(status_code=404, code="RESOURCE_NOT_FOUND", message=NOT_FOUND_MESSAGE)


__all__ = ["ApiError", "NOT_FOUND_MESSAGE", "no_leak_not_found"]

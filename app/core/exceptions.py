from fastapi import status


class AppError(Exception):
    """Base error carrying an HTTP status and a short machine-readable reason."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_reason: str = "Internal error"

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason or self.default_reason
        super().__init__(self.reason)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_reason = "Invalid request"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_reason = "Unauthorized"


class NotFoundError(AppError):
    """Absent resource, or one the caller is not allowed to see."""

    status_code = status.HTTP_404_NOT_FOUND
    default_reason = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_reason = "Already exist"


class StorageUnavailable(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_reason = "Storage unavailable"

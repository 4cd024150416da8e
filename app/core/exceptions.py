from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(ServiceError):
    """Bad amount, missing field, over-payment. Nothing was written."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class NotFoundError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ConstraintError(ServiceError):
    """Referential rule violated (e.g. deleting a grade still in use)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class AuthorizationError(ServiceError):
    def __init__(self, message: str = "Only administrators can perform this action") -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN)


class BackendUnavailableError(ServiceError):
    """Database unreachable; surfaced as a generic failure, never retried."""

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)

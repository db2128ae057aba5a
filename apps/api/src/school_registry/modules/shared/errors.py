"""
Service Errors

Exceptions raised by the service layer. Each carries the HTTP status code and
machine-readable error code the routers use when converting it to a response.
"""


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class ValidationError(ServiceError):
    """Raised when input is missing or malformed. Never reaches the store."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
        )


class NotFoundError(ServiceError):
    """Raised when the target record does not exist."""

    def __init__(self, resource: str, resource_id: int | str | None = None):
        message = (
            f"{resource} {resource_id} not found"
            if resource_id is not None
            else f"{resource} not found"
        )
        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            status_code=404,
        )


class ConflictError(ServiceError):
    """Raised when a request conflicts with the current state of a record."""

    def __init__(self, message: str, error_code: str = "CONFLICT"):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=409,
        )


class StoreError(ServiceError):
    """Raised when the database fails. The caller only sees a generic message."""

    def __init__(self, message: str = "A storage error occurred. Please try again later."):
        super().__init__(
            message=message,
            error_code="STORE_ERROR",
            status_code=500,
        )

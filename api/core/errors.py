"""Typed application errors.

Every error a request handler can raise on purpose derives from AppError and
carries its HTTP status. main.py turns them into the uniform error body:

    {"error": "<message>", "statusCode": 404, "timestamp": "<ISO-8601>"}
"""

from datetime import UTC, datetime


def error_body(message: str, status_code: int) -> dict[str, str | int]:
    return {
        "error": message,
        "statusCode": status_code,
        "timestamp": datetime.now(UTC).isoformat(),
    }


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> dict[str, str | int]:
        return error_body(self.message, self.status_code)


class ValidationError(AppError):
    """Malformed id, body or query, including pagination out of range."""

    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class UnauthorizedError(AppError):
    status_code = 401
    error_code = "UNAUTHORIZED"
    default_message = "Please log in to access this resource"


class ForbiddenError(AppError):
    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "You do not have permission to perform this action"


class NotFoundError(AppError):
    """No active row matches the identifier."""

    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, entity: str, identifier: object) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} with identifier {identifier} not found")


class ConflictError(AppError):
    """Uniqueness violation or a referential guard blocking a delete."""

    status_code = 409
    error_code = "CONFLICT"
    default_message = "Conflict with existing data"

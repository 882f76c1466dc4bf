from typing import Any


class ApiError(Exception):
    """Base error carried up to the HTTP boundary.

    Fields:
    - status_code (int): HTTP status used in the failure envelope
    - message (str): client-safe summary
    - errors (list): optional structured details
    """
    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None, errors: list[Any] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = list(errors or [])
        super().__init__(self.message)


class InvalidInputError(ApiError):
    status_code = 400
    default_message = "Invalid input"


class UploadError(ApiError):
    status_code = 400
    default_message = "Error while uploading file"


class UnauthorizedError(ApiError):
    status_code = 401
    default_message = "Unauthorized request"


class InvalidTokenError(UnauthorizedError):
    default_message = "Invalid token"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class ConflictError(ApiError):
    status_code = 409
    default_message = "Conflict"


class InternalError(ApiError):
    status_code = 500

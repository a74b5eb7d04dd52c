from typing import Any, Dict, Optional


class ApiError(Exception):
    """Base for every error that is rendered as a JSON response."""

    status_code = 500

    def __init__(
        self,
        message: str,
        details: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.headers = headers


class MissingFieldsError(ApiError):
    status_code = 400


class Unauthorized(ApiError):
    status_code = 401

    def __init__(self, message: str, details: Any = None):
        super().__init__(message, details, headers={"WWW-Authenticate": "Bearer"})


class NotFound(ApiError):
    status_code = 404


class StoreError(ApiError):
    status_code = 500

    def with_message(self, message: str) -> "StoreError":
        """Same failure, re-labelled for the operation that hit it."""
        return type(self)(message, details=self.details)


class StoreUnavailable(StoreError):
    pass


class InvalidToken(Exception):
    pass

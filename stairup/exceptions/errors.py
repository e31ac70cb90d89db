from fastapi import status
from fastapi.responses import JSONResponse

class ApplicationException(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_response(self):
        return JSONResponse(
            status_code=self.status_code,
            content={"error": self.message}
        )


class ValidationError(ApplicationException):
    """Bad input shape or range, raised before any remote call."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class ConflictError(ApplicationException):
    """The remote state already satisfies the intent (e.g. an active session exists)."""
    status_code = status.HTTP_409_CONFLICT


class StateError(ApplicationException):
    """Operation is invalid for the session's current lifecycle state."""
    status_code = status.HTTP_409_CONFLICT


class NotFoundError(ApplicationException):
    status_code = status.HTTP_404_NOT_FOUND


class AuthError(ApplicationException):
    """Token missing, expired or rejected."""
    status_code = status.HTTP_401_UNAUTHORIZED


class NetworkError(ApplicationException):
    """Transport failure, no response received."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class CooldownActiveError(ApplicationException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after

    def to_response(self):
        return JSONResponse(
            status_code=self.status_code,
            content={"error": self.message, "retry_after": self.retry_after},
            headers={"Retry-After": str(self.retry_after)}
        )

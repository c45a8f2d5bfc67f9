__all__ = ["ApiError", "ValidationFailed", "Conflict", "InvalidCredentials", "NotFound",
           "UserNotRegistered", "Unauthorized"]


class ApiError(Exception):
    status_code = 500
    headers = None


# Request exceptions
class ValidationFailed(ApiError):
    status_code = 400


class Conflict(ApiError):
    status_code = 400


# Lookup exceptions
class NotFound(ApiError):
    status_code = 404


class UserNotRegistered(NotFound):
    # login reports an unknown email as a bad request, not a missing resource
    status_code = 400


# Auth exceptions
class InvalidCredentials(ApiError):
    status_code = 400


class Unauthorized(ApiError):
    status_code = 401
    headers = {"WWW-Authenticate": "Bearer"}

# blogserver/core/errors.py


class BlogError(Exception):
    """
    Base class for errors the request handlers know how to answer.
    """
    status_code = 500
    message = "Something went wrong!"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationError(BlogError):
    status_code = 400
    message = "Invalid input"


class DuplicateUsername(BlogError):
    status_code = 400
    message = "Username already taken. Try another one."


class InvalidCredentials(BlogError):
    status_code = 401
    message = "Invalid credentials"


class InvalidToken(BlogError):
    status_code = 401
    message = "Could not validate credentials"


class NotFound(BlogError):
    status_code = 404
    message = "Not found"


class UpstreamUnavailable(BlogError):
    status_code = 503
    message = "Service temporarily unavailable"


class InternalFailure(BlogError):
    status_code = 500


class LoginRequired(BlogError):
    status_code = 303
    message = "Login required"

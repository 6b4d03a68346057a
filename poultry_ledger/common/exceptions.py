class AppError(Exception):
    """Base for errors that map onto an HTTP status."""
    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(AppError):
    status_code = 404
    error = "Not Found"


class GroupNotFoundError(NotFoundError):
    pass


class AccountNotFoundError(NotFoundError):
    pass


class ValidationError(AppError):
    status_code = 400
    error = "Bad Request"


class InvalidParentError(ValidationError):
    pass


class CircularReferenceError(ValidationError):
    def __init__(self, message: str = "Circular reference detected. A group cannot be its own ancestor."):
        super().__init__(message)


class GroupInUseError(ValidationError):
    pass


class ConcurrentUpdateError(AppError):
    status_code = 409
    error = "Conflict"

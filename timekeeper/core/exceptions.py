class TimekeeperException(Exception):
    """Base exception for timekeeper"""

    pass


class UnauthorizedException(TimekeeperException):
    """Raised when credentials or tokens are missing or invalid"""

    pass


class NotFoundException(TimekeeperException):
    """Raised when resource not found (or belongs to another tenant)"""

    pass


class ForbiddenException(TimekeeperException):
    """Raised when role or tenant does not permit the operation"""

    pass


class ValidationException(TimekeeperException):
    """Raised for business logic validation errors"""

    pass


class ConflictException(TimekeeperException):
    """Raised when a timesheet is not in the state an operation requires"""

    pass
